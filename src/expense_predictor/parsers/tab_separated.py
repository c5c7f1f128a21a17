from datetime import datetime
from pathlib import Path

from expense_predictor.domain.models import Transaction
from expense_predictor.logging_setup import get_logger
from expense_predictor.parsers.base import ParseResult, StatementParser, parse_amount

logger = get_logger(__name__)


class TabSeparatedParser(StatementParser):
    """
    Parser for plain-text ledgers with one tab-separated record per line.

    Record layout:
        date<TAB>amount<TAB>category

    e.g. `03.01.2019	450.0	Groceries`. Dates default to dd.MM.yyyy.
    Blank lines are ignored; extra columns after the category are too.
    """

    EXTENSIONS = (".txt", ".tsv")

    def parse(self, filepath: str) -> ParseResult:
        self.validate_file(filepath)

        result = ParseResult()
        with open(Path(filepath), "rb") as f:
            for line_no, raw_line in enumerate(f, start=1):
                raw_line = raw_line.rstrip(b"\r\n")
                if not raw_line.strip():
                    continue

                # Decoded per line so one bad byte only costs its own record
                try:
                    result.transactions.append(self.parse_line(raw_line.decode("utf-8")))
                except ValueError as e:
                    line = raw_line.decode("utf-8", errors="replace")
                    message = f"Line {line_no}: could not parse {line!r}: {e}"
                    logger.warning(message)
                    result.error_messages.append(message)

        return result

    def parse_line(self, line: str) -> Transaction:
        """
        Parse a single record.

        Raises:
            ValueError: If the record is missing fields or a field is malformed
        """
        fields = line.split("\t")
        if len(fields) < 3:
            raise ValueError(f"expected 3 tab-separated fields, got {len(fields)}")

        raw_date, raw_amount, category = fields[0].strip(), fields[1].strip(), fields[2].strip()
        if not category:
            raise ValueError("category is empty")

        return Transaction(
            date=datetime.strptime(raw_date, self.date_format).date(),
            amount=parse_amount(raw_amount),
            category=category,
        )
