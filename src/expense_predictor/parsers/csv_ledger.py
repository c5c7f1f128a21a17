from datetime import datetime

import pandas as pd

from expense_predictor.domain.models import Transaction
from expense_predictor.logging_setup import get_logger
from expense_predictor.parsers.base import ParseResult, StatementParser, parse_amount

logger = get_logger(__name__)


class CsvLedgerParser(StatementParser):
    """
    Parser for CSV ledgers with a header row.

    Required columns: date, amount, category (case-insensitive). Other
    columns are ignored. Rows keep their file order.
    """

    DATE_COL = "date"
    AMOUNT_COL = "amount"
    CATEGORY_COL = "category"

    EXTENSIONS = (".csv",)

    def parse(self, filepath: str) -> ParseResult:
        self.validate_file(filepath)

        try:
            df = pd.read_csv(
                filepath,
                dtype=str,
                keep_default_na=False,
                skipinitialspace=True,
                encoding="utf-8",
                encoding_errors="replace",
            )
        except Exception as e:
            raise ValueError(f"Invalid file: {e}") from e

        df.columns = [str(col).strip().lower() for col in df.columns]
        required_columns = [self.DATE_COL, self.AMOUNT_COL, self.CATEGORY_COL]
        missing = [col for col in required_columns if col not in df.columns]
        if missing:
            raise ValueError(f"Header is missing required columns: {', '.join(missing)}")

        result = ParseResult()
        # Header is line 1
        for row_no, row in enumerate(df[required_columns].itertuples(index=False), start=2):
            try:
                result.transactions.append(self._parse_row(*row))
            except ValueError as e:
                message = f"Row {row_no}: could not parse {tuple(row)}: {e}"
                logger.warning(message)
                result.error_messages.append(message)

        return result

    def _parse_row(self, raw_date: str, raw_amount: str, category: str) -> Transaction:
        category = category.strip()
        if not category:
            raise ValueError("category is empty")
        if "\ufffd" in category:
            raise ValueError("category is not valid UTF-8")

        return Transaction(
            date=datetime.strptime(raw_date.strip(), self.date_format).date(),
            amount=parse_amount(raw_amount),
            category=category,
        )
