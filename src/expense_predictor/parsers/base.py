import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from expense_predictor.config.settings import ConfigLoader
from expense_predictor.domain.models import Transaction


def parse_amount(raw_amount: str) -> float:
    """
    Parse a signed amount.

    Raises:
        ValueError: If the amount is not a number, or is NaN or infinite
    """
    amount = float(raw_amount)
    if not math.isfinite(amount):
        raise ValueError(f"amount {raw_amount!r} is not a finite number")
    return amount


@dataclass
class ParseResult:
    """
    Transactions read from a ledger file, in file order.

    Malformed records never make it into `transactions`; each one leaves
    a message in `error_messages` instead.
    """
    transactions: List[Transaction] = field(default_factory=list)
    error_messages: List[str] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return len(self.error_messages)


class StatementParser(ABC):
    """
    Abstract base class for all ledger file parsers.

    Strategy pattern: each file format gets its own concrete parser
    implementing this interface.
    """

    EXTENSIONS: Iterable[str] = ()

    def __init__(self, date_format: Optional[str] = None):
        """
        Args:
            date_format: strptime format for record dates. If None, the
                configured `date_format` is used.
        """
        if date_format is None:
            date_format = ConfigLoader.load_predictor_config()["date_format"]
        self.date_format = date_format

    @abstractmethod
    def parse(self, filepath: str) -> ParseResult:
        """
        Parse a ledger file.

        Args:
            filepath: Path to the ledger file

        Returns:
            ParseResult with the well-formed transactions and one message
            per malformed record

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        pass

    def validate_file(self, filepath: str) -> None:
        """
        Check that the file exists and has an extension this parser reads.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If the extension is not supported
        """
        path = Path(filepath)

        if not path.exists():
            raise FileNotFoundError(f"File does not exist on path {path}")

        extensions = [ext.lower() for ext in self.EXTENSIONS]
        if extensions and path.suffix.lower() not in extensions:
            raise ValueError(
                f"{self.__class__.__name__} expects {', '.join(extensions)}, got '{path.suffix}'"
            )
