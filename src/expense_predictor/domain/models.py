from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple


@dataclass(frozen=True)
class Transaction:
    """Core domain model representing a single categorized transaction"""
    date: date
    amount: float
    category: str

    def __repr__(self):
        return f"Transaction({self.date}, {self.amount:+.2f}, {self.category})"


@dataclass(frozen=True)
class Window:
    """
    Trailing slice of a category's history.

    Transactions run oldest to newest and never split a calendar day
    at the old end. span_days is the inclusive number of calendar days
    the slice covers (0 only for an empty window).
    """
    transactions: Tuple[Transaction, ...] = ()
    span_days: int = 0

    def __len__(self) -> int:
        return len(self.transactions)

    @property
    def total_amount(self) -> float:
        return sum(t.amount for t in self.transactions)

    @property
    def daily_rate(self) -> Optional[float]:
        """Average amount per day, or None when there is nothing to average"""
        if not self.transactions or self.span_days <= 0:
            return None
        return self.total_amount / self.span_days


@dataclass(frozen=True)
class Prediction:
    """
    Signals computed for one category against one candidate transaction.

    expense_rate_deviation is None when the long-run rate is zero or
    undefined. Absent amount diffs stay None here; the default used by
    the coefficient is applied at ranking time only.
    """
    count: int
    expense_rate_deviation: Optional[float]
    nearest_amount_diff: Optional[float] = None
    second_nearest_amount_diff: Optional[float] = None
    skipped_comparators: int = 0

    @property
    def is_valid(self) -> bool:
        return self.expense_rate_deviation is not None


@dataclass(frozen=True)
class RankingEntry:
    category: str
    prediction: Prediction
    coefficient: float

    def __str__(self) -> str:
        return f"{self.category}: {self.prediction} {self.coefficient:.4f}"
