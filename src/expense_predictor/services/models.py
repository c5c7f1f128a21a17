"""
Service layer models - DTOs for service operations.

These models report the results of a prediction session, not domain entities.
"""
from dataclasses import dataclass, field
from typing import List

from expense_predictor.domain.models import RankingEntry, Transaction


@dataclass
class Miss:
    """A transaction whose true category was not in the top-k"""
    transaction: Transaction
    top: List[RankingEntry] = field(default_factory=list)

    def __str__(self) -> str:
        lines = [str(self.transaction)]
        lines.extend(f"  {entry}" for entry in self.top)
        return "\n".join(lines)


@dataclass
class EvaluationResult:
    """
    Result of replaying a ledger through the predictor.

    Every transaction is predicted against the ledger as it stood before
    the transaction was added, so no prediction sees its own answer.
    """
    total: int
    evaluated: int
    correct: int
    precise: int
    top_k: int = 3

    misses: List[Miss] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    error_messages: List[str] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return len(self.error_messages)

    @property
    def hit_rate(self) -> float:
        """Share of evaluated transactions whose category was in the top-k"""
        return self.correct / self.evaluated if self.evaluated else 0.0

    @property
    def precision_rate(self) -> float:
        """Share of evaluated transactions whose category was ranked first"""
        return self.precise / self.evaluated if self.evaluated else 0.0

    def __str__(self) -> str:
        "Human-readable summary"
        lines = [
            f"Evaluated {self.evaluated} of {self.total} transactions",
            f" Correct predictions (top {self.top_k}): {self.correct} ({self.hit_rate:.1%})",
            f" Precise predictions: {self.precise} ({self.precision_rate:.1%})",
        ]
        if self.errors:
            lines.append(f" Errors: {self.errors}")
        return "\n".join(lines)

    def __post_init__(self):
        """Validate counts are consistent"""
        if not 0 <= self.precise <= self.correct <= self.evaluated <= self.total:
            raise ValueError(
                f"Inconsistent counts: precise={self.precise}, correct={self.correct}, "
                f"evaluated={self.evaluated}, total={self.total}"
            )
