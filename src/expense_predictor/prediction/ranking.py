from datetime import date
from math import sqrt
from typing import Any, Dict, List, Optional

from expense_predictor.config.settings import ConfigLoader
from expense_predictor.domain.models import Prediction, RankingEntry
from expense_predictor.ledger.ledger import Ledger
from expense_predictor.logging_setup import get_logger
from expense_predictor.prediction.errors import UndefinedRateError
from expense_predictor.prediction.scorer import CategoryScorer

logger = get_logger(__name__)

RATE_WEIGHT = 4
NEAREST_WEIGHT = 2
SECOND_NEAREST_WEIGHT = 1
SCALE = 0.4
DIFF_OFFSET = 0.1


def compute_coefficient(prediction: Prediction, missing_diff_default: float = 3.0) -> float:
    """
    Combine a Prediction's signals into a single ranking coefficient.

    The rate term carries the most weight, the nearest amount match comes
    next, and the second nearest only breaks ties. Absent amount diffs
    are replaced by `missing_diff_default`.

    Raises:
        UndefinedRateError: If the expense-rate deviation is missing or -1
    """
    deviation = prediction.expense_rate_deviation
    if deviation is None:
        raise UndefinedRateError("Long-run expense rate is zero or undefined")
    if deviation == -1:
        raise UndefinedRateError("Short-run expense rate is zero")

    nearest = prediction.nearest_amount_diff
    if nearest is None:
        nearest = missing_diff_default
    second = prediction.second_nearest_amount_diff
    if second is None:
        second = missing_diff_default

    return sqrt(
        RATE_WEIGHT * (SCALE / (deviation + 1)) ** 2
        + NEAREST_WEIGHT * (SCALE / (nearest + DIFF_OFFSET)) ** 2
        + SECOND_NEAREST_WEIGHT * (SCALE / (second + DIFF_OFFSET)) ** 2
    )


class RankingEngine:
    """
    Ranks every known category by how likely it is to own a new transaction.

    Usage:
        # Production - loads tuning from ConfigLoader
        engine = RankingEngine(ledger)

        # Testing - inject custom config
        engine = RankingEngine(ledger, config={"min_evidence": 2})

        ranking = engine.rank(date(2024, 3, 12), 50.0)
        best = engine.top(date(2024, 3, 12), 50.0, k=3)
    """

    def __init__(
        self,
        ledger: Ledger,
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the ranking engine.

        Args:
            ledger: Ledger to score against. It is read, never written.
            config: Optional config dict. If None, loads from ConfigLoader.
                Missing keys fall back to the packaged defaults.
        """
        if config is None:
            config = ConfigLoader.load_predictor_config()

        self.ledger = ledger
        self.scorer = CategoryScorer(ledger)
        self.min_evidence: int = int(config.get("min_evidence", 4))
        self.missing_diff_default: float = float(config.get("missing_diff_default", 3.0))

    def score_all(self, candidate_date: date, candidate_amount: float) -> Dict[str, Prediction]:
        """Score every known category, eligible or not"""
        return {
            category: self.scorer.score(category, candidate_date, candidate_amount)
            for category in self.ledger.categories
        }

    def rank(self, candidate_date: date, candidate_amount: float) -> List[RankingEntry]:
        """
        Rank categories for a candidate transaction.

        Categories whose window size is below the minimum evidence, or
        whose expense rate is undefined, are left out. A failing category
        never stops the others from being ranked.

        Returns:
            Entries sorted by coefficient descending, then category name
        """
        entries: List[RankingEntry] = []

        for category, prediction in self.score_all(candidate_date, candidate_amount).items():
            if prediction.count < self.min_evidence:
                logger.debug(
                    "Excluding '%s': %d < %d transactions of evidence",
                    category, prediction.count, self.min_evidence,
                )
                continue

            try:
                coefficient = compute_coefficient(prediction, self.missing_diff_default)
            except UndefinedRateError as e:
                logger.info("Excluding '%s': %s", category, e)
                continue

            entries.append(RankingEntry(category, prediction, coefficient))

        entries.sort(key=lambda entry: (-entry.coefficient, entry.category))
        return entries

    def top(self, candidate_date: date, candidate_amount: float, k: int = 3) -> List[RankingEntry]:
        """The k most likely categories"""
        return self.rank(candidate_date, candidate_amount)[:k]

    def __repr__(self) -> str:
        return f"RankingEngine(min_evidence={self.min_evidence}, {self.ledger!r})"
