from datetime import date
from typing import List, Optional

from expense_predictor.domain.models import Prediction, Transaction
from expense_predictor.ledger.ledger import Ledger
from expense_predictor.logging_setup import get_logger
from expense_predictor.prediction.errors import DegenerateAmountError
from expense_predictor.prediction.window import select_window

logger = get_logger(__name__)


def amount_ratio(historical: Transaction, amount: float) -> float:
    """
    Relative distance of `amount` from a historical amount.

    Raises:
        DegenerateAmountError: If the historical amount is zero
    """
    if historical.amount == 0:
        raise DegenerateAmountError(f"{historical} has a zero amount")
    return abs((historical.amount - amount) / historical.amount)


def rate_deviation(short_run_rate: Optional[float], long_run_rate: Optional[float]) -> Optional[float]:
    """Relative over/under-shoot of the short-run rate, None when undefined"""
    if short_run_rate is None or not long_run_rate:
        return None
    return (short_run_rate - long_run_rate) / long_run_rate


class CategoryScorer:
    """
    Computes a Prediction for one category against a candidate transaction.

    The long-run window covers half of the category's history (at least
    one transaction) and excludes the candidate's day. The short-run
    window is half of that again and includes the candidate's day.
    """

    def __init__(self, ledger: Ledger):
        self.ledger = ledger

    def score(self, category: str, candidate_date: date, candidate_amount: float) -> Prediction:
        history = self.ledger.history(category)

        long_run_size = max(1, len(history) // 2)
        long_run = select_window(long_run_size, history, candidate_date, include_reference_date=False)

        short_run_size = max(1, long_run_size // 2)
        short_run = select_window(short_run_size, history, candidate_date, include_reference_date=True)

        deviation = rate_deviation(short_run.daily_rate, long_run.daily_rate)
        if deviation is None:
            logger.debug(
                "Expense rate for '%s' is undefined (long-run rate %s)",
                category, long_run.daily_rate,
            )

        diffs: List[float] = []
        skipped = 0
        for txn in long_run.transactions:
            try:
                diffs.append(amount_ratio(txn, candidate_amount))
            except DegenerateAmountError as e:
                skipped += 1
                logger.warning("Skipping comparator for '%s': %s", category, e)
        diffs.sort()

        return Prediction(
            count=long_run_size,
            expense_rate_deviation=deviation,
            nearest_amount_diff=diffs[0] if diffs else None,
            second_nearest_amount_diff=diffs[1] if len(diffs) > 1 else None,
            skipped_comparators=skipped,
        )

    def __repr__(self) -> str:
        return f"CategoryScorer({self.ledger!r})"
