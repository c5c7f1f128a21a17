"""
Category prediction for new transactions.

Ranks the categories of a ledger by how well a new transaction's date
and amount fit each category's recent spending pace and amounts.

Quick Start:
    >>> from expense_predictor.ledger.ledger import Ledger
    >>> from expense_predictor.prediction import RankingEngine
    >>>
    >>> ledger = Ledger(history)
    >>> engine = RankingEngine(ledger)
    >>> for entry in engine.top(txn_date, 42.0, k=3):
    ...     print(entry.category, entry.coefficient)
"""
from expense_predictor.prediction.errors import (
    PredictionError,
    UndefinedRateError,
    DegenerateAmountError,
)
from expense_predictor.prediction.window import select_window, inclusive_day_span
from expense_predictor.prediction.scorer import CategoryScorer, amount_ratio
from expense_predictor.prediction.ranking import RankingEngine, compute_coefficient

__all__ = [
    "PredictionError",
    "UndefinedRateError",
    "DegenerateAmountError",
    "select_window",
    "inclusive_day_span",
    "CategoryScorer",
    "amount_ratio",
    "RankingEngine",
    "compute_coefficient",
]
