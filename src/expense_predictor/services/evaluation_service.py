from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional

from expense_predictor.config.settings import ConfigLoader
from expense_predictor.domain.models import RankingEntry, Transaction
from expense_predictor.ledger.ledger import Ledger, OutOfOrderTransactionError
from expense_predictor.logging_setup import get_logger
from expense_predictor.prediction.ranking import RankingEngine
from expense_predictor.services.models import EvaluationResult, Miss

logger = get_logger(__name__)

EngineFactory = Callable[[Ledger, Dict[str, Any]], RankingEngine]


class EvaluationService:
    """
    Runs ingestion-and-prediction sessions over a chronological transaction stream.

    Each session owns a fresh Ledger. Transactions are predicted strictly
    before they are appended.
    """

    def __init__(
        self,
        engine_factory: EngineFactory = RankingEngine,
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            engine_factory: Builds the ranking engine for a session's ledger
            config: Optional config dict. If None, loads from ConfigLoader.
        """
        if config is None:
            config = ConfigLoader.load_predictor_config()

        self.config = config
        self.engine_factory = engine_factory

    def _ingest(self, ledger: Ledger, txn: Transaction, errors: List[str]) -> None:
        try:
            ledger.add(txn)
        except OutOfOrderTransactionError as e:
            logger.warning("Skipping transaction: %s", e)
            errors.append(str(e))

    def evaluate(
        self,
        transactions: Iterable[Transaction],
        warmup: Optional[int] = None,
        top_k: Optional[int] = None,
    ) -> EvaluationResult:
        """
        Replay transactions, checking each prediction against its true category.

        Args:
            transactions: Categorized transactions in chronological order
            warmup: Number of leading transactions only ingested, never
                evaluated. Defaults to the configured `warmup`. Counts the
                transactions passed in, so malformed records dropped by a
                parser are not counted; with a file holding bad lines the
                evaluation starts later than a count of raw lines would.
            top_k: How many ranked categories count as a hit. Defaults to
                the configured `top_k`.

        Returns:
            An EvaluationResult.
        """
        warmup = self.config.get("warmup", 0) if warmup is None else warmup
        top_k = self.config.get("top_k", 3) if top_k is None else top_k

        ledger = Ledger()
        engine = self.engine_factory(ledger, self.config)

        total = evaluated = correct = precise = 0
        misses: List[Miss] = []
        errors: List[str] = []

        for index, txn in enumerate(transactions):
            total += 1

            if index >= warmup:
                evaluated += 1
                top = engine.top(txn.date, txn.amount, k=top_k)
                top_categories = [entry.category for entry in top]

                if txn.category in top_categories:
                    correct += 1
                    if top_categories[0] == txn.category:
                        precise += 1
                else:
                    logger.debug("Missed %s, top: %s", txn, top_categories)
                    misses.append(Miss(transaction=txn, top=top))

            self._ingest(ledger, txn, errors)

        return EvaluationResult(
            total=total,
            evaluated=evaluated,
            correct=correct,
            precise=precise,
            top_k=top_k,
            misses=misses,
            categories=ledger.categories,
            error_messages=errors,
        )

    def predict(
        self,
        history: Iterable[Transaction],
        candidate_date: date,
        candidate_amount: float,
        top_k: Optional[int] = None,
    ) -> List[RankingEntry]:
        """
        Build a ledger from history and rank categories for a new transaction.

        Returns:
            The top-k ranking entries (all of them when top_k is 0)
        """
        top_k = self.config.get("top_k", 3) if top_k is None else top_k

        ledger = Ledger()
        errors: List[str] = []
        for txn in history:
            self._ingest(ledger, txn, errors)

        engine = self.engine_factory(ledger, self.config)
        ranking = engine.rank(candidate_date, candidate_amount)
        return ranking[:top_k] if top_k else ranking
