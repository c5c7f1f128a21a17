from typing import Dict, Iterable, Iterator, List, Tuple

from expense_predictor.domain.models import Transaction

class OutOfOrderTransactionError(Exception):
    """Raised when a transaction is older than its category's newest entry."""
    pass


class Ledger:
    """
    In-memory, per-category chronological history of transactions.

    Owned by a single ingestion-and-prediction session: one writer
    appends in date order, readers only look. Histories are never
    re-sorted, so an out-of-order append is rejected instead of fixed.

    Usage:
        ledger = Ledger()
        ledger.add(Transaction(date(2024, 3, 1), 12.5, "Groceries"))
        ledger.history("Groceries")
    """

    def __init__(self, transactions: Iterable[Transaction] = ()):
        self._histories: Dict[str, List[Transaction]] = {}
        self.add_many(transactions)

    def add(self, transaction: Transaction) -> Transaction:
        """
        Append a transaction to its category's history.

        Raises:
            OutOfOrderTransactionError: If the transaction is dated before
                the newest transaction already recorded for its category.
                The ledger is left unchanged.
        """
        history = self._histories.get(transaction.category)
        if history and transaction.date < history[-1].date:
            raise OutOfOrderTransactionError(
                f"{transaction} is dated before {history[-1].date}, "
                f"the latest '{transaction.category}' entry"
            )

        self._histories.setdefault(transaction.category, []).append(transaction)
        return transaction

    def add_many(self, transactions: Iterable[Transaction]) -> List[Transaction]:
        """Append transactions in order, returning the ones appended"""
        return [self.add(txn) for txn in transactions]

    def history(self, category: str) -> Tuple[Transaction, ...]:
        """Ordered history for a category (empty if the category is unknown)"""
        return tuple(self._histories.get(category, ()))

    @property
    def categories(self) -> List[str]:
        """Known categories in first-seen order"""
        return list(self._histories)

    def __contains__(self, category: object) -> bool:
        return category in self._histories

    def __len__(self) -> int:
        return sum(len(h) for h in self._histories.values())

    def __iter__(self) -> Iterator[str]:
        return iter(self._histories)

    def __repr__(self) -> str:
        return f"Ledger({len(self._histories)} categories, {len(self)} transactions)"
