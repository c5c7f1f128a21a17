import pytest
from datetime import date, timedelta
from typing import Callable, List, Sequence

from expense_predictor.domain.models import Transaction
from expense_predictor.ledger.ledger import Ledger

HistoryFactory = Callable[..., List[Transaction]]


@pytest.fixture
def test_config() -> dict:
    """Predictor config that doesn't depend on config files"""
    return {
        "min_evidence": 4,
        "missing_diff_default": 3.0,
        "top_k": 3,
        "warmup": 0,
        "date_format": "%d.%m.%Y",
    }


@pytest.fixture
def make_history() -> HistoryFactory:
    """Build one transaction per day starting at `start`"""

    def _make(
        category: str,
        amounts: Sequence[float],
        start: date = date(2024, 3, 1),
        step_days: int = 1,
    ) -> List[Transaction]:
        return [
            Transaction(date=start + timedelta(days=i * step_days), amount=amount, category=category)
            for i, amount in enumerate(amounts)
        ]

    return _make


@pytest.fixture
def groceries_history(make_history) -> List[Transaction]:
    """10 daily purchases of 50.0, March 1st to 10th 2024"""
    return make_history("Groceries", [50.0] * 10)


@pytest.fixture
def ledger(groceries_history) -> Ledger:
    return Ledger(groceries_history)


@pytest.fixture
def sample_ledger_file(tmp_path):
    """Tab-separated ledger in the dd.mm.yyyy format"""
    lines = []
    for day in range(1, 21):
        lines.append(f"{day:02d}.03.2024\t50.0\tGroceries")
        if day % 2 == 0:
            lines.append(f"{day:02d}.03.2024\t4.5\tCoffee")
    path = tmp_path / "transactions.txt"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
