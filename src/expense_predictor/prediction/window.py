from datetime import date, timedelta
from typing import List, Sequence

from expense_predictor.domain.models import Transaction, Window


def inclusive_day_span(start: date, end: date) -> int:
    """
    Whole calendar days from the start of `start` to the end of `end`.

    Both boundary days count, so a same-day span is 1. A reversed range
    is clamped to 1.
    """
    return max(1, (end - start).days + 1)


def select_window(
    size: int,
    history: Sequence[Transaction],
    reference_date: date,
    include_reference_date: bool,
) -> Window:
    """
    Select the trailing window of `history` used for rate and similarity signals.

    Scans backward from the newest transaction until `size` transactions
    are collected. Transactions dated `reference_date` are skipped unless
    `include_reference_date` is set, but still count as scanned. The window
    is then widened to take in every remaining transaction of its oldest day.

    The span starts the day after the next older (unscanned) transaction,
    or at the oldest window transaction if the whole history was scanned.
    It ends at `reference_date` when it is included, otherwise at the
    newest window transaction.

    Args:
        size: Number of transactions wanted before day completion
        history: Category history, oldest to newest
        reference_date: Date of the candidate transaction
        include_reference_date: Whether the candidate's own day counts

    Returns:
        Window with its transactions (oldest to newest) and inclusive day
        span. An empty window has a span of 0.
    """
    selected: List[Transaction] = []
    remaining = len(history)

    while len(selected) < size and remaining > 0:
        remaining -= 1
        txn = history[remaining]
        if include_reference_date or txn.date != reference_date:
            selected.append(txn)

    if not selected:
        return Window()

    oldest_day = selected[-1].date
    while remaining > 0 and history[remaining - 1].date == oldest_day:
        remaining -= 1
        selected.append(history[remaining])

    selected.reverse()

    if remaining > 0:
        start = history[remaining - 1].date + timedelta(days=1)
    else:
        start = selected[0].date

    end = reference_date if include_reference_date else selected[-1].date

    return Window(transactions=tuple(selected), span_days=inclusive_day_span(start, end))
