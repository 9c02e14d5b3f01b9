"""Trust history replay.

Replays unreconciled trust transactions on top of the last confirmed
baseline to derive the balance the account *should* carry.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from practice_ledger.calculators.money import CENT
from practice_ledger.calculators.types import ReconciliationStatus, ReplayItem


@dataclass(frozen=True)
class ReplayOutcome:
    """Result of replaying one account."""

    expected_balance: Decimal
    discrepancy: Decimal
    replayed_count: int
    status: ReconciliationStatus


def replay_order(items: Iterable[ReplayItem]) -> list[ReplayItem]:
    """Order items by transaction date, then insertion order."""
    return sorted(items, key=lambda i: (i.transaction_date, i.entry_sequence))


def replay_balance(baseline: Decimal, items: Iterable[ReplayItem]) -> tuple[Decimal, int]:
    """Apply items to the baseline in replay order.

    Returns the expected balance and the number of items replayed.
    """
    expected = baseline
    count = 0
    for item in replay_order(items):
        if item.amount < 0:
            raise ValueError(
                f"transaction #{item.entry_sequence} carries a negative amount {item.amount}"
            )
        if item.transaction_type.is_credit:
            expected += item.amount
        else:
            expected -= item.amount
        count += 1
    return expected, count


def classify(discrepancy: Decimal, epsilon: Decimal = CENT) -> ReconciliationStatus:
    """Balanced when the discrepancy is strictly below epsilon."""
    if abs(discrepancy) < epsilon:
        return ReconciliationStatus.BALANCED
    return ReconciliationStatus.DISCREPANCY


def reconcile_history(
    *,
    current_balance: Decimal,
    baseline: Decimal,
    items: Iterable[ReplayItem],
    epsilon: Decimal = CENT,
) -> ReplayOutcome:
    """Prove (or disprove) that current_balance is explained by history."""
    expected, count = replay_balance(baseline, items)
    discrepancy = current_balance - expected
    return ReplayOutcome(
        expected_balance=expected,
        discrepancy=discrepancy,
        replayed_count=count,
        status=classify(discrepancy, epsilon),
    )
