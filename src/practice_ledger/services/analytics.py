"""Practice analytics - dashboard rollups."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable
from uuid import UUID

from practice_ledger.calculators.money import ZERO, format_money, round_half_up
from practice_ledger.calculators.types import AccountStatus
from practice_ledger.models import BillingEntry, Matter, TrustAccount
from practice_ledger.store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class PracticeAnalytics:
    """Matter, billing and trust rollups for one organization."""

    organization_id: UUID
    matters_total: int = 0
    matters_by_status: dict[str, int] = field(default_factory=dict)
    matters_by_practice_area: dict[str, int] = field(default_factory=dict)
    total_billed: Decimal = ZERO
    total_unbilled: Decimal = ZERO
    realization_rate: int = 0
    total_trust_balance: Decimal = ZERO
    active_trust_balance: Decimal = ZERO
    trust_account_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "organization_id": str(self.organization_id),
            "matters": {
                "total": self.matters_total,
                "by_status": self.matters_by_status,
                "by_practice_area": self.matters_by_practice_area,
            },
            "billing": {
                "total_billed": format_money(self.total_billed),
                "total_unbilled": format_money(self.total_unbilled),
                "realization_rate": self.realization_rate,
            },
            "trust": {
                "total_balance": format_money(self.total_trust_balance),
                "active_balance": format_money(self.active_trust_balance),
                "account_count": self.trust_account_count,
            },
        }


def realization_rate(total_billed: Decimal, total_unbilled: Decimal) -> int:
    """Billed share of billable value, as a whole percentage.

    Zero when there is no billable value at all.
    """
    denominator = total_billed + total_unbilled
    if denominator == 0:
        return 0
    return round_half_up(total_billed / denominator * 100)


def _count(values: Iterable[str | None]) -> dict[str, int]:
    counts = Counter(v for v in values if v)
    return dict(sorted(counts.items()))


def summarize(
    organization_id: UUID,
    matters: Iterable[Matter],
    entries: Iterable[BillingEntry],
    accounts: Iterable[TrustAccount],
) -> PracticeAnalytics:
    """Aggregate already-fetched records."""
    matters = list(matters)
    entries = list(entries)
    accounts = list(accounts)

    total_billed = sum((e.amount for e in entries if e.billed), ZERO)
    total_unbilled = sum((e.amount for e in entries if not e.billed and e.billable), ZERO)

    return PracticeAnalytics(
        organization_id=organization_id,
        matters_total=len(matters),
        matters_by_status=_count(m.status for m in matters),
        # Matters without a practice area are left out, not bucketed
        matters_by_practice_area=_count(m.practice_area for m in matters),
        total_billed=total_billed,
        total_unbilled=total_unbilled,
        realization_rate=realization_rate(total_billed, total_unbilled),
        total_trust_balance=sum((a.current_balance for a in accounts), ZERO),
        active_trust_balance=sum(
            (a.current_balance for a in accounts if a.status == AccountStatus.ACTIVE.value),
            ZERO,
        ),
        trust_account_count=len(accounts),
    )


class AnalyticsService:
    """Read-side aggregation over matters, billing entries and trust accounts."""

    def __init__(self, store: LedgerStore):
        self.store = store

    async def practice_analytics(self, organization_id: UUID) -> PracticeAnalytics:
        matters = await self.store.list_matters(organization_id)
        entries = await self.store.list_billing_entries(organization_id)
        accounts = await self.store.list_trust_accounts(organization_id)

        analytics = summarize(organization_id, matters, entries, accounts)
        logger.info(
            "Analytics for organization %s: %d matter(s), realization %d%%",
            organization_id,
            analytics.matters_total,
            analytics.realization_rate,
        )
        return analytics
