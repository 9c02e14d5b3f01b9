"""Billing service - prices and records billing entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Sequence
from uuid import UUID

from practice_ledger.calculators.billing import price_entry
from practice_ledger.calculators.money import format_money
from practice_ledger.calculators.types import BillingType, MatterTerms
from practice_ledger.errors import NotFoundError, StoreError, ValidationError
from practice_ledger.models import BillingEntry, Matter
from practice_ledger.store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BillingRequest:
    """A request to record one billing entry."""

    matter_id: UUID
    entry_type: str
    quantity: Decimal | None = None
    rate: Decimal | None = None
    billable: bool = True
    description: str = ""
    entry_date: date | None = None
    user_id: str | None = None
    activity_code: str | None = None
    expense_code: str | None = None


@dataclass(frozen=True)
class BillingResult:
    """Result of recording a billing entry."""

    entry: BillingEntry
    matter_name: str
    total_amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        entry = self.entry
        return {
            "entry": {
                "billing_entry_id": str(entry.billing_entry_id),
                "organization_id": str(entry.organization_id),
                "matter_id": str(entry.matter_id),
                "user_id": entry.user_id,
                "entry_type": entry.entry_type,
                "description": entry.description,
                "quantity": str(entry.quantity),
                "rate": format_money(entry.rate),
                "amount": format_money(entry.amount),
                "billable": entry.billable,
                "billed": entry.billed,
                "activity_code": entry.activity_code,
                "expense_code": entry.expense_code,
                "entry_date": entry.entry_date.isoformat(),
            },
            "matter": self.matter_name,
            "total_amount": format_money(self.total_amount),
        }


def matter_terms(matter: Matter) -> MatterTerms:
    """Extract pricing terms from a stored matter."""
    try:
        billing_type = BillingType(matter.billing_type)
    except ValueError:
        raise StoreError(
            f"Matter {matter.matter_id} has unknown billing_type {matter.billing_type!r}"
        )
    return MatterTerms(
        billing_type=billing_type,
        hourly_rate=matter.hourly_rate,
        flat_fee_amount=matter.flat_fee_amount,
    )


class BillingService:
    """Records billing entries priced from the owning matter's terms.

    The only write is a single insert per entry; the matter is never
    modified.
    """

    def __init__(self, store: LedgerStore, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today

    async def record_entry(
        self,
        organization_id: UUID,
        request: BillingRequest,
    ) -> BillingResult:
        """Price and persist one billing entry.

        Raises:
            NotFoundError: If the matter does not exist in the organization
            ValidationError: If the request cannot be priced
        """
        matter = await self.store.get_matter(organization_id, request.matter_id)
        if matter is None:
            raise NotFoundError("Matter", request.matter_id, organization_id)

        priced = price_entry(
            matter_terms(matter),
            request.entry_type,
            request.quantity,
            request.rate,
        )

        entry = BillingEntry(
            organization_id=organization_id,
            matter_id=matter.matter_id,
            user_id=request.user_id,
            entry_type=priced.entry_type.value,
            description=request.description,
            quantity=priced.quantity,
            rate=priced.rate,
            amount=priced.amount,
            billable=request.billable,
            billed=False,
            activity_code=request.activity_code,
            expense_code=request.expense_code,
            entry_date=request.entry_date or self.today(),
        )
        await self.store.add(entry)

        logger.info(
            "Recorded %s entry %s on matter %s for %s",
            entry.entry_type,
            entry.billing_entry_id,
            matter.matter_id,
            priced.amount,
        )
        return BillingResult(entry=entry, matter_name=matter.name, total_amount=priced.amount)

    async def mark_billed(
        self,
        organization_id: UUID,
        billing_entry_ids: Sequence[UUID],
        invoice_id: UUID,
    ) -> list[BillingEntry]:
        """Attach entries to an invoice and flag them billed.

        All-or-nothing: every entry must exist, be billable and not yet be
        billed, otherwise nothing is changed.
        """
        entries: list[BillingEntry] = []
        for entry_id in billing_entry_ids:
            entry = await self.store.get_billing_entry(organization_id, entry_id)
            if entry is None:
                raise NotFoundError("BillingEntry", entry_id, organization_id)
            if entry.billed:
                raise ValidationError(
                    f"Billing entry {entry_id} is already billed and cannot change",
                    field="billing_entry_ids",
                )
            if not entry.billable:
                raise ValidationError(
                    f"Billing entry {entry_id} is not billable",
                    field="billing_entry_ids",
                )
            entries.append(entry)

        for entry in entries:
            entry.billed = True
            entry.invoice_id = invoice_id
        await self.store.flush()
        return entries
