"""Ledger Store - record access for the engine.

A thin repository over an ``AsyncSession``. It provides insert,
get-by-id and filtered list operations, always scoped by organization.
Any SQLAlchemy failure is surfaced as ``StoreError``; nothing is retried.
"""

from __future__ import annotations

import functools
import logging
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from practice_ledger.errors import StoreError
from practice_ledger.models import (
    BillingEntry,
    ComplianceLogEntry,
    Matter,
    OrganizationMember,
    TrustAccount,
    TrustTransaction,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def store_operation(
    fn: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """Translate SQLAlchemy failures into StoreError."""

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await fn(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error("Ledger store operation %s failed: %s", fn.__name__, e)
            raise StoreError(f"Ledger store operation {fn.__name__} failed") from e

    return wrapper


class LedgerStore:
    """Organization-scoped access to ledger records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ------------------------------------------------------------------
    # Generic insert
    # ------------------------------------------------------------------

    @store_operation
    async def add(self, record: T) -> T:
        """Insert a record and flush so defaults are populated."""
        self.session.add(record)
        await self.session.flush()
        return record

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    @store_operation
    async def is_active_member(self, organization_id: UUID, user_id: str) -> bool:
        """Whether user_id is an active member of the organization."""
        result = await self.session.execute(
            select(OrganizationMember.organization_member_id).where(
                OrganizationMember.organization_id == organization_id,
                OrganizationMember.user_id == user_id,
                OrganizationMember.is_active.is_(True),
            )
        )
        return result.first() is not None

    # ------------------------------------------------------------------
    # Matters
    # ------------------------------------------------------------------

    @store_operation
    async def get_matter(self, organization_id: UUID, matter_id: UUID) -> Matter | None:
        result = await self.session.execute(
            select(Matter).where(
                Matter.organization_id == organization_id,
                Matter.matter_id == matter_id,
            )
        )
        return result.scalar_one_or_none()

    @store_operation
    async def list_matters(self, organization_id: UUID) -> Sequence[Matter]:
        result = await self.session.execute(
            select(Matter)
            .where(Matter.organization_id == organization_id)
            .order_by(Matter.created_at, Matter.matter_id)
        )
        return result.scalars().all()

    # ------------------------------------------------------------------
    # Billing entries
    # ------------------------------------------------------------------

    @store_operation
    async def get_billing_entry(
        self, organization_id: UUID, billing_entry_id: UUID
    ) -> BillingEntry | None:
        result = await self.session.execute(
            select(BillingEntry).where(
                BillingEntry.organization_id == organization_id,
                BillingEntry.billing_entry_id == billing_entry_id,
            )
        )
        return result.scalar_one_or_none()

    @store_operation
    async def list_billing_entries(
        self,
        organization_id: UUID,
        *,
        matter_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Sequence[BillingEntry]:
        """List entries for an organization, optionally by matter and date range."""
        query = select(BillingEntry).where(BillingEntry.organization_id == organization_id)
        if matter_id is not None:
            query = query.where(BillingEntry.matter_id == matter_id)
        if start_date is not None:
            query = query.where(BillingEntry.entry_date >= start_date)
        if end_date is not None:
            query = query.where(BillingEntry.entry_date <= end_date)
        query = query.order_by(BillingEntry.entry_date, BillingEntry.created_at)
        result = await self.session.execute(query)
        return result.scalars().all()

    # ------------------------------------------------------------------
    # Trust accounts and transactions
    # ------------------------------------------------------------------

    @store_operation
    async def get_trust_account(
        self, organization_id: UUID, trust_account_id: UUID
    ) -> TrustAccount | None:
        result = await self.session.execute(
            select(TrustAccount).where(
                TrustAccount.organization_id == organization_id,
                TrustAccount.trust_account_id == trust_account_id,
            )
        )
        return result.scalar_one_or_none()

    @store_operation
    async def list_trust_accounts(
        self, organization_id: UUID, *, status: str | None = None
    ) -> Sequence[TrustAccount]:
        """List accounts in a stable order (creation, then id)."""
        query = select(TrustAccount).where(TrustAccount.organization_id == organization_id)
        if status is not None:
            query = query.where(TrustAccount.status == status)
        query = query.order_by(TrustAccount.created_at, TrustAccount.trust_account_id)
        result = await self.session.execute(query)
        return result.scalars().all()

    @store_operation
    async def add_trust_transaction(self, transaction: TrustTransaction) -> TrustTransaction:
        """Insert a transaction, assigning the next per-account sequence number.

        Concurrent inserts on the same account collide on the
        (account, sequence) unique constraint instead of sharing a number.
        """
        result = await self.session.execute(
            select(func.coalesce(func.max(TrustTransaction.entry_sequence), 0)).where(
                TrustTransaction.trust_account_id == transaction.trust_account_id
            )
        )
        transaction.entry_sequence = int(result.scalar_one()) + 1
        self.session.add(transaction)
        await self.session.flush()
        return transaction

    @store_operation
    async def list_trust_transactions(
        self,
        trust_account_id: UUID,
        *,
        reconciled: bool | None = None,
    ) -> Sequence[TrustTransaction]:
        """List transactions in replay order (date, then insertion order)."""
        query = select(TrustTransaction).where(
            TrustTransaction.trust_account_id == trust_account_id
        )
        if reconciled is not None:
            query = query.where(TrustTransaction.reconciled.is_(reconciled))
        query = query.order_by(
            TrustTransaction.transaction_date,
            TrustTransaction.entry_sequence,
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    @store_operation
    async def flush(self) -> None:
        """Flush pending updates on loaded records."""
        await self.session.flush()

    @store_operation
    async def commit(self) -> None:
        """Commit the unit of work."""
        await self.session.commit()

    @store_operation
    async def rollback(self) -> None:
        """Discard the unit of work."""
        await self.session.rollback()

    # ------------------------------------------------------------------
    # Compliance log
    # ------------------------------------------------------------------

    @store_operation
    async def list_compliance_logs(
        self,
        organization_id: UUID,
        *,
        since: datetime,
        until: datetime,
    ) -> Sequence[ComplianceLogEntry]:
        """Entries with created_at in [since, until], newest first."""
        result = await self.session.execute(
            select(ComplianceLogEntry)
            .where(
                ComplianceLogEntry.organization_id == organization_id,
                ComplianceLogEntry.created_at >= since,
                ComplianceLogEntry.created_at <= until,
            )
            .order_by(
                ComplianceLogEntry.created_at.desc(),
                ComplianceLogEntry.compliance_log_id,
            )
        )
        return result.scalars().all()
