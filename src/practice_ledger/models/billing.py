"""Billing entry model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from practice_ledger.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from practice_ledger.models.organization import Matter


class BillingEntry(Base, TimestampMixin):
    """One chargeable unit of time, expense or flat fee on a matter.

    ``amount`` is computed once at creation. Once ``billed`` is set the
    entry is immutable.
    """

    __tablename__ = "billing_entry"

    billing_entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organization_id: Mapped[UUID] = mapped_column(
        ForeignKey("organization.organization_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    matter_id: Mapped[UUID] = mapped_column(
        ForeignKey("matter.matter_id"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    entry_type: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False, default="")
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    billable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    billed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    invoice_id: Mapped[UUID | None] = mapped_column(nullable=True)
    activity_code: Mapped[str | None] = mapped_column(String, nullable=True)
    expense_code: Mapped[str | None] = mapped_column(String, nullable=True)
    entry_date: Mapped[date] = mapped_column(nullable=False)

    __table_args__ = (
        CheckConstraint(
            "entry_type IN ('time', 'expense', 'flat_fee')",
            name="billing_entry_type_check",
        ),
        CheckConstraint("quantity >= 0", name="billing_entry_quantity_check"),
        CheckConstraint("rate >= 0", name="billing_entry_rate_check"),
        CheckConstraint("amount >= 0", name="billing_entry_amount_check"),
    )

    matter: Mapped[Matter] = relationship(back_populates="billing_entries")
