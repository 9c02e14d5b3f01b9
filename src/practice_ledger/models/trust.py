"""Trust account and trust transaction models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from practice_ledger.models.base import Base, TimestampMixin


class TrustAccount(Base, TimestampMixin):
    """Client-funds custodial account.

    ``current_balance`` is the figure as recorded; ``reconciled_balance``
    is the last confirmed baseline.
    """

    __tablename__ = "trust_account"

    trust_account_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organization_id: Mapped[UUID] = mapped_column(
        ForeignKey("organization.organization_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account_name: Mapped[str] = mapped_column(String, nullable=False)
    bank_name: Mapped[str | None] = mapped_column(String, nullable=True)
    current_balance: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    reconciled_balance: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    last_reconciled_at: Mapped[datetime | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    __table_args__ = (
        CheckConstraint("status IN ('active', 'closed')", name="trust_account_status_check"),
    )

    transactions: Mapped[list[TrustTransaction]] = relationship(back_populates="account")


class TrustTransaction(Base, TimestampMixin):
    """Movement of client funds. Sign is implied by ``transaction_type``.

    ``entry_sequence`` is the per-account insertion order and breaks ties
    between transactions on the same date.
    """

    __tablename__ = "trust_transaction"

    trust_transaction_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    trust_account_id: Mapped[UUID] = mapped_column(
        ForeignKey("trust_account.trust_account_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    entry_sequence: Mapped[int] = mapped_column(BigInteger, nullable=False)
    transaction_type: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    transaction_date: Mapped[date] = mapped_column(nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    reference_number: Mapped[str | None] = mapped_column(String, nullable=True)
    reconciled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reconciled_at: Mapped[datetime | None] = mapped_column(nullable=True)
    reconciled_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "trust_account_id", "entry_sequence", name="trust_transaction_sequence_unique"
        ),
        CheckConstraint(
            "transaction_type IN ('deposit', 'interest', 'disbursement', 'withdrawal')",
            name="trust_transaction_type_check",
        ),
        CheckConstraint("amount >= 0", name="trust_transaction_amount_check"),
    )

    account: Mapped[TrustAccount] = relationship(back_populates="transactions")
