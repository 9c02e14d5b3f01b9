"""Tenant, membership, client and matter models."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from practice_ledger.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from practice_ledger.models.billing import BillingEntry


class Organization(Base, TimestampMixin):
    """Multi-tenant container. Never deleted by the engine."""

    __tablename__ = "organization"

    organization_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'suspended', 'closed')",
            name="organization_status_check",
        ),
    )

    # Relationships
    members: Mapped[list[OrganizationMember]] = relationship(back_populates="organization")
    clients: Mapped[list[Client]] = relationship(back_populates="organization")


class OrganizationMember(Base, TimestampMixin):
    """A user's membership in an organization.

    Used to cross-check a caller's identity against the organization a
    request targets.
    """

    __tablename__ = "organization_member"

    organization_member_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organization_id: Mapped[UUID] = mapped_column(
        ForeignKey("organization.organization_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    job_title: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="organization_member_unique"),
    )

    organization: Mapped[Organization] = relationship(back_populates="members")


class Client(Base, TimestampMixin):
    """Client of the practice. Identity fields are owned by intake."""

    __tablename__ = "client"

    client_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organization_id: Mapped[UUID] = mapped_column(
        ForeignKey("organization.organization_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    full_name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(String, nullable=True)

    organization: Mapped[Organization] = relationship(back_populates="clients")
    matters: Mapped[list[Matter]] = relationship(back_populates="client")


class Matter(Base, TimestampMixin):
    """A single legal engagement for one client."""

    __tablename__ = "matter"

    matter_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organization_id: Mapped[UUID] = mapped_column(
        ForeignKey("organization.organization_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    client_id: Mapped[UUID] = mapped_column(
        ForeignKey("client.client_id"),
        nullable=False,
    )
    matter_number: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    practice_area: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="open")
    billing_type: Mapped[str] = mapped_column(String, nullable=False, default="hourly")
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    flat_fee_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    __table_args__ = (
        UniqueConstraint("organization_id", "matter_number", name="matter_org_number_unique"),
        CheckConstraint(
            "billing_type IN ('hourly', 'flat_fee', 'contingency', 'retainer')",
            name="matter_billing_type_check",
        ),
        CheckConstraint("hourly_rate IS NULL OR hourly_rate >= 0", name="matter_hourly_rate_check"),
        CheckConstraint(
            "flat_fee_amount IS NULL OR flat_fee_amount >= 0",
            name="matter_flat_fee_check",
        ),
    )

    client: Mapped[Client] = relationship(back_populates="matters")
    billing_entries: Mapped[list[BillingEntry]] = relationship(back_populates="matter")
