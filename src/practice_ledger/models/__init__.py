"""ORM models for the practice ledger."""

from practice_ledger.models.base import Base, TimestampMixin, UtcDateTime, utcnow
from practice_ledger.models.billing import BillingEntry
from practice_ledger.models.compliance import ComplianceLogEntry
from practice_ledger.models.organization import Client, Matter, Organization, OrganizationMember
from practice_ledger.models.trust import TrustAccount, TrustTransaction

__all__ = [
    "Base",
    "TimestampMixin",
    "UtcDateTime",
    "utcnow",
    "Organization",
    "OrganizationMember",
    "Client",
    "Matter",
    "BillingEntry",
    "TrustAccount",
    "TrustTransaction",
    "ComplianceLogEntry",
]
