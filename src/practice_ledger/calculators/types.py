"""Type definitions shared by the ledger calculators."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class BillingType(str, Enum):
    """How a matter is billed."""

    HOURLY = "hourly"
    FLAT_FEE = "flat_fee"
    CONTINGENCY = "contingency"
    RETAINER = "retainer"


class EntryType(str, Enum):
    """Billing entry kinds."""

    TIME = "time"
    EXPENSE = "expense"
    FLAT_FEE = "flat_fee"


class TransactionType(str, Enum):
    """Trust transaction kinds. The sign is implied by the kind."""

    DEPOSIT = "deposit"
    INTEREST = "interest"
    DISBURSEMENT = "disbursement"
    WITHDRAWAL = "withdrawal"

    @property
    def is_credit(self) -> bool:
        """True when the transaction increases the account balance."""
        return self in (TransactionType.DEPOSIT, TransactionType.INTEREST)


class AccountStatus(str, Enum):
    """Trust account lifecycle."""

    ACTIVE = "active"
    CLOSED = "closed"


class ReconciliationStatus(str, Enum):
    """Outcome of replaying an account's history."""

    BALANCED = "balanced"
    DISCREPANCY = "discrepancy"


class Severity(str, Enum):
    """Compliance event severity."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


# Penalty weight per event, by severity
SEVERITY_WEIGHTS: dict[Severity, int] = {
    Severity.INFO: 0,
    Severity.WARNING: 10,
    Severity.CRITICAL: 50,
}

# Frameworks always present in a compliance report, even at zero
STANDARD_FRAMEWORKS: tuple[str, ...] = ("soc2", "hipaa", "gdpr", "ccpa", "general")
DEFAULT_FRAMEWORK = "general"


@dataclass(frozen=True)
class MatterTerms:
    """The billing terms of a matter that pricing depends on."""

    billing_type: BillingType
    hourly_rate: Decimal | None = None
    flat_fee_amount: Decimal | None = None


@dataclass(frozen=True)
class PricedEntry:
    """Outcome of pricing one billing entry."""

    entry_type: EntryType
    quantity: Decimal
    rate: Decimal  # Effective rate or unit value actually applied
    amount: Decimal


@dataclass(frozen=True)
class ReplayItem:
    """A trust transaction reduced to what the replay needs."""

    transaction_type: TransactionType
    amount: Decimal
    transaction_date: date
    entry_sequence: int
