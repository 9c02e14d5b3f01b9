"""Trust reconciliation - three-way proof of trust balances.

Replays each active trust account's unreconciled transactions on top of
its last confirmed baseline and compares the result with the recorded
balance. The report is read-only: it never changes a balance and never
marks a transaction reconciled. Confirmation is a separate,
human-triggered operation (``confirm_reconciliation``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Sequence
from uuid import UUID

from practice_ledger.calculators.money import CENT, ZERO, format_money, to_decimal
from practice_ledger.calculators.replay import reconcile_history
from practice_ledger.calculators.types import (
    AccountStatus,
    ReconciliationStatus,
    ReplayItem,
    TransactionType,
)
from practice_ledger.errors import NotFoundError, StoreError, ValidationError
from practice_ledger.models import TrustAccount, TrustTransaction, utcnow
from practice_ledger.store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountReconciliation:
    """Reconciliation result for one trust account."""

    account_id: UUID
    account_name: str
    current_balance: Decimal
    expected_balance: Decimal
    discrepancy: Decimal
    unreconciled_count: int
    status: ReconciliationStatus

    @property
    def is_balanced(self) -> bool:
        return self.status == ReconciliationStatus.BALANCED

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": str(self.account_id),
            "account_name": self.account_name,
            "current_balance": format_money(self.current_balance),
            "expected_balance": format_money(self.expected_balance),
            "discrepancy": format_money(self.discrepancy),
            "unreconciled_count": self.unreconciled_count,
            "status": self.status.value,
        }


@dataclass
class ReconciliationReport:
    """Reconciliation results for every active account of an organization."""

    organization_id: UUID
    reconciliation_date: datetime
    accounts: list[AccountReconciliation] = field(default_factory=list)

    @property
    def total_discrepancy(self) -> Decimal:
        """Sum of absolute discrepancies across accounts."""
        return sum((abs(a.discrepancy) for a in self.accounts), ZERO)

    @property
    def balanced(self) -> bool:
        """Whether every account reconciled."""
        return all(a.is_balanced for a in self.accounts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "organization_id": str(self.organization_id),
            "accounts": [a.to_dict() for a in self.accounts],
            "total_discrepancy": format_money(self.total_discrepancy),
            "reconciliation_date": self.reconciliation_date.isoformat(),
        }


@dataclass(frozen=True)
class ConfirmationResult:
    """Outcome of confirming an account's reconciliation."""

    account_id: UUID
    reconciled_balance: Decimal
    transactions_confirmed: int
    confirmed_by: str
    confirmed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": str(self.account_id),
            "reconciled_balance": format_money(self.reconciled_balance),
            "transactions_confirmed": self.transactions_confirmed,
            "confirmed_by": self.confirmed_by,
            "confirmed_at": self.confirmed_at.isoformat(),
        }


def _replay_item(tx: TrustTransaction) -> ReplayItem:
    """Convert a stored transaction, rejecting malformed rows."""
    try:
        transaction_type = TransactionType(tx.transaction_type)
    except ValueError:
        raise StoreError(
            f"Trust transaction {tx.trust_transaction_id} has unknown type "
            f"{tx.transaction_type!r}"
        )
    try:
        amount = to_decimal(tx.amount)
    except (TypeError, ValueError):
        amount = None
    if amount is None or amount < 0:
        raise StoreError(
            f"Trust transaction {tx.trust_transaction_id} has invalid amount {tx.amount!r}"
        )
    return ReplayItem(
        transaction_type=transaction_type,
        amount=amount,
        transaction_date=tx.transaction_date,
        entry_sequence=tx.entry_sequence,
    )


class TrustReconciliationService:
    """Trust account reconciliation.

    Reporting is a pure read. Every run over the same stored data yields
    the same expected balances and discrepancies.
    """

    def __init__(
        self,
        store: LedgerStore,
        epsilon: Decimal = CENT,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.epsilon = epsilon
        self.clock = clock

    async def reconcile_account(self, account: TrustAccount) -> AccountReconciliation:
        """Replay one account's unreconciled history against its baseline."""
        result, _ = await self._reconcile_with_history(account)
        return result

    async def reconcile_organization(self, organization_id: UUID) -> ReconciliationReport:
        """Reconcile every active trust account of the organization."""
        accounts = await self.store.list_trust_accounts(
            organization_id, status=AccountStatus.ACTIVE.value
        )
        report = ReconciliationReport(
            organization_id=organization_id,
            reconciliation_date=self.clock(),
        )
        for account in accounts:
            report.accounts.append(await self.reconcile_account(account))

        logger.info(
            "Reconciled %d trust account(s) for organization %s; total discrepancy %s",
            len(report.accounts),
            organization_id,
            report.total_discrepancy,
        )
        return report

    async def confirm_reconciliation(
        self,
        organization_id: UUID,
        trust_account_id: UUID,
        confirmed_by: str,
    ) -> ConfirmationResult:
        """Advance the account's baseline after a balanced reconciliation.

        Marks every replayed transaction reconciled and moves
        ``reconciled_balance`` to the replayed expected balance.

        Raises:
            NotFoundError: If the account does not exist in the organization
            ValidationError: If the account is closed or out of balance
        """
        account = await self.store.get_trust_account(organization_id, trust_account_id)
        if account is None:
            raise NotFoundError("TrustAccount", trust_account_id, organization_id)
        if account.status != AccountStatus.ACTIVE.value:
            raise ValidationError(
                f"Trust account {trust_account_id} is {account.status}; only active "
                "accounts can be confirmed",
                field="trust_account_id",
            )

        result, transactions = await self._reconcile_with_history(account)
        if not result.is_balanced:
            raise ValidationError(
                f"Trust account {trust_account_id} has a discrepancy of "
                f"{format_money(result.discrepancy)}; resolve it before confirming",
                field="trust_account_id",
            )

        confirmed_at = self.clock()
        for tx in transactions:
            tx.reconciled = True
            tx.reconciled_at = confirmed_at
            tx.reconciled_by = confirmed_by
        account.reconciled_balance = result.expected_balance
        account.last_reconciled_at = confirmed_at
        await self.store.flush()

        logger.info(
            "Confirmed reconciliation of trust account %s by %s: %d transaction(s), "
            "baseline now %s",
            trust_account_id,
            confirmed_by,
            len(transactions),
            result.expected_balance,
        )
        return ConfirmationResult(
            account_id=account.trust_account_id,
            reconciled_balance=result.expected_balance,
            transactions_confirmed=len(transactions),
            confirmed_by=confirmed_by,
            confirmed_at=confirmed_at,
        )

    async def _reconcile_with_history(
        self, account: TrustAccount
    ) -> tuple[AccountReconciliation, Sequence[TrustTransaction]]:
        transactions = await self.store.list_trust_transactions(
            account.trust_account_id, reconciled=False
        )
        try:
            current_balance = to_decimal(account.current_balance) or ZERO
            baseline = to_decimal(account.reconciled_balance) or ZERO
        except (TypeError, ValueError) as e:
            raise StoreError(f"Trust account {account.trust_account_id} is malformed: {e}")
        outcome = reconcile_history(
            current_balance=current_balance,
            baseline=baseline,
            items=[_replay_item(tx) for tx in transactions],
            epsilon=self.epsilon,
        )
        return (
            AccountReconciliation(
                account_id=account.trust_account_id,
                account_name=account.account_name,
                current_balance=current_balance,
                expected_balance=outcome.expected_balance,
                discrepancy=outcome.discrepancy,
                unreconciled_count=outcome.replayed_count,
                status=outcome.status,
            ),
            transactions,
        )
