"""Business hub engine.

Authenticates the caller, authorizes them against the organization,
dispatches one typed command to its service and appends a self-log entry
to the compliance log when the command succeeds.

The engine never commits. The caller owns the unit of work and commits
only a successful response, so a failed command leaves no trace,
including no self-log entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, assert_never
from uuid import UUID

from practice_ledger.advisory import (
    Advisor,
    AdvisoryConfig,
    RulesBaselineAdvisor,
    billing_prompt,
    compliance_prompt,
)
from practice_ledger.calculators.types import DEFAULT_FRAMEWORK, Severity
from practice_ledger.config import Settings, get_settings
from practice_ledger.errors import AuthError, AuthorizationError, PracticeLedgerError, StoreError
from practice_ledger.hub.commands import (
    AnalyticsCommand,
    BillingAutomationCommand,
    Command,
    ComplianceReportCommand,
    TrustReconciliationCommand,
    parse_command,
)
from practice_ledger.models import utcnow
from practice_ledger.services import (
    AnalyticsService,
    BillingService,
    ComplianceService,
    TrustReconciliationService,
)
from practice_ledger.store import LedgerStore

logger = logging.getLogger(__name__)

HUB_RESOURCE = "business_hub"
TRUST_ACCOUNT_RESOURCE = "trust_account"
CONFIRM_ACTION = "confirm-reconciliation"


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller, as resolved by the upstream gateway."""
    user_id: str


@dataclass(frozen=True)
class EngineResponse:
    """Explicit success or error result of one invocation."""
    success: bool
    data: dict[str, Any] | None = None
    error: PracticeLedgerError | None = None

    @property
    def code(self) -> str | None:
        return self.error.code if self.error else None

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return self.error.to_dict()
        return {"success": True, "data": self.data}


def require_identity(identity: CallerIdentity | None) -> str:
    """Return the caller's user id, or raise AuthError when there is none."""
    if identity is None or not identity.user_id:
        raise AuthError("Missing caller identity")
    return identity.user_id


class PracticeLedgerEngine:
    """Dispatches business hub commands over one ledger store."""

    def __init__(
        self,
        store: LedgerStore,
        settings: Settings | None = None,
        advisor: Advisor | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.settings = settings or get_settings()
        if advisor is None:
            advisor = RulesBaselineAdvisor(AdvisoryConfig(enabled=self.settings.advisory_enabled))
        self.advisor: Advisor = advisor
        self.clock = clock

        self.billing = BillingService(store, today=lambda: self.clock().date())
        self.reconciliation = TrustReconciliationService(
            store, epsilon=self.settings.reconciliation_epsilon, clock=clock
        )
        self.compliance = ComplianceService(
            store,
            window_days=self.settings.compliance_window_days,
            critical_limit=self.settings.recent_critical_limit,
            clock=clock,
        )
        self.analytics = AnalyticsService(store)

    async def handle(
        self, identity: CallerIdentity | None, payload: dict[str, Any]
    ) -> EngineResponse:
        """Parse and execute a raw command body.

        The caller identity is checked before the body is read. Engine
        errors become error responses; anything else propagates.
        """
        try:
            require_identity(identity)
            command = parse_command(payload)
            data = await self.execute(identity, command)
        except StoreError as e:
            logger.exception("Business hub store failure: %s", e.message)
            return EngineResponse(success=False, error=e)
        except PracticeLedgerError as e:
            logger.warning("Business hub rejected command (%s): %s", e.code, e.message)
            return EngineResponse(success=False, error=e)
        return EngineResponse(success=True, data=data)

    async def execute(self, identity: CallerIdentity | None, command: Command) -> dict[str, Any]:
        """Authorize the caller, run the command and self-log it."""
        user_id = await self._authorize(identity, command.organization_id)
        logger.info(
            "Business hub action %s by user %s for organization %s",
            command.action.value,
            user_id,
            command.organization_id,
        )

        data = await self._dispatch(command, user_id)

        await self.compliance.log_event(
            command.organization_id,
            action=command.action.value,
            resource_type=HUB_RESOURCE,
            user_id=user_id,
            compliance_framework=DEFAULT_FRAMEWORK,
            severity=Severity.INFO,
        )
        return data

    async def confirm_reconciliation(
        self,
        identity: CallerIdentity | None,
        organization_id: UUID,
        trust_account_id: UUID,
    ) -> dict[str, Any]:
        """Confirm a balanced trust account and self-log the confirmation."""
        user_id = await self._authorize(identity, organization_id)
        result = await self.reconciliation.confirm_reconciliation(
            organization_id, trust_account_id, confirmed_by=user_id
        )
        await self.compliance.log_event(
            organization_id,
            action=CONFIRM_ACTION,
            resource_type=TRUST_ACCOUNT_RESOURCE,
            resource_id=str(trust_account_id),
            user_id=user_id,
            compliance_framework=DEFAULT_FRAMEWORK,
            severity=Severity.INFO,
        )
        return result.to_dict()

    async def _authorize(self, identity: CallerIdentity | None, organization_id: UUID) -> str:
        user_id = require_identity(identity)
        if not await self.store.is_active_member(organization_id, user_id):
            raise AuthorizationError(user_id, organization_id)
        return user_id

    async def _dispatch(self, command: Command, user_id: str) -> dict[str, Any]:
        if isinstance(command, BillingAutomationCommand):
            request = command.request
            if request.user_id is None:
                # Entries default to the acting caller
                request = replace(request, user_id=user_id)
            result = await self.billing.record_entry(command.organization_id, request)
            return result.to_dict()
        elif isinstance(command, TrustReconciliationCommand):
            report = await self.reconciliation.reconcile_organization(command.organization_id)
            return report.to_dict()
        elif isinstance(command, ComplianceReportCommand):
            compliance = await self.compliance.generate_report(
                command.organization_id, window_days=command.window_days
            )
            data = compliance.to_dict()
            self._attach_advisory(data, compliance_prompt)
            return data
        elif isinstance(command, AnalyticsCommand):
            analytics = await self.analytics.practice_analytics(command.organization_id)
            data = analytics.to_dict()
            self._attach_advisory(data, billing_prompt)
            return data
        else:
            assert_never(command)

    def _attach_advisory(
        self, data: dict[str, Any], prompt_for: Callable[[dict[str, Any]], str]
    ) -> None:
        if not self.advisor.is_enabled():
            return
        advice = self.advisor.advise(prompt_for(data))
        if advice is not None:
            data["advisory"] = advice
