"""Tests for business hub command parsing and dispatch."""

import dataclasses
import json
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from factories import (
    FIXED_NOW,
    MEMBER_USER_ID,
    OUTSIDER_USER_ID,
    add_transaction,
    failing_execute,
    fixed_clock,
    make_trust_account,
)
from practice_ledger.advisory import AdvisoryConfig, RulesBaselineAdvisor
from practice_ledger.errors import AuthError, AuthorizationError, ValidationError
from practice_ledger.hub import (
    Action,
    AnalyticsCommand,
    BillingAutomationCommand,
    CallerIdentity,
    ComplianceReportCommand,
    PracticeLedgerEngine,
    TrustReconciliationCommand,
    parse_command,
)
from practice_ledger.models import BillingEntry, ComplianceLogEntry, OrganizationMember

MEMBER = CallerIdentity(user_id=MEMBER_USER_ID)


async def hub_log_count(session) -> int:
    return await session.scalar(
        select(func.count())
        .select_from(ComplianceLogEntry)
        .where(ComplianceLogEntry.resource_type == "business_hub")
    )


class TestParseCommand:
    """Payload validation."""

    def test_billing_command_with_camel_case(self):
        org_id, matter_id = uuid4(), uuid4()
        command = parse_command({
            "action": "billing-automation",
            "organizationId": str(org_id),
            "matterId": str(matter_id),
            "billingData": {"type": "time", "hours": 1.5, "rate": "200", "activityCode": "L110"},
        })

        assert isinstance(command, BillingAutomationCommand)
        assert command.organization_id == org_id
        assert command.request.matter_id == matter_id
        assert command.request.entry_type == "time"
        assert command.request.quantity == Decimal("1.5")
        assert command.request.rate == Decimal("200")
        assert command.request.activity_code == "L110"
        assert command.request.billable is True

    def test_other_actions(self):
        org_id = str(uuid4())
        assert isinstance(
            parse_command({"action": "trust-reconciliation", "organization_id": org_id}),
            TrustReconciliationCommand,
        )
        assert isinstance(
            parse_command({"action": "analytics", "organization_id": org_id}),
            AnalyticsCommand,
        )
        report = parse_command(
            {"action": "compliance-report", "organization_id": org_id, "window_days": 7}
        )
        assert isinstance(report, ComplianceReportCommand)
        assert report.window_days == 7
        assert report.action == Action.COMPLIANCE_REPORT

    def test_unknown_action(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_command({"action": "document-assembly", "organization_id": str(uuid4())})
        assert exc_info.value.field == "action"

    def test_missing_organization(self):
        with pytest.raises(ValidationError):
            parse_command({"action": "analytics"})

    def test_malformed_organization_id(self):
        with pytest.raises(ValidationError):
            parse_command({"action": "analytics", "organization_id": "not-a-uuid"})

    def test_billing_requires_matter_and_data(self):
        org_id = str(uuid4())
        with pytest.raises(ValidationError) as exc_info:
            parse_command({
                "action": "billing-automation",
                "organization_id": org_id,
                "billing_data": {"entry_type": "time", "quantity": "1"},
            })
        assert exc_info.value.field == "matter_id"

        with pytest.raises(ValidationError) as exc_info:
            parse_command({
                "action": "billing-automation",
                "organization_id": org_id,
                "matter_id": str(uuid4()),
            })
        assert exc_info.value.field == "billing_data"

    def test_window_days_must_be_positive(self):
        with pytest.raises(ValidationError):
            parse_command({
                "action": "compliance-report",
                "organization_id": str(uuid4()),
                "window_days": 0,
            })


class TestEngineAuthorization:
    """Caller identity and organization membership."""

    async def test_missing_identity(self, store, settings, organization):
        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)
        with pytest.raises(AuthError) as exc_info:
            await engine.execute(None, AnalyticsCommand(organization_id=organization.organization_id))
        assert exc_info.value.code == "AUTH_ERROR"

    async def test_missing_identity_checked_before_body(self, session, store, settings):
        """A caller without identity is refused before the body is validated."""
        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)
        for identity in (None, CallerIdentity(user_id="")):
            response = await engine.handle(identity, {"action": "bogus", "organization_id": "nope"})
            assert response.success is False
            assert response.code == "AUTH_ERROR"
            assert "details" not in response.to_dict()
        assert await hub_log_count(session) == 0

    async def test_non_member_is_forbidden(self, session, store, settings, organization):
        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)
        with pytest.raises(AuthorizationError):
            await engine.execute(
                CallerIdentity(user_id=OUTSIDER_USER_ID),
                AnalyticsCommand(organization_id=organization.organization_id),
            )
        assert await hub_log_count(session) == 0

    async def test_inactive_member_is_forbidden(self, session, store, settings, organization):
        session.add(OrganizationMember(
            organization_id=organization.organization_id,
            user_id="user-former",
            is_active=False,
        ))
        await session.flush()

        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)
        response = await engine.handle(
            CallerIdentity(user_id="user-former"),
            {"action": "analytics", "organization_id": str(organization.organization_id)},
        )
        assert response.success is False
        assert response.code == "FORBIDDEN"


class TestEngineDispatch:
    """Successful commands and their self-log."""

    async def test_billing_automation(self, session, store, settings, organization, hourly_matter):
        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)
        response = await engine.handle(MEMBER, {
            "action": "billing-automation",
            "organizationId": str(organization.organization_id),
            "matterId": str(hourly_matter.matter_id),
            "billingData": {"type": "time", "hours": "2", "description": "Deposition prep"},
        })

        assert response.success is True
        assert response.data["total_amount"] == "500.00"
        assert response.data["entry"]["entry_date"] == FIXED_NOW.date().isoformat()
        assert response.data["entry"]["user_id"] == MEMBER_USER_ID
        body = response.to_dict()
        assert body["success"] is True

    async def test_successful_command_self_logs_once(self, session, store, settings, organization):
        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)
        response = await engine.handle(
            MEMBER,
            {"action": "trust-reconciliation", "organization_id": str(organization.organization_id)},
        )
        assert response.success is True

        entries = (await session.scalars(select(ComplianceLogEntry))).all()
        assert len(entries) == 1
        entry = entries[0]
        assert entry.action == "trust-reconciliation"
        assert entry.resource_type == "business_hub"
        assert entry.compliance_framework == "general"
        assert entry.severity == "info"
        assert entry.user_id == MEMBER_USER_ID
        assert entry.organization_id == organization.organization_id

    async def test_failed_command_writes_nothing(self, session, store, settings, organization):
        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)
        response = await engine.handle(MEMBER, {
            "action": "billing-automation",
            "organization_id": str(organization.organization_id),
            "matter_id": str(uuid4()),
            "billing_data": {"entry_type": "time", "quantity": "1"},
        })

        assert response.success is False
        assert response.code == "NOT_FOUND"
        assert response.to_dict()["code"] == "NOT_FOUND"
        assert await hub_log_count(session) == 0
        assert await session.scalar(select(func.count()).select_from(BillingEntry)) == 0

    async def test_unknown_action_is_validation_error(self, session, store, settings, organization):
        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)
        response = await engine.handle(
            MEMBER, {"action": "ai-intake", "organization_id": str(organization.organization_id)}
        )
        assert response.code == "VALIDATION_ERROR"
        assert await hub_log_count(session) == 0

    async def test_compliance_report_excludes_its_own_self_log(self, session, store, settings, organization):
        """The self-log entry is written after the report is built."""
        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)
        payload = {"action": "compliance-report", "organization_id": str(organization.organization_id)}

        first = await engine.handle(MEMBER, payload)
        second = await engine.handle(MEMBER, payload)

        assert first.data["total_events"] == 0
        assert second.data["total_events"] == 1
        assert second.data["compliance_score"] == 100
        assert "advisory" not in second.data

    async def test_reconciliation_through_engine(self, session, store, settings, organization):
        account = await make_trust_account(
            session, organization,
            current_balance=Decimal("1250.00"),
            reconciled_balance=Decimal("1000.00"),
        )
        await add_transaction(store, account, "deposit", "500.00")
        await add_transaction(store, account, "disbursement", "200.00")

        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)
        response = await engine.handle(
            MEMBER,
            {"action": "trust-reconciliation", "organization_id": str(organization.organization_id)},
        )

        assert response.data["accounts"][0]["expected_balance"] == "1300.00"
        assert response.data["accounts"][0]["discrepancy"] == "-50.00"
        assert response.data["total_discrepancy"] == "50.00"

    async def test_confirm_reconciliation_self_logs(self, session, store, settings, organization):
        account = await make_trust_account(
            session, organization,
            current_balance=Decimal("500.00"),
        )
        await add_transaction(store, account, "deposit", "500.00")

        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)
        result = await engine.confirm_reconciliation(
            MEMBER, organization.organization_id, account.trust_account_id
        )

        assert result["reconciled_balance"] == "500.00"
        assert result["confirmed_by"] == MEMBER_USER_ID
        entries = (await session.scalars(select(ComplianceLogEntry))).all()
        assert [(e.action, e.resource_type, e.resource_id) for e in entries] == [
            ("confirm-reconciliation", "trust_account", str(account.trust_account_id))
        ]


class TestStoreFailures:
    """Store failures come back as explicit error results."""

    async def test_store_failure_is_store_error_without_self_log(
        self, monkeypatch, session, store, settings, organization
    ):
        monkeypatch.setattr(
            AsyncSession, "execute", failing_execute(AsyncSession.execute, "FROM trust_account")
        )
        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)

        response = await engine.handle(
            MEMBER,
            {"action": "trust-reconciliation", "organization_id": str(organization.organization_id)},
        )

        assert response.success is False
        assert response.code == "STORE_ERROR"
        assert "[SQL" not in response.to_dict()["error"]
        monkeypatch.undo()
        assert await hub_log_count(session) == 0


class TestAdvisory:
    """Optional advisory text."""

    async def test_advisory_attached_when_enabled(self, store, settings, organization):
        enabled = dataclasses.replace(settings, advisory_enabled=True)
        engine = PracticeLedgerEngine(store, enabled, clock=fixed_clock)
        org_id = str(organization.organization_id)

        analytics = await engine.handle(MEMBER, {"action": "analytics", "organization_id": org_id})
        compliance = await engine.handle(
            MEMBER, {"action": "compliance-report", "organization_id": org_id}
        )

        assert json.loads(analytics.data["advisory"])["realization_rate"] == 85
        assert json.loads(compliance.data["advisory"])["status"] == "compliant"
        # The advisory never changes the computed figures
        assert analytics.data["billing"]["realization_rate"] == 0

    async def test_disabled_advisor_adds_nothing(self, store, settings, organization):
        """An explicitly disabled advisor wins over ADVISORY_ENABLED."""
        enabled = dataclasses.replace(settings, advisory_enabled=True)
        disabled = RulesBaselineAdvisor(AdvisoryConfig(enabled=False))
        engine = PracticeLedgerEngine(store, enabled, advisor=disabled, clock=fixed_clock)
        response = await engine.handle(
            MEMBER, {"action": "analytics", "organization_id": str(organization.organization_id)}
        )
        assert response.success is True
        assert "advisory" not in response.data

    async def test_no_advisory_by_default(self, store, settings, organization):
        engine = PracticeLedgerEngine(store, settings, clock=fixed_clock)
        response = await engine.handle(
            MEMBER, {"action": "analytics", "organization_id": str(organization.organization_id)}
        )
        assert "advisory" not in response.data


class TestRulesBaselineAdvisor:
    """Canned advice keyed by prompt keywords."""

    def test_keywords(self):
        advisor = RulesBaselineAdvisor(AdvisoryConfig(enabled=True))
        assert json.loads(advisor.advise("run a conflict check on Acme"))["conflict_status"] == "clear"
        assert "suggested_practice_area" in json.loads(
            advisor.advise("Analyze this legal intake form")
        )
        assert json.loads(advisor.advise("hello"))["status"] == "processed"
        assert advisor.model_name == "rules_baseline"

    def test_disabled_by_default(self):
        advisor = RulesBaselineAdvisor()
        assert advisor.is_enabled() is False
        assert advisor.advise("Review this compliance report") is None

    def test_model_name_from_config(self):
        advisor = RulesBaselineAdvisor(AdvisoryConfig(enabled=True, model_name="rules_v2"))
        assert advisor.model_name == "rules_v2"
