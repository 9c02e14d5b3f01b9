"""Business hub commands.

A command payload is validated once, at the edge, into one frozen
command object per action. Everything past ``parse_command`` works with
typed commands only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Union
from uuid import UUID

import pydantic
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from practice_ledger.errors import ValidationError
from practice_ledger.services.billing import BillingRequest


class Action(str, Enum):
    """Actions accepted by the business hub."""
    BILLING_AUTOMATION = "billing-automation"
    TRUST_RECONCILIATION = "trust-reconciliation"
    COMPLIANCE_REPORT = "compliance-report"
    ANALYTICS = "analytics"


@dataclass(frozen=True)
class BillingAutomationCommand:
    organization_id: UUID
    request: BillingRequest

    action = Action.BILLING_AUTOMATION


@dataclass(frozen=True)
class TrustReconciliationCommand:
    organization_id: UUID

    action = Action.TRUST_RECONCILIATION


@dataclass(frozen=True)
class ComplianceReportCommand:
    organization_id: UUID
    window_days: int | None = None

    action = Action.COMPLIANCE_REPORT


@dataclass(frozen=True)
class AnalyticsCommand:
    organization_id: UUID

    action = Action.ANALYTICS


Command = Union[
    BillingAutomationCommand,
    TrustReconciliationCommand,
    ComplianceReportCommand,
    AnalyticsCommand,
]


# ============================================================================
# Wire payloads
# ============================================================================


class BillingData(BaseModel):
    """Billing fields of a billing-automation payload."""

    model_config = ConfigDict(extra="ignore")

    entry_type: str = Field(validation_alias=AliasChoices("entry_type", "entryType", "type"))
    quantity: Decimal | None = Field(
        default=None, validation_alias=AliasChoices("quantity", "hours")
    )
    rate: Decimal | None = Field(default=None, validation_alias=AliasChoices("rate", "amount"))
    billable: bool = True
    description: str = ""
    entry_date: date | None = Field(
        default=None, validation_alias=AliasChoices("entry_date", "entryDate", "date")
    )
    user_id: str | None = Field(default=None, validation_alias=AliasChoices("user_id", "userId"))
    activity_code: str | None = Field(
        default=None, validation_alias=AliasChoices("activity_code", "activityCode")
    )
    expense_code: str | None = Field(
        default=None, validation_alias=AliasChoices("expense_code", "expenseCode")
    )


class CommandPayload(BaseModel):
    """Raw command body, before per-action checks."""

    model_config = ConfigDict(extra="ignore")

    action: str
    organization_id: UUID = Field(
        validation_alias=AliasChoices("organization_id", "organizationId")
    )
    matter_id: UUID | None = Field(
        default=None, validation_alias=AliasChoices("matter_id", "matterId")
    )
    billing_data: BillingData | None = Field(
        default=None, validation_alias=AliasChoices("billing_data", "billingData")
    )
    window_days: int | None = Field(
        default=None, ge=1, validation_alias=AliasChoices("window_days", "windowDays")
    )


def _field_of(error: pydantic.ValidationError) -> str | None:
    errors = error.errors()
    if not errors:
        return None
    return ".".join(str(part) for part in errors[0]["loc"]) or None


def parse_command(payload: dict[str, Any]) -> Command:
    """Validate a command body into a typed command.

    Raises:
        ValidationError: On an unknown action or a missing/malformed field
    """
    if not isinstance(payload, dict):
        raise ValidationError("command body must be a JSON object")

    try:
        body = CommandPayload.model_validate(payload)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        raise ValidationError(f"invalid command: {first['msg']}", field=_field_of(e))

    try:
        action = Action(body.action)
    except ValueError:
        raise ValidationError(f"Invalid action: {body.action!r}", field="action")

    if action == Action.BILLING_AUTOMATION:
        if body.matter_id is None:
            raise ValidationError("billing-automation requires matter_id", field="matter_id")
        if body.billing_data is None:
            raise ValidationError("billing-automation requires billing_data", field="billing_data")
        data = body.billing_data
        return BillingAutomationCommand(
            organization_id=body.organization_id,
            request=BillingRequest(
                matter_id=body.matter_id,
                entry_type=data.entry_type,
                quantity=data.quantity,
                rate=data.rate,
                billable=data.billable,
                description=data.description,
                entry_date=data.entry_date,
                user_id=data.user_id,
                activity_code=data.activity_code,
                expense_code=data.expense_code,
            ),
        )
    if action == Action.TRUST_RECONCILIATION:
        return TrustReconciliationCommand(organization_id=body.organization_id)
    if action == Action.COMPLIANCE_REPORT:
        return ComplianceReportCommand(
            organization_id=body.organization_id, window_days=body.window_days
        )
    return AnalyticsCommand(organization_id=body.organization_id)
