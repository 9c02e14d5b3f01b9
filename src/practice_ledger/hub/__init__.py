"""Business hub: command parsing and dispatch."""

from practice_ledger.hub.commands import (
    Action,
    AnalyticsCommand,
    BillingAutomationCommand,
    Command,
    ComplianceReportCommand,
    TrustReconciliationCommand,
    parse_command,
)
from practice_ledger.hub.engine import CallerIdentity, EngineResponse, PracticeLedgerEngine

__all__ = [
    "Action",
    "AnalyticsCommand",
    "BillingAutomationCommand",
    "Command",
    "ComplianceReportCommand",
    "TrustReconciliationCommand",
    "parse_command",
    "CallerIdentity",
    "EngineResponse",
    "PracticeLedgerEngine",
]
