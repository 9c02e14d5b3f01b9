"""Practice ledger services."""

from practice_ledger.services.analytics import AnalyticsService, PracticeAnalytics
from practice_ledger.services.billing import BillingRequest, BillingResult, BillingService
from practice_ledger.services.compliance import ComplianceReport, ComplianceService
from practice_ledger.services.reconciliation import (
    AccountReconciliation,
    ConfirmationResult,
    ReconciliationReport,
    TrustReconciliationService,
)

__all__ = [
    "AnalyticsService",
    "PracticeAnalytics",
    "BillingRequest",
    "BillingResult",
    "BillingService",
    "ComplianceReport",
    "ComplianceService",
    "AccountReconciliation",
    "ConfirmationResult",
    "ReconciliationReport",
    "TrustReconciliationService",
]
