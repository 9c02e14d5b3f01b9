"""Compliance event logging and scoring."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Sequence
from uuid import UUID

from practice_ledger.calculators.scoring import (
    EventBreakdown,
    calculate_compliance_score,
    normalize_framework,
    partition_events,
)
from practice_ledger.calculators.types import DEFAULT_FRAMEWORK, Severity
from practice_ledger.errors import StoreError, ValidationError
from practice_ledger.models import ComplianceLogEntry, utcnow
from practice_ledger.store import LedgerStore

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30
DEFAULT_CRITICAL_LIMIT = 5


@dataclass
class ComplianceReport:
    """Compliance posture of an organization over a trailing window."""

    organization_id: UUID
    period_start: datetime
    period_end: datetime
    breakdown: EventBreakdown
    score: int
    recent_critical_events: list[ComplianceLogEntry] = field(default_factory=list)

    @property
    def total_events(self) -> int:
        return self.breakdown.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "organization_id": str(self.organization_id),
            "period": {
                "start": self.period_start.isoformat(),
                "end": self.period_end.isoformat(),
            },
            "total_events": self.total_events,
            "by_framework": self.breakdown.framework_counts(),
            "by_severity": self.breakdown.by_severity.to_dict(),
            "compliance_score": self.score,
            "recent_critical_events": [
                _event_dict(e) for e in self.recent_critical_events
            ],
        }


def _event_dict(entry: ComplianceLogEntry) -> dict[str, Any]:
    return {
        "compliance_log_id": str(entry.compliance_log_id),
        "user_id": entry.user_id,
        "action": entry.action,
        "resource_type": entry.resource_type,
        "resource_id": entry.resource_id,
        "compliance_framework": normalize_framework(entry.compliance_framework),
        "severity": entry.severity,
        "created_at": entry.created_at.isoformat(),
    }


def _severity_of(entry: ComplianceLogEntry) -> Severity:
    try:
        return Severity(entry.severity)
    except ValueError:
        raise StoreError(
            f"Compliance log {entry.compliance_log_id} has unknown severity {entry.severity!r}"
        )


class ComplianceService:
    """Appends compliance events and scores an organization's posture."""

    def __init__(
        self,
        store: LedgerStore,
        *,
        window_days: int = DEFAULT_WINDOW_DAYS,
        critical_limit: int = DEFAULT_CRITICAL_LIMIT,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.window_days = window_days
        self.critical_limit = critical_limit
        self.clock = clock

    async def log_event(
        self,
        organization_id: UUID,
        *,
        action: str,
        resource_type: str,
        user_id: str | None = None,
        resource_id: str | None = None,
        compliance_framework: str = DEFAULT_FRAMEWORK,
        severity: Severity | str = Severity.INFO,
    ) -> ComplianceLogEntry:
        """Append one event to the compliance log."""
        try:
            level = Severity(severity)
        except ValueError:
            raise ValidationError(
                f"severity must be one of {[s.value for s in Severity]}, got {severity!r}",
                field="severity",
            )
        entry = ComplianceLogEntry(
            organization_id=organization_id,
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            compliance_framework=compliance_framework,
            severity=level.value,
            created_at=self.clock(),
        )
        return await self.store.add(entry)

    async def generate_report(
        self,
        organization_id: UUID,
        *,
        window_days: int | None = None,
        now: datetime | None = None,
    ) -> ComplianceReport:
        """Score events with created_at in [now - window, now]."""
        days = window_days if window_days is not None else self.window_days
        if days < 1:
            raise ValidationError("window_days must be at least 1", field="window_days")

        period_end = now or self.clock()
        period_start = period_end - timedelta(days=days)

        entries = await self.store.list_compliance_logs(
            organization_id, since=period_start, until=period_end
        )
        report = self.build_report(organization_id, period_start, period_end, entries)

        logger.info(
            "Compliance score for organization %s over %d day(s): %d (%d event(s))",
            organization_id,
            days,
            report.score,
            report.total_events,
        )
        return report

    def build_report(
        self,
        organization_id: UUID,
        period_start: datetime,
        period_end: datetime,
        entries: Sequence[ComplianceLogEntry],
    ) -> ComplianceReport:
        """Build a report from entries already ordered newest first."""
        severities = [(_severity_of(e), e.compliance_framework) for e in entries]
        breakdown = partition_events(severities)
        critical = [e for e in entries if e.severity == Severity.CRITICAL.value]
        return ComplianceReport(
            organization_id=organization_id,
            period_start=period_start,
            period_end=period_end,
            breakdown=breakdown,
            score=calculate_compliance_score(breakdown.by_severity.as_mapping()),
            recent_critical_events=critical[: self.critical_limit],
        )
