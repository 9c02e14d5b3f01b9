"""Severity-weighted compliance score."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping

from practice_ledger.calculators.money import round_half_up
from practice_ledger.calculators.types import (
    DEFAULT_FRAMEWORK,
    SEVERITY_WEIGHTS,
    STANDARD_FRAMEWORKS,
    Severity,
)

MAX_SCORE = 100


@dataclass
class SeverityCounts:
    """Event counts per severity."""

    info: int = 0
    warning: int = 0
    critical: int = 0

    @property
    def total(self) -> int:
        return self.info + self.warning + self.critical

    def add(self, severity: Severity) -> None:
        if severity == Severity.INFO:
            self.info += 1
        elif severity == Severity.WARNING:
            self.warning += 1
        else:
            self.critical += 1

    def as_mapping(self) -> dict[Severity, int]:
        return {
            Severity.INFO: self.info,
            Severity.WARNING: self.warning,
            Severity.CRITICAL: self.critical,
        }

    def to_dict(self) -> dict[str, int]:
        return {"info": self.info, "warning": self.warning, "critical": self.critical}


@dataclass
class EventBreakdown:
    """Events partitioned by severity and, independently, by framework."""

    by_severity: SeverityCounts = field(default_factory=SeverityCounts)
    by_framework: Counter[str] = field(default_factory=Counter)

    @property
    def total(self) -> int:
        return self.by_severity.total

    def framework_counts(self) -> dict[str, int]:
        """Standard frameworks first (always present), then others sorted."""
        counts = {name: self.by_framework.get(name, 0) for name in STANDARD_FRAMEWORKS}
        for name in sorted(self.by_framework):
            if name not in counts:
                counts[name] = self.by_framework[name]
        return counts


def normalize_framework(framework: str | None) -> str:
    """Lower-case a framework tag; a missing tag is read as general."""
    if not framework or not framework.strip():
        return DEFAULT_FRAMEWORK
    return framework.strip().lower()


def partition_events(events: Iterable[tuple[Severity, str | None]]) -> EventBreakdown:
    """Count (severity, framework) pairs."""
    breakdown = EventBreakdown()
    for severity, framework in events:
        breakdown.by_severity.add(severity)
        breakdown.by_framework[normalize_framework(framework)] += 1
    return breakdown


def weighted_penalty(counts: Mapping[Severity, int]) -> int:
    """Sum of count * weight over severities."""
    return sum(count * SEVERITY_WEIGHTS[severity] for severity, count in counts.items())


def calculate_compliance_score(counts: Mapping[Severity, int]) -> int:
    """Score in [0, 100]; 100 means no penalised events.

    The penalty is the weighted total as a percentage of the worst case
    (every event critical).
    """
    for severity, count in counts.items():
        if count < 0:
            raise ValueError(f"negative count for {severity.value}: {count}")

    total_events = sum(counts.values())
    if total_events == 0:
        return MAX_SCORE

    weighted_score = weighted_penalty(counts)
    max_penalty = total_events * SEVERITY_WEIGHTS[Severity.CRITICAL]
    penalty_pct = Decimal(weighted_score) * 100 / Decimal(max_penalty)
    return max(0, round_half_up(Decimal(MAX_SCORE) - penalty_pct))
