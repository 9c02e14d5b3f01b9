"""Pure ledger calculations: pricing, trust replay, compliance scoring."""

from practice_ledger.calculators.billing import price_entry
from practice_ledger.calculators.replay import ReplayOutcome, reconcile_history
from practice_ledger.calculators.scoring import (
    EventBreakdown,
    calculate_compliance_score,
    partition_events,
)

__all__ = [
    "price_entry",
    "ReplayOutcome",
    "reconcile_history",
    "EventBreakdown",
    "calculate_compliance_score",
    "partition_events",
]
