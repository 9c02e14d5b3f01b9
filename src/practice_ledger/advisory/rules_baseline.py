"""
Rules-based baseline advisor.

Returns canned JSON recommendations chosen by keywords in the prompt. It
has no external dependencies and is deterministic, so it is safe to run
in tests and in production alike.
"""

import json
import logging
from typing import Any, Mapping

from practice_ledger.advisory.base import AdvisoryConfig

logger = logging.getLogger(__name__)

# Checked in order; first keyword found in the prompt wins.
CANNED_RESPONSES: tuple[tuple[str, dict[str, Any]], ...] = (
    (
        "legal intake form",
        {
            "suggested_practice_area": "general",
            "case_complexity": "medium",
            "recommended_actions": [
                "Initial consultation",
                "Gather documents",
                "Conflict check",
            ],
            "risk_assessment": "Standard matter - proceed with intake",
            "estimated_timeline": "2-6 months",
            "potential_conflicts_to_check": "Verify no conflicts with existing clients",
        },
    ),
    (
        "conflict check",
        {
            "conflict_status": "clear",
            "confidence": "high",
            "reasoning": "No direct conflicts identified in current client base",
            "recommendations": ["Proceed with engagement", "Document conflict check date"],
        },
    ),
    (
        "billing practices",
        {
            "summary": "Current billing trends analyzed",
            "realization_rate": 85,
            "insights": ["Strong collection rate", "Consider automation for routine tasks"],
            "recommendations": ["Implement time tracking reminders", "Review aging invoices"],
        },
    ),
    (
        "compliance",
        {
            "status": "compliant",
            "frameworks": ["State Bar Rules", "Trust Account Regulations"],
            "issues": [],
            "recommendations": ["Maintain current practices", "Schedule quarterly review"],
        },
    ),
)

DEFAULT_RESPONSE: dict[str, Any] = {
    "status": "processed",
    "message": "Request processed with rule-based logic",
}


class RulesBaselineAdvisor:
    """Keyword-matched canned advice."""

    def __init__(self, config: AdvisoryConfig | None = None):
        self.config = config or AdvisoryConfig()

    @property
    def model_name(self) -> str:
        return self.config.model_name

    def is_enabled(self) -> bool:
        return self.config.enabled

    def advise(self, prompt: str) -> str | None:
        if not self.config.enabled:
            return None
        prompt = prompt[: self.config.max_prompt_chars]
        logger.debug("Rules baseline advising on: %s", prompt[:100])
        for keyword, response in CANNED_RESPONSES:
            if keyword in prompt:
                return json.dumps(response)
        return json.dumps(DEFAULT_RESPONSE)


def billing_prompt(analytics: Mapping[str, Any]) -> str:
    """Prompt asking for a review of billing practices."""
    return (
        "Analyze the billing practices of this law practice and suggest improvements:\n"
        f"{json.dumps(analytics, sort_keys=True)}"
    )


def compliance_prompt(report: Mapping[str, Any]) -> str:
    """Prompt asking for a review of the compliance posture."""
    return (
        "Review this compliance report and flag any issues:\n"
        f"{json.dumps(report, sort_keys=True)}"
    )
