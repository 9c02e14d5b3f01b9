"""
Advisory text for practice ledger results.

Disabled by default. When enabled, analytics and compliance results
carry an ``advisory`` field; nothing else changes.
"""

from practice_ledger.advisory.base import Advisor, AdvisoryConfig
from practice_ledger.advisory.rules_baseline import (
    RulesBaselineAdvisor,
    billing_prompt,
    compliance_prompt,
)

__all__ = [
    "Advisor",
    "AdvisoryConfig",
    "RulesBaselineAdvisor",
    "billing_prompt",
    "compliance_prompt",
]
