"""
Base interfaces for practice advisory text.

Advisors only ever produce text attached to a result. They never read or
write ledger state, and no engine decision depends on what they return.
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class AdvisoryConfig:
    """
    Configuration for advisory text generation.

    Advisory is disabled by default; enable it with ADVISORY_ENABLED=true
    or AdvisoryConfig(enabled=True).
    """
    enabled: bool = False
    model_name: str = "rules_baseline"
    max_prompt_chars: int = 4000

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.model_name:
            raise ValueError("model_name must not be empty")
        if self.max_prompt_chars < 1:
            raise ValueError("max_prompt_chars must be positive")


class Advisor(Protocol):
    """Protocol for all advisors."""

    @property
    def model_name(self) -> str:
        """Return the model name."""
        ...

    def is_enabled(self) -> bool:
        """Return whether the advisor is enabled."""
        ...

    def advise(self, prompt: str) -> str | None:
        """Return advisory text (JSON) for a prompt, or None if disabled."""
        ...
