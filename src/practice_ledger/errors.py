"""Error taxonomy for the practice ledger engine.

Every error carries a stable ``code`` so transports (HTTP, CLI) can map
it without inspecting messages.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID


class PracticeLedgerError(Exception):
    """Base class for all engine errors."""

    code = "LEDGER_ERROR"

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Error result body."""
        body: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = {k: str(v) for k, v in self.details.items()}
        return body


class AuthError(PracticeLedgerError):
    """Raised when the engine is invoked without a resolved caller identity."""

    code = "AUTH_ERROR"


class AuthorizationError(AuthError):
    """Raised when the caller is not an active member of the organization."""

    code = "FORBIDDEN"

    def __init__(self, user_id: str, organization_id: UUID):
        self.user_id = user_id
        self.organization_id = organization_id
        super().__init__(
            f"User {user_id} is not a member of organization {organization_id}",
        )


class ValidationError(PracticeLedgerError):
    """Raised when a request field is missing, malformed or out of range."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        if field:
            super().__init__(message, field=field)
        else:
            super().__init__(message)


class NotFoundError(PracticeLedgerError):
    """Raised when a referenced record does not exist under the organization."""

    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: UUID | str, organization_id: UUID):
        self.resource = resource
        self.resource_id = resource_id
        self.organization_id = organization_id
        super().__init__(
            f"{resource} {resource_id} not found in organization {organization_id}",
        )


class StoreError(PracticeLedgerError):
    """Raised when the ledger store fails or returns malformed data.

    Never retried inside the engine.
    """

    code = "STORE_ERROR"
