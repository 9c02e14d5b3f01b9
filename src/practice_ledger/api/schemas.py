"""Pydantic schemas for API responses."""

from typing import Any

from fastapi import status
from pydantic import BaseModel

from practice_ledger.errors import (
    AuthError,
    AuthorizationError,
    NotFoundError,
    StoreError,
    ValidationError,
)


class ErrorResponse(BaseModel):
    """Error result body."""

    error: str
    code: str
    details: dict[str, str] | None = None


class HubResponse(BaseModel):
    """Successful business hub result."""

    success: bool = True
    data: dict[str, Any]


class ConfirmationResponse(BaseModel):
    """Confirmed trust account reconciliation."""

    account_id: str
    reconciled_balance: str
    transactions_confirmed: int
    confirmed_by: str
    confirmed_at: str


STATUS_BY_CODE: dict[str, int] = {
    ValidationError.code: status.HTTP_400_BAD_REQUEST,
    AuthError.code: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError.code: status.HTTP_403_FORBIDDEN,
    NotFoundError.code: status.HTTP_404_NOT_FOUND,
    StoreError.code: status.HTTP_503_SERVICE_UNAVAILABLE,
}

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    code: {"model": ErrorResponse} for code in sorted(set(STATUS_BY_CODE.values()))
}


def status_for(code: str | None) -> int:
    """HTTP status for an engine error code."""
    if code is None:
        return status.HTTP_200_OK
    return STATUS_BY_CODE.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)
