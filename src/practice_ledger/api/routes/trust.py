"""Trust account endpoints."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path
from fastapi.responses import JSONResponse

from practice_ledger.api.dependencies import Caller, LedgerEngine
from practice_ledger.api.schemas import ERROR_RESPONSES, ConfirmationResponse, status_for
from practice_ledger.errors import PracticeLedgerError, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/organizations/{organization_id}/trust-accounts", tags=["trust"])


@router.post(
    "/{account_id}/confirm-reconciliation",
    response_model=ConfirmationResponse,
    responses=ERROR_RESPONSES,
)
async def confirm_reconciliation(
    engine: LedgerEngine,
    caller: Caller,
    organization_id: Annotated[UUID, Path()],
    account_id: Annotated[UUID, Path()],
) -> JSONResponse:
    """Confirm a balanced reconciliation and advance the account's baseline."""
    try:
        result = await engine.confirm_reconciliation(caller, organization_id, account_id)
        await engine.store.commit()
    except StoreError as e:
        logger.exception("Confirmation of trust account %s failed", account_id)
        await engine.store.rollback()
        return JSONResponse(status_code=status_for(e.code), content=e.to_dict())
    except PracticeLedgerError as e:
        logger.warning("Confirmation of trust account %s rejected: %s", account_id, e.message)
        await engine.store.rollback()
        return JSONResponse(status_code=status_for(e.code), content=e.to_dict())

    return JSONResponse(content=result)
