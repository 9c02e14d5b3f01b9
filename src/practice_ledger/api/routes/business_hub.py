"""Business hub endpoint."""

from typing import Annotated, Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from practice_ledger.api.dependencies import Caller, LedgerEngine
from practice_ledger.api.schemas import ERROR_RESPONSES, HubResponse, status_for

router = APIRouter(tags=["business-hub"])


@router.post(
    "/business-hub",
    response_model=HubResponse,
    responses=ERROR_RESPONSES,
)
async def business_hub(
    engine: LedgerEngine,
    caller: Caller,
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    """Run one business hub command.

    The unit of work is committed only for a successful result. A failed
    commit surfaces as a store error.
    """
    response = await engine.handle(caller, payload)
    if response.success:
        await engine.store.commit()
    else:
        await engine.store.rollback()
    return JSONResponse(status_code=status_for(response.code), content=response.to_dict())
