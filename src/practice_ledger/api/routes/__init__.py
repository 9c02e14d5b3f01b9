"""API routes."""

from practice_ledger.api.routes.business_hub import router as business_hub_router
from practice_ledger.api.routes.health import router as health_router
from practice_ledger.api.routes.trust import router as trust_router

__all__ = ["business_hub_router", "health_router", "trust_router"]
