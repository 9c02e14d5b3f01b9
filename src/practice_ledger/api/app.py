"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from practice_ledger import __version__
from practice_ledger.api.routes import business_hub_router, health_router, trust_router
from practice_ledger.api.schemas import status_for
from practice_ledger.config import get_settings
from practice_ledger.database import dispose_db, init_db
from practice_ledger.errors import PracticeLedgerError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    init_db()
    yield
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Practice Ledger API",
        description="Billing, trust reconciliation, compliance and analytics for law practices",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PracticeLedgerError)
    async def ledger_error_handler(
        request: Request, exc: PracticeLedgerError
    ) -> JSONResponse:
        """Map engine errors raised outside a route's own handling."""
        logger.error("Ledger error on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=status_for(exc.code), content=exc.to_dict())

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(business_hub_router, prefix="/api/v1")
    app.include_router(trust_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
