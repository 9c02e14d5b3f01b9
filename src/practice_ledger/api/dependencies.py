"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from practice_ledger.config import Settings, get_settings
from practice_ledger.database import init_db
from practice_ledger.hub import CallerIdentity, PracticeLedgerEngine
from practice_ledger.store import LedgerStore


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency.

    Routes commit explicitly; anything left uncommitted is rolled back on
    close.
    """
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_caller(
    x_user_id: Annotated[str | None, Header()] = None
) -> CallerIdentity | None:
    """Caller identity from the header set by the upstream auth gateway."""
    if not x_user_id or not x_user_id.strip():
        return None
    return CallerIdentity(user_id=x_user_id.strip())


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Caller = Annotated[CallerIdentity | None, Depends(get_caller)]
AppSettings = Annotated[Settings, Depends(get_settings)]


async def get_ledger_engine(db: DbSession, settings: AppSettings) -> PracticeLedgerEngine:
    """Engine bound to the request's session."""
    return PracticeLedgerEngine(LedgerStore(db), settings)


LedgerEngine = Annotated[PracticeLedgerEngine, Depends(get_ledger_engine)]
