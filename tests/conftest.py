"""Pytest fixtures for practice ledger tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from factories import MEMBER_USER_ID, make_matter
from practice_ledger.config import Settings
from practice_ledger.models import Base, Client, Matter, Organization, OrganizationMember
from practice_ledger.store import LedgerStore

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def settings() -> Settings:
    """Settings with test defaults; advisory off."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        engine_version="test",
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="DEBUG",
    )


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store(session: AsyncSession) -> LedgerStore:
    return LedgerStore(session)


@pytest_asyncio.fixture
async def organization(session: AsyncSession) -> Organization:
    """An active organization with one active member."""
    org = Organization(name="Hale & Partners LLP")
    session.add(org)
    await session.flush()
    session.add(OrganizationMember(
        organization_id=org.organization_id,
        user_id=MEMBER_USER_ID,
        job_title="Partner",
    ))
    await session.flush()
    return org


@pytest_asyncio.fixture
async def client(session: AsyncSession, organization: Organization) -> Client:
    record = Client(
        organization_id=organization.organization_id,
        full_name="Jordan Reyes",
        email="jordan@example.com",
    )
    session.add(record)
    await session.flush()
    return record


@pytest_asyncio.fixture
async def hourly_matter(session: AsyncSession, organization: Organization, client: Client) -> Matter:
    """Hourly matter billed at 250.00."""
    return await make_matter(
        session, organization, client,
        matter_number="2026-001",
        hourly_rate=Decimal("250.00"),
    )


@pytest_asyncio.fixture
async def flat_fee_matter(session: AsyncSession, organization: Organization, client: Client) -> Matter:
    """Flat-fee matter at 5000.00."""
    return await make_matter(
        session, organization, client,
        matter_number="2026-002",
        billing_type="flat_fee",
        flat_fee_amount=Decimal("5000.00"),
        practice_area="estate planning",
    )
