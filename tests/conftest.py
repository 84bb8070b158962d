"""Shared pytest fixtures – uses async SQLite for fast in-memory tests."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from dealflow.middleware.rate_limit import rate_limiter
from dealflow.models import Base, Comment, Company, Interaction
from dealflow.schemas.company import CompanyRecord
from dealflow.services.snapshot import SnapshotProvider, snapshot_provider

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

ALPHA_ID = uuid.UUID("aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa")
BETA_ID = uuid.UUID("bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb")
GAMMA_ID = uuid.UUID("cccccccc-cccc-cccc-cccc-cccccccccccc")


def make_company(
    name: str,
    *,
    sector: str | None = None,
    status: str = "Contacted",
    rating: str | None = None,
    approval_status: str | None = None,
    created_time: datetime = NOW,
    company_id: str | None = None,
) -> CompanyRecord:
    """Build an in-memory company for engine tests."""
    return CompanyRecord(
        id=company_id or str(uuid.uuid4()),
        name=name,
        sector=sector,
        status=status,
        rating=rating,
        approval_status=approval_status,
        created_time=created_time,
    )


@pytest.fixture(autouse=True)
def _reset_shared_state():
    """Rate-limit windows and the snapshot cache are process-wide singletons."""
    rate_limiter._requests.clear()
    snapshot_provider.invalidate()
    yield
    rate_limiter._requests.clear()
    snapshot_provider.invalidate()


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test (StaticPool keeps one shared connection)."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as sess:
        yield sess


@pytest_asyncio.fixture
async def seeded_session(session_factory):
    """Session pre-loaded with three companies, two interactions and a comment."""
    async with session_factory() as sess:
        sess.add_all(
            [
                Company(
                    id=ALPHA_ID,
                    name="Alpha Corp",
                    sector="Technology",
                    status="In Analysis",
                    rating="A",
                    approval_status="Approved",
                    estimated_revenue=12_500_000,
                    location="Austin, US",
                    created_at=NOW - timedelta(days=2),
                ),
                Company(
                    id=BETA_ID,
                    name="Beta Industries",
                    sector="Healthcare",
                    status="Contacted",
                    rating=None,
                    approval_status=None,
                    created_at=NOW - timedelta(days=30),
                ),
                Company(
                    id=GAMMA_ID,
                    name="Gamma Finance",
                    sector="Technology",
                    status="Archived",
                    rating="C",
                    approval_status="Not Approved",
                    created_at=NOW - timedelta(days=10),
                ),
            ]
        )
        await sess.flush()
        sess.add_all(
            [
                Interaction(
                    company_id=ALPHA_ID,
                    occurred_on=date(2024, 6, 1),
                    type="Call",
                    notes="Intro call with the founder",
                ),
                Interaction(
                    company_id=ALPHA_ID,
                    occurred_on=date(2024, 6, 10),
                    type="Meeting",
                    notes="Site visit",
                ),
                Comment(company_id=ALPHA_ID, content="Strong recurring revenue.", author="Dana"),
            ]
        )
        await sess.commit()
        yield sess


@pytest.fixture
def patched_store(session_factory):
    """Point the tool handlers at the test database with caching disabled."""
    provider = SnapshotProvider(session_factory=session_factory, ttl_seconds=0)
    with patch("dealflow.mcp.tools.async_session_factory", session_factory), patch(
        "dealflow.mcp.tools.snapshot_provider", provider
    ):
        yield provider
