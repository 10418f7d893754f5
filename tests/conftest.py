"""Shared pytest fixtures."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from hostelfix.core import RequestContext
from hostelfix.infrastructure.database import build_engine, build_session_maker, create_tables
from hostelfix.sla.infrastructure import StaticPolicyProvider

from tests.fakes import NOW, InMemoryIssueRepository


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(actor_id="student-1", now=NOW, correlation_id="test-correlation")


@pytest.fixture
def admin_ctx() -> RequestContext:
    return RequestContext(actor_id="admin-1", now=NOW, correlation_id="test-correlation")


@pytest.fixture
def policy_provider() -> StaticPolicyProvider:
    return StaticPolicyProvider()


@pytest.fixture
def memory_repo() -> InMemoryIssueRepository:
    return InMemoryIssueRepository()


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite engine so every session sees the same database."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'hostelfix.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = build_session_maker(engine)
    async with session_maker() as session:
        yield session
        await session.rollback()
