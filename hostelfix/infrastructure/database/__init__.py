"""
Database Infrastructure
=======================

Engine and session lifecycle for the issue store.

Uses SQLAlchemy 2.0 async: asyncpg against PostgreSQL in production,
aiosqlite in tests and local development. One session, and so one
transaction, per request: ledger appends commit with the request or not
at all.
"""

from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from hostelfix.config import settings


class Base(DeclarativeBase):
    """Declarative base for the issue and ledger tables."""


_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for a URL.

    Pool sizing only applies to server databases; SQLite keeps the
    driver's default pool.
    """
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=echo)

    # asyncpg expects ssl= rather than libpq's sslmode=
    return create_async_engine(
        database_url.replace("sslmode=", "ssl="),
        echo=echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
    )


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory; objects stay readable after commit."""
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


def init_database(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Create the process-wide engine at startup.

    Args:
        database_url: Overrides ``settings.database_url``
    """
    global _engine, _session_maker

    _engine = build_engine(database_url or settings.database_url, echo=settings.debug)
    _session_maker = build_session_maker(_engine)
    return _engine


async def close_database() -> None:
    """Dispose of pooled connections at shutdown."""
    global _engine, _session_maker

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding the request's session.

    Commits when the handler returns, rolls back on any exception.
    """
    if _session_maker is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")

    async with _session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables(engine: Optional[AsyncEngine] = None) -> None:
    """
    Create the schema. Development and tests only; production migrates.
    """
    # Registers the tables on Base.metadata
    import hostelfix.issues.infrastructure.models  # noqa: F401

    engine = engine or _engine
    if engine is None:
        raise RuntimeError("Database engine not initialized. Call init_database() first.")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
