# -*- coding: utf-8 -*-
# affiliate_portal/core/database_core.py
# =============================================================================
# Purpose:
#   • Single entry point to the database (PostgreSQL + asyncpg + SQLAlchemy 2.0).
#   • Declarative Base shared by every ORM model.
#   • AsyncEngine and async_sessionmaker, created lazily.
#   • Session helpers for FastAPI routes, services and scripts.
#
# Invariants:
#   • Async engine only; the DSN comes from Settings.database_url_asyncpg().
#   • Sessions use expire_on_commit=False and autoflush=False.
#   • Services flush; the caller owning the session commits.
#
# Out of scope:
#   • No business logic and no DDL here (tables come from Alembic).
# =============================================================================

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from sqlalchemy import MetaData, text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from affiliate_portal.core.config_core import get_settings
from affiliate_portal.core.logging_core import get_logger

logger = get_logger(__name__)
settings = get_settings()

# Stable constraint names so Alembic autogenerate produces reviewable diffs.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base of every table of the portal."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# -----------------------------------------------------------------------------
# Engine and session factory
# -----------------------------------------------------------------------------
_engine: Optional[AsyncEngine] = None
_SessionFactory: Optional[async_sessionmaker[AsyncSession]] = None
_engine_lock = asyncio.Lock()


def _create_engine() -> AsyncEngine:
    """
    Builds a new AsyncEngine from current settings.

    Pool sizing applies to server databases only; sqlite keeps its own pool.
    """
    dsn = settings.database_url_asyncpg()
    logger.info("Creating async DB engine", extra={"dsn_set": bool(dsn)})
    options = {"pool_pre_ping": True, "echo": settings.DEBUG}
    if not dsn.startswith("sqlite"):
        options["pool_size"] = settings.DB_POOL_SIZE
        options["max_overflow"] = settings.DB_MAX_OVERFLOW
    return create_async_engine(dsn, **options)


def _create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
        class_=AsyncSession,
    )


async def reset_engine() -> None:
    """
    Recreates the engine and session factory, disposing the old engine.

    On failure the previous engine stays in place and the error propagates.
    """
    global _engine, _SessionFactory

    async with _engine_lock:
        old_engine = _engine
        try:
            new_engine = _create_engine()
        except Exception:
            logger.exception("Failed to reset DB engine")
            raise
        _engine = new_engine
        _SessionFactory = _create_session_factory(new_engine)
        logger.info("DB engine has been reset successfully")
        if old_engine is not None:
            await old_engine.dispose()


def get_engine() -> AsyncEngine:
    """Current AsyncEngine, created on first use."""
    global _engine, _SessionFactory

    if _engine is None:
        _engine = _create_engine()
        _SessionFactory = _create_session_factory(_engine)
        logger.info("DB engine lazily initialized")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _SessionFactory

    if _SessionFactory is None:
        _SessionFactory = _create_session_factory(get_engine())
        logger.info("Session factory initialized")
    return _SessionFactory


# -----------------------------------------------------------------------------
# Sessions
# -----------------------------------------------------------------------------
@asynccontextmanager
async def lifespan_session() -> AsyncIterator[AsyncSession]:
    """
    Session for scripts and background jobs:

        async with lifespan_session() as db:
            ...
            await db.commit()
    """
    session = get_session_factory()()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency:

        SessionDep = Annotated[AsyncSession, Depends(get_db)]

        @router.post("/brands")
        async def create(db: SessionDep): ...

    Commit stays with the route; an exception rolls the session back.
    """
    async with lifespan_session() as session:
        yield session


async def dispose_engine() -> None:
    """Closes pooled connections on shutdown; the next use recreates the engine."""
    global _engine, _SessionFactory

    if _engine is not None:
        await _engine.dispose()
        logger.info("DB engine disposed")
    _engine = None
    _SessionFactory = None


# -----------------------------------------------------------------------------
# Health check
# -----------------------------------------------------------------------------
async def db_ping() -> bool:
    """True when SELECT 1 succeeds; False when the DB is missing or unreachable."""
    try:
        engine = get_engine()
    except RuntimeError as exc:
        logger.warning("DB ping skipped: %s", exc)
        return False
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (OperationalError, DBAPIError, OSError) as exc:
        logger.error("DB ping failed: DB is not reachable", extra={"exc_type": type(exc).__name__})
        return False


__all__ = [
    "AsyncSession",
    "AsyncEngine",
    "Base",
    "get_engine",
    "get_session_factory",
    "get_db",
    "lifespan_session",
    "db_ping",
    "reset_engine",
    "dispose_engine",
]
