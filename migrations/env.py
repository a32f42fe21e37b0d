# -*- coding: utf-8 -*-
"""Alembic environment of the affiliate portal (async).

    • DSN comes from config_core (DATABASE_URL, normalized to asyncpg).
    • target_metadata is the shared Declarative Base; importing
      affiliate_portal.models registers every table on it.
    • Offline mode renders SQL with literal binds for review.
"""

from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from affiliate_portal.core.config_core import get_settings
from affiliate_portal.core.database_core import Base
from affiliate_portal.core.logging_core import get_logger
from affiliate_portal.models import MODEL_REGISTRY

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

logger = get_logger(__name__)
settings = get_settings()

db_url = settings.database_url_asyncpg()
config.set_main_option("sqlalchemy.url", db_url)

target_metadata = Base.metadata
logger.info("Alembic env loaded", extra={"models": sorted(MODEL_REGISTRY)})


def run_migrations_offline() -> None:
    """Emits SQL without connecting."""

    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section) or {},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
