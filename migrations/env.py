"""Alembic environment script for async database migrations.

Runs the migrations under ``migrations/versions`` against the database
configured in ``Settings.database_config``. Models are imported so that
``Base.metadata`` describes the ``credito`` table for autogenerate.
"""

import asyncio
import logging
from typing import Any

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from src.core.config import get_settings
from src.domain.credits.models import Credit  # noqa: F401 - registers the table
from src.infrastructure.database.base import Base

# Initialize standard logger
logger = logging.getLogger(__name__)

# Set the target metadata for autogenerate support
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Emits the SQL of every pending migration without connecting.
    """
    logger.info("Running migrations in offline mode")

    # Get database URL from our settings
    settings = get_settings()
    url = settings.database_config.database_url

    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Run migrations using the provided connection.

    Args:
        connection: The database connection to use for migrations.
    """
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations in 'online' mode with async engine.

    Migrations run through ``run_sync`` on an asyncpg connection.
    """
    logger.info("Running migrations in online mode with async engine")

    # Get database configuration from our settings
    settings = get_settings()
    db_config = settings.database_config

    configuration: dict[str, Any] = {
        "sqlalchemy.url": db_config.database_url,
        "sqlalchemy.echo": db_config.echo,
    }

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,  # Use NullPool for migrations (no connection pooling)
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode.

    Alembic is synchronous, so the async runner gets its own event loop.
    """
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
