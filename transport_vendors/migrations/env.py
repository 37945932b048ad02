"""Alembic async env — migrates the vendor store.

Two entry points:
  - ``alembic upgrade head`` from the repo root (uses alembic.ini and settings)
  - ``transport_vendors.db.migrate.run_migrations()`` at app startup, which
    hands over an open connection through ``config.attributes["connection"]``
"""

from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from transport_vendors.core.config import settings
from transport_vendors.db.base import Base

# Load all ORM models so autogenerate can detect them
import transport_vendors.domain  # noqa: F401

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=settings.sqlalchemy_url.render_as_string(hide_password=False),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,  # required for SQLite ALTER support
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(settings.sqlalchemy_url)
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
        await connection.commit()
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    shared_connection = config.attributes.get("connection")
    if shared_connection is None:
        asyncio.run(run_migrations_online())
    else:
        do_run_migrations(shared_connection)
