"""Run the Alembic revisions under ``transport_vendors/migrations`` against the store.

The ``alembic_version`` table records how far a database has been brought, so
calling :func:`run_migrations` on every process start is cheap: an up-to-date
database gets one version lookup and no further writes.

    python -m transport_vendors.db.migrate
"""

import asyncio
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from transport_vendors.core.config import settings
from transport_vendors.db.base import engine as default_engine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


def alembic_config(connection: Connection | None = None) -> Config:
    """Build an Alembic config that shares *connection* with env.py."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    if connection is not None:
        cfg.attributes["connection"] = connection
    return cfg


def _upgrade(connection: Connection, revision: str) -> None:
    command.upgrade(alembic_config(connection), revision)


async def run_migrations(bind: AsyncEngine | None = None, revision: str = "head") -> bool:
    """Upgrade the schema to *revision*.

    Failures are logged and reported as ``False``; the caller keeps running
    against whatever schema the database has.
    """
    bind = bind or default_engine
    try:
        async with bind.begin() as conn:
            await conn.run_sync(_upgrade, revision)
    except Exception:
        logger.exception(
            "Schema migration failed for %s; continuing with the existing schema",
            bind.url.render_as_string(hide_password=True),
        )
        return False
    logger.info("Vendor schema is at revision %s", revision)
    return True


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    logger.info("Migrating %s", settings.safe_database_url)
    ok = asyncio.run(run_migrations())
    raise SystemExit(0 if ok else 1)


if __name__ == "__main__":
    main()
