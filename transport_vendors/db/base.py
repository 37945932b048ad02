"""Async SQLAlchemy engine, session factory, declarative Base, and FastAPI dependency."""


from collections.abc import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from transport_vendors.core.config import settings

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def _engine_kwargs(url: URL) -> dict:
    kwargs: dict = {
        "pool_pre_ping": True,
        "echo": settings.db_echo,
    }

    # SQLite (local dev / tests) doesn't support connection pooling parameters
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        return kwargs

    # Bounded pool: requests beyond pool_size wait for a free connection
    kwargs.update(
        pool_size=settings.db_pool_size,
        max_overflow=0,
        pool_timeout=settings.db_pool_timeout,
    )
    if url.get_driver_name() == "psycopg":
        # libpq connection parameters
        kwargs["connect_args"] = {
            "connect_timeout": settings.db_connect_timeout,
            "sslmode": settings.db_ssl_mode,
        }
    return kwargs


def build_engine(url: URL | str) -> AsyncEngine:
    """Create an async engine for *url* with the application's pool settings."""
    if isinstance(url, str):
        url = make_url(url)
    new_engine = create_async_engine(url, **_engine_kwargs(url))

    if url.get_backend_name() == "sqlite":
        # ON DELETE CASCADE for vendor_notes needs foreign keys switched on
        @event.listens_for(new_engine.sync_engine, "connect")
        def _enable_sqlite_fks(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(settings.sqlalchemy_url)

# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)

# ---------------------------------------------------------------------------
# Declarative Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """All ORM models inherit from this base."""

# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session; roll back on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

# ---------------------------------------------------------------------------
# Connectivity probe
# ---------------------------------------------------------------------------
async def ping_database(bind: AsyncEngine | None = None) -> None:
    """Run ``SELECT 1`` against the store; raises the driver error on failure."""
    async with (bind or engine).connect() as conn:
        await conn.execute(text("SELECT 1"))
