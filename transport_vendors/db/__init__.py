"""Database package — async SQLAlchemy engine, session factory, Base, migrations."""
from transport_vendors.db.base import Base, async_session_factory, engine, get_db, ping_database

__all__ = ["Base", "async_session_factory", "engine", "get_db", "ping_database"]
