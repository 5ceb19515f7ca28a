"""
Database Adapter Factory

Picks the DatabaseAdapter matching a connection string's backend.
Code outside this package only ever asks for "the adapter"; adding a
backend means adding an adapter class and one entry in _ADAPTERS.
"""

from typing import Optional
from sqlalchemy.engine import make_url

from shorturl.core.setting import settings
from shorturl.db.interface import DatabaseAdapter
from shorturl.db.postgres_adapter import PostgreSQLAdapter
from shorturl.db.sqlite_adapter import SQLiteAdapter

_ADAPTERS = {
    "sqlite": SQLiteAdapter,
    "postgresql": PostgreSQLAdapter,
}


def adapter_for_dialect(dialect_name: str) -> DatabaseAdapter:
    """
    Return the adapter for a SQLAlchemy dialect name.

    Raises:
        ValueError: If no adapter is registered for the dialect
    """
    try:
        return _ADAPTERS[dialect_name]()
    except KeyError:
        raise ValueError(f"Unsupported database backend: {dialect_name}") from None


def get_database_adapter(database_url: Optional[str] = None) -> DatabaseAdapter:
    """
    Factory function to get the database adapter.

    Args:
        database_url: Connection string, defaults to settings.DATABASE_URL

    Returns:
        DatabaseAdapter instance for the URL's backend
    """
    url = make_url(database_url or settings.DATABASE_URL)
    return adapter_for_dialect(url.get_backend_name())
