"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

SQLite is a file-based database that's perfect for:
- Local development
- Testing
- Single-instance deployments
- Low to medium traffic applications
"""

from typing import Any
from sqlalchemy import func
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from shorturl.db.interface import DatabaseAdapter


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    This adapter handles all SQLite-specific configuration and operations.
    """

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create SQLite async engine with appropriate configuration.

        SQLite-specific configuration:
        - NullPool for file databases, StaticPool for in-memory ones so
          every session sees the same database
        - check_same_thread=False: Required for async SQLite operations

        Args:
            database_url: SQLite connection string (sqlite+aiosqlite:///...)
            **kwargs: Additional engine options (merged with SQLite defaults)

        Returns:
            Configured AsyncEngine for SQLite
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        poolclass = self.get_pool_class()
        if self.is_memory_database(database_url):
            poolclass = StaticPool

        return create_async_engine(
            database_url,
            poolclass=poolclass,
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )

    @staticmethod
    def is_memory_database(database_url: str) -> bool:
        database = make_url(database_url).database
        return not database or database == ":memory:"

    def get_pool_class(self) -> type[NullPool]:
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "check_same_thread": False
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def click_date(self, column: Any):
        # DATE() returns 'YYYY-MM-DD' text in SQLite
        return func.date(column)
