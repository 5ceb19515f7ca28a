"""
PostgreSQL Database Adapter

Server-based backend for production deployments. Requires the asyncpg
driver (``pip install .[postgres]``) and a
``postgresql+asyncpg://`` DATABASE_URL.
"""

from typing import Any, Optional
from sqlalchemy import Date, cast
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import Pool

from shorturl.db.interface import DatabaseAdapter


class PostgreSQLAdapter(DatabaseAdapter):
    """
    PostgreSQL database adapter implementation.

    Uses SQLAlchemy's default queue pool with pre-ping so connections
    dropped by the server are replaced transparently.
    """

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        return create_async_engine(
            database_url,
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )

    def get_pool_class(self) -> Optional[type[Pool]]:
        return None

    def get_connect_args(self) -> dict[str, Any]:
        return {}

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False,
            "pool_size": 10,
            "max_overflow": 20,
            "pool_pre_ping": True,
        }

    def click_date(self, column: Any):
        return cast(column, Date)
