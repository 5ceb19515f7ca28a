"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter / PostgreSQLAdapter: backend-specific implementations
- Session management: Database session creation and management
- Repositories: the storage operations the services depend on

To add a new database backend:
1. Create a new adapter class inheriting from DatabaseAdapter
2. Implement all abstract methods
3. Register it in shorturl.db.factory
"""

from shorturl.db.interface import DatabaseAdapter
from shorturl.db.session import get_session, get_session_factory, async_session_maker, engine

__all__ = [
    "DatabaseAdapter",
    "get_session",
    "get_session_factory",
    "async_session_maker",
    "engine",
]
