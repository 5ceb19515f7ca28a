"""
Test configuration and fixtures.

Every test gets a fresh in-memory SQLite database. API tests talk to the
ASGI app through httpx with the session, background session factory and
geolocator dependencies overridden.
"""

from datetime import datetime
from typing import Optional

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from shorturl.api.endpoints import get_geolocator
from shorturl.core.rate_limit import limiter
from shorturl.db.models import AnalyticsEvent, ShortURL
from shorturl.db.session import get_session, get_session_factory
from shorturl.db.sqlite_adapter import SQLiteAdapter
from shorturl.main import app
from shorturl.services.geolocation import GeoData, GeoLocator

TEST_DATABASE_URL = "sqlite+aiosqlite://"


class FakeGeoLocator(GeoLocator):
    """Geolocator answering from a fixed table, recording every lookup."""

    def __init__(self, locations: Optional[dict] = None):
        super().__init__(enabled=False)
        self.locations = locations or {}
        self.calls = []

    async def lookup(self, ip: str) -> Optional[GeoData]:
        self.calls.append(ip)
        return self.locations.get(ip)


@pytest_asyncio.fixture
async def engine():
    engine = SQLiteAdapter().create_engine(TEST_DATABASE_URL)
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def geolocator():
    return FakeGeoLocator({
        "8.8.8.8": GeoData(city="Mountain View", region="California", country="United States"),
    })


@pytest_asyncio.fixture
async def client(session_factory, geolocator):
    """
    HTTP client bound to the app with database dependencies overridden.
    """
    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_geolocator] = lambda: geolocator
    limiter.reset()

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()
    limiter.reset()


@pytest.fixture
def add_url(db_session):
    """Insert a ShortURL row directly."""
    async def _add_url(short_url: str, long_url: str = "https://example.com",
                       custom_alias: str = None, topic: str = None) -> ShortURL:
        row = ShortURL(long_url=long_url, short_url=short_url, custom_alias=custom_alias, topic=topic)
        db_session.add(row)
        await db_session.commit()
        return row
    return _add_url


@pytest.fixture
def add_events(db_session):
    """Insert ``count`` identical analytics events."""
    async def _add_events(alias: str, timestamp: datetime, user_agent: str = "",
                          ip_address: str = "1.1.1.1", count: int = 1) -> None:
        for _ in range(count):
            db_session.add(AnalyticsEvent(
                alias=alias,
                timestamp=timestamp,
                user_agent=user_agent,
                ip_address=ip_address,
                geolocation="Unknown, Unknown, Unknown",
            ))
        await db_session.commit()
    return _add_events


@pytest.fixture
def drop_analytics_table(db_session):
    """Drop url_analytics so every analytics query fails."""
    async def _drop() -> None:
        await db_session.execute(text("DROP TABLE url_analytics"))
        await db_session.commit()
    return _drop
