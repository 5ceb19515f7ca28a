"""
Tests for redirect event recording and geolocation.
"""

import logging

import httpx
import pytest
from sqlalchemy import select

from shorturl.db.models import AnalyticsEvent
from shorturl.services.background_tasks import record_event_background
from shorturl.services.event_recorder import EventRecorderService
from shorturl.services.geolocation import (
    UNKNOWN_GEOLOCATION,
    GeoData,
    GeoLocator,
    format_geolocation,
    is_public_ip,
    normalize_ip,
)


async def all_events(session):
    result = await session.execute(select(AnalyticsEvent).order_by(AnalyticsEvent.id))
    return list(result.scalars().all())


class TestEventRecorderService:

    @pytest.mark.asyncio
    async def test_records_geolocated_event(self, db_session, geolocator):
        recorder = EventRecorderService(db_session, geolocator=geolocator)

        event = await recorder.record("abc", "Mozilla Windows", "8.8.8.8")
        await db_session.commit()

        assert event.id is not None
        assert event.alias == "abc"
        assert event.user_agent == "Mozilla Windows"
        assert event.ip_address == "8.8.8.8"
        assert event.geolocation == "Mountain View, California, United States"
        assert event.timestamp is not None

    @pytest.mark.asyncio
    async def test_unknown_location_uses_sentinel(self, db_session, geolocator):
        recorder = EventRecorderService(db_session, geolocator=geolocator)

        event = await recorder.record("abc", None, None)

        assert event.ip_address == "Unknown"
        assert event.user_agent == ""
        assert event.geolocation == UNKNOWN_GEOLOCATION
        assert geolocator.calls == ["Unknown"]

    @pytest.mark.asyncio
    async def test_malformed_ip_is_stored_as_unknown(self, db_session, geolocator):
        recorder = EventRecorderService(db_session, geolocator=geolocator)

        event = await recorder.record("abc", "curl/8.0", "x" * 500)
        await db_session.commit()

        assert event.ip_address == "Unknown"
        assert geolocator.calls == ["Unknown"]


class TestRecordEventBackground:

    @pytest.mark.asyncio
    async def test_commits_event_in_own_session(self, session_factory, geolocator, db_session):
        await record_event_background(
            alias="abc",
            ip_address="8.8.8.8",
            user_agent="curl/8.0",
            session_factory=session_factory,
            geolocator=geolocator
        )

        events = await all_events(db_session)
        assert [(e.alias, e.ip_address, e.user_agent) for e in events] == [("abc", "8.8.8.8", "curl/8.0")]

    @pytest.mark.asyncio
    async def test_storage_failure_is_logged_and_swallowed(self, geolocator, caplog):
        def broken_factory():
            raise RuntimeError("database is down")

        with caplog.at_level(logging.ERROR):
            await record_event_background(
                alias="abc",
                ip_address="8.8.8.8",
                session_factory=broken_factory,
                geolocator=geolocator
            )

        assert "Error logging analytics for abc" in caplog.text

    @pytest.mark.asyncio
    async def test_geolocation_failure_does_not_raise(self, session_factory, db_session):
        class ExplodingGeoLocator(GeoLocator):
            async def lookup(self, ip):
                raise RuntimeError("lookup exploded")

        await record_event_background(
            alias="abc",
            ip_address="8.8.8.8",
            session_factory=session_factory,
            geolocator=ExplodingGeoLocator(enabled=False)
        )

        assert await all_events(db_session) == []


class TestGeoLocator:

    def test_is_public_ip(self):
        assert is_public_ip("8.8.8.8")
        assert is_public_ip("2001:4860:4860::8888")
        assert not is_public_ip("127.0.0.1")
        assert not is_public_ip("192.168.1.10")
        assert not is_public_ip("Unknown")
        assert not is_public_ip(None)

    def test_normalize_ip(self):
        assert normalize_ip(" 8.8.8.8 ") == "8.8.8.8"
        assert normalize_ip("2001:4860:4860:0000:0000:0000:0000:8888") == "2001:4860:4860::8888"
        assert normalize_ip("not-an-ip") == "Unknown"
        assert normalize_ip("1" * 200) == "Unknown"
        assert normalize_ip(None) == "Unknown"

    def test_format_geolocation(self):
        assert format_geolocation(None) == "Unknown, Unknown, Unknown"
        assert format_geolocation(GeoData(city="Paris", region="Ile-de-France", country="France")) == (
            "Paris, Ile-de-France, France"
        )

    @pytest.mark.asyncio
    async def test_lookup_success(self):
        def handler(request):
            assert request.url.path == "/json/8.8.8.8"
            return httpx.Response(200, json={
                "status": "success", "country": "United States", "regionName": "Virginia", "city": "",
            })

        locator = GeoLocator(api_url="http://geo.test/json", enabled=True,
                             transport=httpx.MockTransport(handler))

        assert await locator.lookup("8.8.8.8") == {
            "city": "Unknown", "region": "Virginia", "country": "United States",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, json={"status": "fail", "message": "reserved range"}),
        httpx.Response(500, text="boom"),
        httpx.Response(200, text="not json"),
    ])
    async def test_lookup_failures_return_none(self, response):
        locator = GeoLocator(api_url="http://geo.test/json", enabled=True,
                             transport=httpx.MockTransport(lambda request: response))

        assert await locator.lookup("8.8.8.8") is None

    @pytest.mark.asyncio
    async def test_private_and_disabled_lookups_skip_network(self):
        def handler(request):
            raise AssertionError("no request expected")

        transport = httpx.MockTransport(handler)

        assert await GeoLocator(enabled=True, transport=transport).lookup("10.0.0.1") is None
        assert await GeoLocator(enabled=False, transport=transport).lookup("8.8.8.8") is None
