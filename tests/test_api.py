"""
End-to-end tests for the HTTP endpoints.
"""

from datetime import datetime

import pytest
from sqlalchemy import select

from shorturl.core.setting import settings
from shorturl.db.models import AnalyticsEvent


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Process-Time" in response.headers


class TestShorten:

    @pytest.mark.asyncio
    async def test_create_short_url(self, client):
        response = await client.post("/api/shorten", json={"longUrl": "https://www.python.org/"})

        assert response.status_code == 201
        data = response.json()
        assert data["shortUrl"].startswith(f"{settings.BASE_URL}/api/shorten/")
        assert "createdAt" in data

    @pytest.mark.asyncio
    async def test_create_with_custom_alias(self, client):
        response = await client.post(
            "/api/shorten",
            json={"longUrl": "http://x.com", "customAlias": "abc", "topic": "news"}
        )

        assert response.status_code == 201
        assert response.json()["shortUrl"] == f"{settings.BASE_URL}/api/shorten/abc"

    @pytest.mark.asyncio
    async def test_duplicate_custom_alias(self, client):
        await client.post("/api/shorten", json={"longUrl": "http://x.com", "customAlias": "abc"})

        response = await client.post("/api/shorten", json={"longUrl": "http://y.com", "customAlias": "abc"})

        assert response.status_code == 409
        assert "already in use" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_missing_long_url(self, client):
        response = await client.post("/api/shorten", json={"customAlias": "abc"})

        assert response.status_code == 400
        assert response.json()["detail"] == "longUrl is required"

    @pytest.mark.asyncio
    async def test_invalid_long_url(self, client):
        response = await client.post("/api/shorten", json={"longUrl": "not-a-url"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_shorten_is_rate_limited(self, client):
        statuses = []
        for i in range(11):
            response = await client.post("/api/shorten", json={"longUrl": f"http://x.com/{i}"})
            statuses.append(response.status_code)

        assert statuses[:10] == [201] * 10
        assert statuses[10] == 429


class TestRedirect:

    @pytest.mark.asyncio
    async def test_redirect_records_event(self, client, db_session, geolocator):
        await client.post("/api/shorten", json={"longUrl": "https://www.github.com/", "customAlias": "gh"})

        response = await client.get(
            "/api/shorten/gh",
            headers={"User-Agent": "Mozilla iPhone", "X-Forwarded-For": "8.8.8.8, 10.0.0.1"}
        )

        assert response.status_code == 302
        assert response.headers["location"] == "https://www.github.com/"

        result = await db_session.execute(select(AnalyticsEvent))
        events = list(result.scalars().all())
        assert len(events) == 1
        assert events[0].alias == "gh"
        assert events[0].user_agent == "Mozilla iPhone"
        assert events[0].ip_address == "8.8.8.8"
        assert events[0].geolocation == "Mountain View, California, United States"
        assert geolocator.calls == ["8.8.8.8"]

    @pytest.mark.asyncio
    async def test_redirect_unknown_alias(self, client):
        response = await client.get("/api/shorten/nothing")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_redirect_survives_recording_failure(self, client, geolocator):
        async def broken_lookup(ip):
            raise RuntimeError("geolocation down")

        geolocator.lookup = broken_lookup
        await client.post("/api/shorten", json={"longUrl": "https://example.com/", "customAlias": "ex"})

        response = await client.get("/api/shorten/ex")

        assert response.status_code == 302

    @pytest.mark.asyncio
    async def test_redirect_ignores_malformed_forwarded_for(self, client, db_session):
        await client.post("/api/shorten", json={"longUrl": "https://example.com/", "customAlias": "ex"})

        response = await client.get("/api/shorten/ex", headers={"X-Forwarded-For": "x" * 500})

        assert response.status_code == 302
        result = await db_session.execute(select(AnalyticsEvent))
        assert [event.ip_address for event in result.scalars().all()] == ["127.0.0.1"]


class TestAnalytics:

    @pytest.mark.asyncio
    async def test_alias_analytics(self, client):
        await client.post("/api/shorten", json={"longUrl": "http://x.com", "customAlias": "abc"})
        await client.get("/api/shorten/abc", headers={"User-Agent": "Mozilla Windows", "X-Forwarded-For": "1.1.1.1"})
        await client.get("/api/shorten/abc", headers={"User-Agent": "Mozilla Windows", "X-Forwarded-For": "1.1.1.1"})
        await client.get("/api/shorten/abc", headers={"User-Agent": "Mozilla iPhone", "X-Forwarded-For": "2.2.2.2"})

        response = await client.get("/api/analytics/abc")

        assert response.status_code == 200
        data = response.json()
        today = datetime.utcnow().date().isoformat()
        assert data["totalClicks"] == 3
        assert data["uniqueUsers"] == 2
        assert data["clicksByDate"] == [{"date": today, "clickCount": 3}]
        assert data["osType"] == [
            {"osName": "Windows", "uniqueClicks": 2, "uniqueUsers": 1},
            {"osName": "iOS", "uniqueClicks": 1, "uniqueUsers": 1},
        ]
        assert data["deviceType"] == [
            {"deviceName": "desktop", "uniqueClicks": 2, "uniqueUsers": 1},
            {"deviceName": "mobile", "uniqueClicks": 1, "uniqueUsers": 1},
        ]

    @pytest.mark.asyncio
    async def test_alias_analytics_without_clicks(self, client):
        await client.post("/api/shorten", json={"longUrl": "http://x.com", "customAlias": "abc"})

        response = await client.get("/api/analytics/abc")

        assert response.status_code == 200
        assert response.json() == {
            "totalClicks": 0,
            "uniqueUsers": 0,
            "clicksByDate": [],
            "osType": [],
            "deviceType": [],
        }

    @pytest.mark.asyncio
    async def test_alias_analytics_not_found(self, client):
        response = await client.get("/api/analytics/nothing")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_topic_analytics(self, client):
        await client.post("/api/shorten", json={"longUrl": "http://x.com", "customAlias": "n1", "topic": "news"})
        await client.post("/api/shorten", json={"longUrl": "http://y.com", "customAlias": "n2", "topic": "news"})
        await client.get("/api/shorten/n1", headers={"X-Forwarded-For": "1.1.1.1"})

        response = await client.get("/api/analytics/topic/news")

        assert response.status_code == 200
        data = response.json()
        assert data["totalClicks"] == 1
        assert data["uniqueUsers"] == 1
        assert data["urls"] == [{"shortUrl": "n1", "totalClicks": 1, "uniqueUsers": 1}]

    @pytest.mark.asyncio
    async def test_topic_analytics_not_found(self, client):
        response = await client.get("/api/analytics/topic/missing")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_analytics_storage_failure_is_500(self, client, add_url, drop_analytics_table):
        await add_url("abc", topic="news")
        await drop_analytics_table()

        alias_response = await client.get("/api/analytics/abc")
        topic_response = await client.get("/api/analytics/topic/news")
        redirect_response = await client.get("/api/shorten/abc")

        assert alias_response.status_code == 500
        assert alias_response.json() == {"detail": "Error fetching analytics data"}
        assert topic_response.status_code == 500
        assert topic_response.json() == {"detail": "Error fetching analytics data"}
        assert redirect_response.status_code == 302
