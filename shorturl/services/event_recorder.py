"""
Redirect Event Recorder

Writes one AnalyticsEvent per successful redirect. Designed to be called
from a background task so the redirect response is never held up by
geolocation or the analytics insert.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.db.models import AnalyticsEvent
from shorturl.db.repository import AnalyticsRepository
from shorturl.services.geolocation import GeoLocator, format_geolocation, normalize_ip


class EventRecorderService:
    """
    Service for recording redirect analytics.
    """

    def __init__(self, session: AsyncSession, geolocator: Optional[GeoLocator] = None):
        """
        Args:
            session: Async database session for database operations
            geolocator: IP to location collaborator (defaults to ip-api.com)
        """
        self.session = session
        self.repository = AnalyticsRepository(session)
        self.geolocator = geolocator or GeoLocator()

    async def record(
        self,
        alias: str,
        user_agent: Optional[str],
        ip_address: Optional[str]
    ) -> AnalyticsEvent:
        """
        Record a redirect through ``alias``.

        A failed or empty geolocation lookup is stored as
        "Unknown, Unknown, Unknown"; it never fails the record.

        Raises:
            DatabaseError: If the insert fails
        """
        ip_address = normalize_ip(ip_address)
        geo = await self.geolocator.lookup(ip_address)

        event = AnalyticsEvent(
            alias=alias,
            timestamp=datetime.utcnow(),
            user_agent=user_agent or "",
            ip_address=ip_address,
            geolocation=format_geolocation(geo),
        )
        return await self.repository.insert_event(event)
