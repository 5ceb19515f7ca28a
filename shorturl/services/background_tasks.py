"""
Background Task Helpers

Provides helper functions for background tasks that create their own database sessions.
Background tasks cannot use the endpoint's session as it's closed after the endpoint returns.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from shorturl.db.session import async_session_maker
from shorturl.services.event_recorder import EventRecorderService
from shorturl.services.geolocation import GeoLocator

logger = logging.getLogger(__name__)


async def record_event_background(
    alias: str,
    ip_address: Optional[str],
    user_agent: Optional[str] = None,
    session_factory: Optional[async_sessionmaker] = None,
    geolocator: Optional[GeoLocator] = None
) -> None:
    """
    Background task to record a redirect event.

    Never raises: analytics are best-effort and must not affect the
    redirect that triggered them.

    Args:
        alias: The alias that was accessed
        ip_address: IP address of the visitor
        user_agent: User agent string (optional)
        session_factory: Session factory to open the task's own session
        geolocator: Geolocation collaborator override
    """
    session_factory = session_factory or async_session_maker
    try:
        async with session_factory() as session:
            recorder = EventRecorderService(session, geolocator=geolocator)
            await recorder.record(
                alias=alias,
                user_agent=user_agent,
                ip_address=ip_address
            )
            await session.commit()
    except Exception as e:
        logger.error(
            f"Error logging analytics for {alias}: {str(e)}",
            exc_info=True
        )
