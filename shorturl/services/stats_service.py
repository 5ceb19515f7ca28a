"""
Statistics Service

This service handles retrieving click statistics for short URLs and topics.

Design Decisions:
- Read-only: never writes to the database
- Reports are recomputed from the raw analytics rows on every call;
  nothing is cached
- Storage does the grouping, shorturl.services.aggregation does the math
"""

from datetime import date
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.api.schemas import AggregateReport, TopicReport
from shorturl.core.exceptions import TopicNotFoundError
from shorturl.core.setting import settings
from shorturl.db.repository import AnalyticsRepository, URLRepository
from shorturl.services.aggregation import aggregate_clicks, roll_up_topic
from shorturl.services.url_service import URLShorteningService


class StatsService:
    """
    Service for retrieving URL statistics.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize the stats service with a database session.

        Args:
            session: Async database session for database operations
        """
        self.session = session
        self.url_service = URLShorteningService(session)
        self.url_repository = URLRepository(session)
        self.analytics_repository = AnalyticsRepository(session)

    async def get_alias_report(self, alias: str, today: Optional[date] = None) -> AggregateReport:
        """
        Click report for one alias.

        Args:
            alias: Short token or custom alias
            today: Reference date for the clicksByDate window (defaults to UTC today)

        Raises:
            ShortURLNotFoundError: If the alias is not registered
            DatabaseError: If the analytics query fails
        """
        await self.url_service.resolve(alias)

        tuples = await self.analytics_repository.query_grouped_events(alias)
        return aggregate_clicks(tuples, today=today, days=settings.CLICKS_BY_DATE_DAYS)

    async def get_topic_report(self, topic: str, today: Optional[date] = None) -> TopicReport:
        """
        Click report rolled up across every URL registered under a topic.

        Raises:
            TopicNotFoundError: If no URL has this topic
            DatabaseError: If a query fails
        """
        urls = await self.url_repository.find_by_topic(topic)
        if not urls:
            raise TopicNotFoundError(topic)

        tuples = await self.analytics_repository.query_grouped_topic_events(
            url.short_url for url in urls
        )
        return roll_up_topic(tuples, today=today, days=settings.CLICKS_BY_DATE_DAYS)
