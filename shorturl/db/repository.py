"""
Storage Repositories

Thin query layer between the services and the database. Every storage
operation the services need lives here, so the aggregation code only
ever sees plain rows and tuples.

All SQLAlchemy failures are re-raised as DatabaseError, except
IntegrityError on inserts, which callers translate themselves
(a duplicate custom alias is an AliasConflictError, not a storage fault).
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.core.exceptions import DatabaseError
from shorturl.db.factory import adapter_for_dialect
from shorturl.db.interface import DatabaseAdapter
from shorturl.db.models import AnalyticsEvent, ShortURL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventTuple:
    """
    Pre-aggregated analytics row.

    One tuple covers every event sharing (alias, click date[, user agent]).
    ``ip_address`` is a single representative IP of the group, not the
    group's full IP set.
    """
    alias: str
    click_date: str
    total_clicks: int
    unique_ips: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def _iso_date(value) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class URLRepository:
    """Storage operations on the urls table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _first(self, statement) -> Optional[ShortURL]:
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise DatabaseError("URL lookup failed", original_error=e) from e
        return result.scalars().first()

    async def find_by_token(self, token: str) -> Optional[ShortURL]:
        return await self._first(select(ShortURL).where(ShortURL.short_url == token).limit(1))

    async def find_by_custom_alias(self, alias: str) -> Optional[ShortURL]:
        return await self._first(select(ShortURL).where(ShortURL.custom_alias == alias).limit(1))

    async def find_by_alias(self, alias: str) -> Optional[ShortURL]:
        """
        Find the first URL whose token OR custom alias equals ``alias``.

        If different rows match on token and on custom alias, whichever
        row the database returns first wins.
        """
        statement = (
            select(ShortURL)
            .where(or_(ShortURL.short_url == alias, ShortURL.custom_alias == alias))
            .limit(1)
        )
        return await self._first(statement)

    async def find_by_topic(self, topic: str) -> List[ShortURL]:
        try:
            result = await self.session.execute(
                select(ShortURL).where(ShortURL.topic == topic).order_by(ShortURL.id)
            )
        except SQLAlchemyError as e:
            raise DatabaseError("Topic lookup failed", original_error=e) from e
        return list(result.scalars().all())

    async def insert_url(self, short_url: ShortURL) -> ShortURL:
        """
        Insert and commit a URL row.

        Raises:
            IntegrityError: On a unique constraint violation (session rolled back)
            DatabaseError: On any other database failure
        """
        try:
            self.session.add(short_url)
            await self.session.flush()
            await self.session.commit()
            await self.session.refresh(short_url)
        except IntegrityError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to create short URL: {str(e)}", original_error=e) from e
        return short_url


class AnalyticsRepository:
    """Storage operations on the url_analytics table."""

    def __init__(self, session: AsyncSession, adapter: Optional[DatabaseAdapter] = None):
        self.session = session
        self.adapter = adapter or adapter_for_dialect(session.bind.dialect.name)

    async def insert_event(self, event: AnalyticsEvent) -> AnalyticsEvent:
        try:
            self.session.add(event)
            await self.session.flush()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to record analytics event: {str(e)}", original_error=e) from e
        return event

    async def query_grouped_events(self, alias: str) -> List[EventTuple]:
        """
        Events of one alias grouped by (alias, click date, user agent).

        Rows come back ordered by the grouping columns.
        """
        click_date = self.adapter.click_date(AnalyticsEvent.timestamp).label("click_date")
        statement = (
            select(
                AnalyticsEvent.alias,
                click_date,
                AnalyticsEvent.user_agent,
                func.count().label("total_clicks"),
                func.count(func.distinct(AnalyticsEvent.ip_address)).label("unique_ips"),
                func.min(AnalyticsEvent.ip_address).label("ip_address"),
            )
            .where(AnalyticsEvent.alias == alias)
            .group_by(AnalyticsEvent.alias, click_date, AnalyticsEvent.user_agent)
            .order_by(AnalyticsEvent.alias, click_date, AnalyticsEvent.user_agent)
        )
        rows = await self._fetch(statement)
        return [
            EventTuple(
                alias=row.alias,
                click_date=_iso_date(row.click_date),
                user_agent=row.user_agent,
                total_clicks=row.total_clicks,
                unique_ips=row.unique_ips,
                ip_address=row.ip_address,
            )
            for row in rows
        ]

    async def query_grouped_topic_events(self, aliases: Iterable[str]) -> List[EventTuple]:
        """
        Events of several aliases grouped by (alias, click date) only.
        """
        aliases = list(aliases)
        if not aliases:
            return []

        click_date = self.adapter.click_date(AnalyticsEvent.timestamp).label("click_date")
        statement = (
            select(
                AnalyticsEvent.alias,
                click_date,
                func.count().label("total_clicks"),
                func.count(func.distinct(AnalyticsEvent.ip_address)).label("unique_ips"),
                func.min(AnalyticsEvent.ip_address).label("ip_address"),
            )
            .where(AnalyticsEvent.alias.in_(aliases))
            .group_by(AnalyticsEvent.alias, click_date)
            .order_by(AnalyticsEvent.alias, click_date)
        )
        rows = await self._fetch(statement)
        return [
            EventTuple(
                alias=row.alias,
                click_date=_iso_date(row.click_date),
                total_clicks=row.total_clicks,
                unique_ips=row.unique_ips,
                ip_address=row.ip_address,
            )
            for row in rows
        ]

    async def _fetch(self, statement):
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching analytics data: {str(e)}")
            raise DatabaseError("Error fetching analytics data", original_error=e) from e
        return result.all()
