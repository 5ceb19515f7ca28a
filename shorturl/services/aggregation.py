"""
Click Aggregation

Pure functions turning pre-grouped analytics tuples into click reports.
Nothing here touches the database; StatsService fetches the tuples and
hands them over, so every function is deterministic for a given input
and ``today``.

Counting rules (kept identical to the reports clients already consume):
- Unique users are counted over the single representative IP each tuple
  carries, not over every IP inside the group.
- clicksByDate keeps dates in the order they are first seen in the input
  and has an inclusive lower bound of ``today - days`` with no upper bound.
- Breakdown buckets appear in the order they are first seen.
"""

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from shorturl.api.schemas import (
    AggregateReport,
    DateClicks,
    DeviceTypeStats,
    OSTypeStats,
    TopicReport,
    TopicURLStats,
)
from shorturl.db.repository import EventTuple

DEFAULT_WINDOW_DAYS = 7

# Checked in order, first match wins
OS_RULES = (
    (("windows",), "Windows"),
    (("mac",), "macOS"),
    (("linux",), "Linux"),
    (("android",), "Android"),
    (("ios", "iphone"), "iOS"),
)
OTHER_OS = "Other"

MOBILE_MARKERS = ("mobile", "android", "iphone")


def classify_os(user_agent: Optional[str]) -> str:
    """Map a user agent to Windows, macOS, Linux, Android, iOS or Other."""
    agent = (user_agent or "").lower()
    for markers, os_name in OS_RULES:
        if any(marker in agent for marker in markers):
            return os_name
    return OTHER_OS


def classify_device(user_agent: Optional[str]) -> str:
    """Map a user agent to "mobile" or "desktop"."""
    agent = (user_agent or "").lower()
    if any(marker in agent for marker in MOBILE_MARKERS):
        return "mobile"
    return "desktop"


def utc_today() -> date:
    # Event timestamps are stored in UTC
    return datetime.utcnow().date()


def window_start(today: Optional[date] = None, days: int = DEFAULT_WINDOW_DAYS) -> str:
    """ISO date of the first day included in clicksByDate (``today`` defaults to the UTC date)."""
    today = today or utc_today()
    return (today - timedelta(days=days)).isoformat()


def clicks_by_date(
    tuples: Iterable[EventTuple],
    today: Optional[date] = None,
    days: int = DEFAULT_WINDOW_DAYS
) -> List[DateClicks]:
    """
    Sum clicks per date for dates on or after ``today - days``.

    Dates are compared as ISO strings.
    """
    since = window_start(today, days)
    totals: Dict[str, int] = {}
    for row in tuples:
        if row.click_date >= since:
            totals[row.click_date] = totals.get(row.click_date, 0) + row.total_clicks
    return [DateClicks(date=day, click_count=count) for day, count in totals.items()]


def _breakdown(tuples: Sequence[EventTuple], classify) -> List[tuple]:
    buckets: Dict[str, dict] = {}
    for row in tuples:
        name = classify(row.user_agent)
        bucket = buckets.setdefault(name, {"clicks": 0, "ips": set()})
        bucket["clicks"] += row.total_clicks
        bucket["ips"].add(row.ip_address)
    return [(name, bucket["clicks"], len(bucket["ips"])) for name, bucket in buckets.items()]


def aggregate_clicks(
    tuples: Sequence[EventTuple],
    today: Optional[date] = None,
    days: int = DEFAULT_WINDOW_DAYS
) -> AggregateReport:
    """
    Build the click report of one alias.

    Args:
        tuples: Rows grouped by (alias, click date, user agent)
        today: Reference date for the clicksByDate window
        days: Length of the clicksByDate window

    Returns:
        AggregateReport; all zeros and empty lists when ``tuples`` is empty
    """
    tuples = list(tuples)

    os_type = [
        OSTypeStats(os_name=name, unique_clicks=clicks, unique_users=users)
        for name, clicks, users in _breakdown(tuples, classify_os)
    ]
    device_type = [
        DeviceTypeStats(device_name=name, unique_clicks=clicks, unique_users=users)
        for name, clicks, users in _breakdown(tuples, classify_device)
    ]

    return AggregateReport(
        total_clicks=sum(row.total_clicks for row in tuples),
        unique_users=len({row.ip_address for row in tuples}),
        clicks_by_date=clicks_by_date(tuples, today, days),
        os_type=os_type,
        device_type=device_type,
    )


def roll_up_topic(
    tuples: Sequence[EventTuple],
    today: Optional[date] = None,
    days: int = DEFAULT_WINDOW_DAYS
) -> TopicReport:
    """
    Combine the clicks of every alias under a topic.

    Args:
        tuples: Rows grouped by (alias, click date) for the topic's aliases
        today: Reference date for the clicksByDate window
        days: Length of the clicksByDate window

    Returns:
        TopicReport. ``urls`` lists only aliases that appear in ``tuples``;
        topic URLs without any click are left out.
    """
    tuples = list(tuples)

    per_alias: Dict[str, dict] = {}
    for row in tuples:
        entry = per_alias.setdefault(row.alias, {"clicks": 0, "ips": set()})
        entry["clicks"] += row.total_clicks
        entry["ips"].add(row.ip_address)

    urls = [
        TopicURLStats(short_url=alias, total_clicks=entry["clicks"], unique_users=len(entry["ips"]))
        for alias, entry in per_alias.items()
    ]

    return TopicReport(
        total_clicks=sum(row.total_clicks for row in tuples),
        unique_users=len({row.ip_address for row in tuples}),
        clicks_by_date=clicks_by_date(tuples, today, days),
        urls=urls,
    )
