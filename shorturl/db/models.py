"""
Database Models for URL Shortener Service

This module defines the SQLModel database schemas for:
- ShortURL: Stores the mapping between short tokens / custom aliases and long URLs
- AnalyticsEvent: Stores one row per successful redirect for analytics

Design Decisions:
- AnalyticsEvent is joined to ShortURL by alias string, not by foreign key:
  events outlive any alias mismatch and stay in the raw set
- Unique indexes on short_url and custom_alias; the custom_alias constraint
  is what resolves concurrent creation races
- Index on alias for the grouped analytics queries
"""

from sqlmodel import SQLModel, Field, Column
from datetime import datetime
from typing import Optional
from sqlalchemy import String, DateTime, Text


class ShortURL(SQLModel, table=True):
    """
    Main table storing URL shortening mappings.

    Fields:
    - id: Auto-incrementing primary key
    - long_url: The long URL that was shortened
    - short_url: Unique short token (the custom alias when one was given)
    - custom_alias: Caller-supplied alias, unique when present
    - topic: Optional free-text grouping label
    - created_at: Timestamp when URL was shortened
    """
    __tablename__ = "urls"

    id: Optional[int] = Field(default=None, primary_key=True)
    long_url: str = Field(sa_column=Column(Text, nullable=False))
    short_url: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True, index=True),
        max_length=50
    )
    custom_alias: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True, unique=True, index=True)
    )
    topic: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True, index=True)
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )


class AnalyticsEvent(SQLModel, table=True):
    """
    One redirect through a short URL.

    Append-only: rows are written once by the event recorder and never
    updated or deleted.

    Fields:
    - alias: The token or custom alias actually used in the request
    - timestamp: When the redirect happened (UTC)
    - user_agent: Raw User-Agent header, may be empty
    - ip_address: Client IP, "Unknown" when unavailable
    - geolocation: "city, region, country" or "Unknown, Unknown, Unknown"
    """
    __tablename__ = "url_analytics"

    id: Optional[int] = Field(default=None, primary_key=True)
    alias: str = Field(
        sa_column=Column(String(50), nullable=False, index=True)
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    user_agent: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True)
    )
    ip_address: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True)
    )
    geolocation: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True)
    )
