"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse:
the analytics services build the report models directly.

Design Principles:
- Python attributes are snake_case, JSON keys are camelCase
  (the wire format existing API clients rely on)
- Request models: Define input shape, business validation stays in services
- Response models: Define output structure
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortenRequest(CamelModel):
    """Request model for URL shortening endpoint."""
    long_url: Optional[str] = Field(default=None, description="The long URL to shorten")
    custom_alias: Optional[str] = Field(default=None, description="Optional alias to use instead of a generated token")
    topic: Optional[str] = Field(default=None, description="Optional grouping label")


class ShortenResponse(CamelModel):
    """Response model for URL shortening endpoint."""
    short_url: str = Field(..., description="The complete short URL")
    created_at: datetime


class DateClicks(CamelModel):
    date: str
    click_count: int


class OSTypeStats(CamelModel):
    os_name: str
    unique_clicks: int
    unique_users: int


class DeviceTypeStats(CamelModel):
    device_name: str
    unique_clicks: int
    unique_users: int


class AggregateReport(CamelModel):
    """Click statistics for a single alias."""
    total_clicks: int = 0
    unique_users: int = 0
    clicks_by_date: List[DateClicks] = Field(default_factory=list)
    os_type: List[OSTypeStats] = Field(default_factory=list)
    device_type: List[DeviceTypeStats] = Field(default_factory=list)


class TopicURLStats(CamelModel):
    short_url: str
    total_clicks: int
    unique_users: int


class TopicReport(CamelModel):
    """Click statistics rolled up across every alias of a topic."""
    total_clicks: int = 0
    unique_users: int = 0
    clicks_by_date: List[DateClicks] = Field(default_factory=list)
    urls: List[TopicURLStats] = Field(default_factory=list)
