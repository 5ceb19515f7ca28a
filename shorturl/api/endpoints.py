"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request parsing (Pydantic models)
- Rate limiting
- Error handling and HTTP responses
- Delegating to service layer

Design Principles:
- Thin endpoints: Only validation and rate limiting
- Service layer: All business logic
- Error handling: Service exceptions mapped to HTTP status codes
"""

import logging

from fastapi import APIRouter, Request, Depends, HTTPException, BackgroundTasks, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shorturl.api.schemas import AggregateReport, ShortenRequest, ShortenResponse, TopicReport
from shorturl.db.session import get_session, get_session_factory
from shorturl.services.url_service import URLShorteningService
from shorturl.services.redirect_service import RedirectService
from shorturl.services.stats_service import StatsService
from shorturl.services.background_tasks import record_event_background
from shorturl.services.geolocation import UNKNOWN, GeoLocator, normalize_ip
from shorturl.core.exceptions import (
    AliasConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from shorturl.core.rate_limit import limiter, RATE_LIMITS
from shorturl.core.setting import settings

logger = logging.getLogger(__name__)

router = APIRouter()


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Handles proxies and load balancers by checking X-Forwarded-For header.
    A first entry that is not an IP address is ignored.

    Args:
        request: FastAPI Request object

    Returns:
        IP address as string, "Unknown" when unavailable
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        client_ip = normalize_ip(forwarded_for.split(",")[0])
        if client_ip != UNKNOWN:
            return client_ip

    return normalize_ip(request.client.host) if request.client else UNKNOWN


def get_geolocator() -> GeoLocator:
    """Dependency returning the geolocation collaborator."""
    return GeoLocator()


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    description="Takes a long URL and returns a shortened version, optionally under a custom alias and topic"
)
@limiter.limit(RATE_LIMITS["shorten"])
async def create_short_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    body: ShortenRequest,
    session: AsyncSession = Depends(get_session)
) -> ShortenResponse:
    """
    Create a new short URL.

    Returns:
        ShortenResponse with the complete short URL and creation time
    """
    url_service = URLShorteningService(session)

    try:
        short_url_obj = await url_service.create_short_url(
            body.long_url,
            custom_alias=body.custom_alias,
            topic=body.topic
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except AliasConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except DatabaseError as e:
        logger.error(f"Failed to create short URL: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create short URL"
        )

    return ShortenResponse(
        short_url=f"{settings.BASE_URL}/api/shorten/{short_url_obj.short_url}",
        created_at=short_url_obj.created_at
    )


@router.get(
    "/shorten/{alias}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Takes a short token or custom alias and redirects to the original long URL"
)
@limiter.limit(RATE_LIMITS["redirect"])
async def redirect_to_url(
    alias: str,
    request: Request,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    geolocator: GeoLocator = Depends(get_geolocator)
) -> RedirectResponse:
    """
    Redirect to the original URL for a given alias.

    The analytics event is recorded in a background task after the
    response is sent; a recording failure never affects the redirect.

    Raises:
        HTTPException 404: If alias not found
        HTTPException 429: If rate limit exceeded
    """
    redirect_service = RedirectService(session)

    try:
        long_url = await redirect_service.get_redirect_url(alias)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except DatabaseError as e:
        logger.error(f"Redirect lookup failed for {alias}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error"
        )

    background_tasks.add_task(
        record_event_background,
        alias=alias,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
        session_factory=session_factory,
        geolocator=geolocator
    )

    return RedirectResponse(
        url=long_url,
        status_code=status.HTTP_302_FOUND
    )


@router.get(
    "/analytics/topic/{topic}",
    response_model=TopicReport,
    summary="Get topic analytics",
    description="Returns clicks rolled up across every short URL registered under a topic"
)
@limiter.limit(RATE_LIMITS["analytics"])
async def get_topic_analytics(
    topic: str,
    request: Request,  # Required for rate limiting
    session: AsyncSession = Depends(get_session)
) -> TopicReport:
    """
    Raises:
        HTTPException 404: If no URL has this topic
        HTTPException 500: If analytics data cannot be fetched
    """
    stats_service = StatsService(session)

    try:
        return await stats_service.get_topic_report(topic)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except DatabaseError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching analytics data"
        )


@router.get(
    "/analytics/{alias}",
    response_model=AggregateReport,
    summary="Get URL analytics",
    description="Returns total clicks, unique users, last-7-days series and OS/device breakdowns for a short URL"
)
@limiter.limit(RATE_LIMITS["analytics"])
async def get_url_analytics(
    alias: str,
    request: Request,  # Required for rate limiting
    session: AsyncSession = Depends(get_session)
) -> AggregateReport:
    """
    Raises:
        HTTPException 404: If alias not found
        HTTPException 500: If analytics data cannot be fetched
    """
    stats_service = StatsService(session)

    try:
        return await stats_service.get_alias_report(alias)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except DatabaseError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching analytics data"
        )
