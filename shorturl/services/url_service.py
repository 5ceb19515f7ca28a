"""
URL Shortening Service

This service handles the core business logic for URL shortening:
- Creating short URLs with a generated token or a caller-supplied alias
- Resolving an alias (token or custom alias) back to its ShortURL
- Validating input

Design Decisions:
- When a custom alias is given it is also stored as the short token, so
  every URL is reachable through its short_url column
- The custom alias pre-check is an optimization; the unique constraint on
  urls.custom_alias is what decides concurrent creations
- Only custom_alias values are pre-checked, so a custom alias equal to an
  existing generated token fails at insert time instead
"""

import logging
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.core.exceptions import (
    AliasConflictError,
    DatabaseError,
    InvalidAliasError,
    InvalidURLError,
    ShortURLNotFoundError,
    ValidationError,
)
from shorturl.core.setting import settings
from shorturl.core.validators import is_valid_url, sanitize_alias
from shorturl.db.models import ShortURL
from shorturl.db.repository import URLRepository
from shorturl.services.short_code import generate_short_token

logger = logging.getLogger(__name__)


class URLShorteningService:
    """
    Core business logic for URL shortening.

    Handles validation, token generation and alias resolution.
    Separated from API layer for testability and maintainability.
    """

    def __init__(
        self,
        session: AsyncSession,
        token_generator: Optional[Callable[[], str]] = None
    ):
        """
        Initialize the URL shortening service.

        Args:
            session: Database session
            token_generator: Produces new short tokens (defaults to random base62)
        """
        self.session = session
        self.repository = URLRepository(session)
        self.token_generator = token_generator or generate_short_token

    async def create_short_url(
        self,
        long_url: Optional[str],
        custom_alias: Optional[str] = None,
        topic: Optional[str] = None
    ) -> ShortURL:
        """
        Register a new short URL.

        Args:
            long_url: The long URL to shorten (required)
            custom_alias: Alias to use instead of a generated token
            topic: Optional grouping label

        Returns:
            The stored ShortURL

        Raises:
            ValidationError: If long_url is missing
            InvalidURLError: If long_url is not an http(s) URL
            InvalidAliasError: If custom_alias has an unsupported format
            AliasConflictError: If custom_alias is already registered
            DatabaseError: If database operation fails
        """
        if not long_url or not long_url.strip():
            raise ValidationError("longUrl is required", field="longUrl")

        long_url = long_url.strip()
        if not is_valid_url(long_url):
            raise InvalidURLError(
                long_url,
                reason="Invalid URL format. URL must use http:// or https:// and have a host"
            )

        if custom_alias:
            alias = sanitize_alias(custom_alias, max_length=settings.CUSTOM_ALIAS_MAX_LENGTH)
            if alias is None:
                raise InvalidAliasError(
                    custom_alias,
                    reason="Custom alias may only contain letters, digits, '-' and '_'"
                )
            custom_alias = alias

            if await self.repository.find_by_custom_alias(custom_alias):
                raise AliasConflictError(custom_alias)
        else:
            custom_alias = None

        short_url = ShortURL(
            long_url=long_url,
            short_url=custom_alias or self.token_generator(),
            custom_alias=custom_alias,
            topic=topic or None,
        )

        try:
            short_url = await self.repository.insert_url(short_url)
        except IntegrityError as e:
            if custom_alias:
                raise AliasConflictError(custom_alias) from e
            raise DatabaseError(
                "Failed to create short URL: database constraint violation",
                original_error=e
            ) from e

        logger.info(f"Created short URL {short_url.short_url} -> {short_url.long_url}")
        return short_url

    async def get_original_url(self, alias: str) -> Optional[ShortURL]:
        """
        Look up the URL registered under a token or custom alias.

        Returns:
            ShortURL object if found, None otherwise
        """
        return await self.repository.find_by_alias(alias)

    async def resolve(self, alias: str) -> ShortURL:
        """
        Resolve a token or custom alias.

        Raises:
            ShortURLNotFoundError: If no URL matches the alias
        """
        short_url = await self.get_original_url(alias)
        if short_url is None:
            raise ShortURLNotFoundError(alias)
        return short_url
