"""
Redirect Service

This service handles URL redirection logic.
Separated from URL service so the hot redirect path stays minimal.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from shorturl.services.url_service import URLShorteningService


class RedirectService:
    """
    Service for handling URL redirections.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize the redirect service with a database session.

        Args:
            session: Async database session for database operations
        """
        self.session = session
        self.url_service = URLShorteningService(session)

    async def get_redirect_url(self, alias: str) -> str:
        """
        Get the long URL to redirect to.

        Raises:
            ShortURLNotFoundError: If the alias is not registered
        """
        short_url = await self.url_service.resolve(alias)
        return short_url.long_url
