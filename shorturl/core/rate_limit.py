"""
Rate Limiting Configuration

Rate limiting prevents abuse of the creation endpoint, which the
original service capped at 10 requests per minute per IP.

Design Decisions:
- Uses slowapi for rate limiting (lightweight, FastAPI-compatible)
- Different limits for different endpoints
- IP-based limiting
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from shorturl.core.setting import settings

# Uses IP address for rate limiting
limiter = Limiter(key_func=get_remote_address)

# Format: "count/period" (e.g., "10/minute" means 10 requests per minute)
RATE_LIMITS = {
    "shorten": settings.RATE_LIMIT_SHORTEN,
    "redirect": settings.RATE_LIMIT_REDIRECT,
    "analytics": settings.RATE_LIMIT_ANALYTICS,
}
