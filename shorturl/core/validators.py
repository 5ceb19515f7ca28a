"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs.
These functions help prevent security issues and ensure data integrity.

Security Considerations:
- Input validation prevents injection attacks
- Length limits prevent DoS attacks
- Only http/https destinations are accepted for redirects
"""

import re
from typing import Optional
from urllib.parse import urlparse

MAX_URL_LENGTH = 2048

ALIAS_PATTERN = re.compile(r'^[0-9A-Za-z_-]+$')


def sanitize_alias(alias: str, max_length: int = 50) -> Optional[str]:
    """
    Sanitize and validate an alias (generated token or custom alias).

    Aliases may contain base62 characters plus '-' and '_', the same
    URL-safe set used by generated tokens and accepted for custom aliases.

    Args:
        alias: The alias to sanitize
        max_length: Maximum accepted length (the alias column width)

    Returns:
        Sanitized alias if valid, None otherwise
    """
    if not alias or not isinstance(alias, str):
        return None

    alias = alias.strip()

    if not alias or len(alias) > max_length:
        return None

    if not ALIAS_PATTERN.match(alias):
        return None

    return alias


def validate_url_length(url: str, max_length: int = MAX_URL_LENGTH) -> bool:
    """
    Validate URL length to prevent DoS attacks.

    Args:
        url: The URL to validate
        max_length: Maximum allowed length (default: 2048 per RFC 7230)

    Returns:
        True if URL length is valid, False otherwise
    """
    return bool(url) and len(url) <= max_length


def is_valid_url(url: str) -> bool:
    """
    Validate URL format and security.

    Checks that URL uses http/https, has a host, and doesn't contain
    malicious patterns. Prevents javascript:, file:, and other dangerous schemes.

    Args:
        url: The URL string to validate

    Returns:
        True if valid and safe, False otherwise
    """
    if not isinstance(url, str) or not validate_url_length(url):
        return False

    try:
        result = urlparse(url)
    except ValueError:
        return False

    if not result.scheme or not result.netloc:
        return False

    if result.scheme.lower() not in {'http', 'https'}:
        return False

    malicious_patterns = ['javascript:', 'data:', 'file:', 'vbscript:']
    url_lower = url.lower()
    if any(pattern in url_lower for pattern in malicious_patterns):
        return False

    return True
