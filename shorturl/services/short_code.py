"""
Short Token Generation

Tokens are random integers below 62**SHORT_CODE_LENGTH encoded in base62
([0-9a-zA-Z]), which keeps them URL-safe, compact and of a fixed length.
The unique index on urls.short_url catches the rare collision.

Why Base62?
- More compact than base10 (fewer characters needed)
- URL-safe (no special characters)
- Case-sensitive (more combinations per character)
"""

import secrets

from shorturl.core.setting import settings


BASE62_CHARS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
BASE62_LENGTH = len(BASE62_CHARS)


def encode_base62(number: int, min_length: int = 7) -> str:
    """
    Encode a number to base62 string with fixed length.

    Args:
        number: The number to convert
        min_length: Minimum length of the code (default: 7)

    Returns:
        Base62 encoded string, padded to min_length

    Example:
        encode_base62(0) -> "0000000"
        encode_base62(62) -> "0000010"
    """
    if number == 0:
        return BASE62_CHARS[0] * min_length

    digits = []
    while number > 0:
        remainder = number % BASE62_LENGTH
        digits.append(BASE62_CHARS[remainder])
        number //= BASE62_LENGTH

    code = ''.join(reversed(digits))

    if len(code) < min_length:
        code = BASE62_CHARS[0] * (min_length - len(code)) + code

    return code


def generate_short_token(length: int = None) -> str:
    """Return a new random URL-safe token of exactly ``length`` characters."""
    if length is None:
        length = settings.SHORT_CODE_LENGTH
    return encode_base62(secrets.randbelow(BASE62_LENGTH ** length), min_length=length)
