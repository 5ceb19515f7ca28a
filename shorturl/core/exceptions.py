"""
Custom Exceptions

Every failure the service layer can report has its own type so that
endpoints can map it to an HTTP status without inspecting messages.

- ValidationError: missing or malformed input
- AliasConflictError: custom alias already registered
- NotFoundError: alias or topic has no registered URL
- DatabaseError: storage unavailable or query failure
"""


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class ValidationError(URLShortenerException):
    """Raised when required input is missing or malformed."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)


class InvalidURLError(ValidationError):
    """Raised when URL validation fails."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}", field="longUrl")


class InvalidAliasError(ValidationError):
    """Raised when a custom alias has an unsupported format."""

    def __init__(self, alias: str, reason: str = "Invalid custom alias"):
        self.alias = alias
        self.reason = reason
        super().__init__(f"{reason}: {alias}", field="customAlias")


class AliasConflictError(URLShortenerException):
    """Raised when a custom alias is already in use."""

    def __init__(self, alias: str):
        self.alias = alias
        super().__init__(f"Custom alias '{alias}' already in use")


class NotFoundError(URLShortenerException):
    """Base class for lookups that matched nothing."""
    pass


class ShortURLNotFoundError(NotFoundError):
    """Raised when an alias matches neither a short token nor a custom alias."""

    def __init__(self, alias: str):
        self.alias = alias
        super().__init__(f"Short URL '{alias}' not found")


class TopicNotFoundError(NotFoundError):
    """Raised when no URL is registered under a topic."""

    def __init__(self, topic: str):
        self.topic = topic
        super().__init__(f"No URLs found for topic '{topic}'")


class DatabaseError(URLShortenerException):
    """Raised when database operations fail."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
