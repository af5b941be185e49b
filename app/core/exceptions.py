"""
Custom Exceptions

This module defines the error taxonomy of the link registry:
- InvalidInputError: malformed code or destination (caller error)
- CodeConflictError: the code is already taken
- LinkNotFoundError: no link exists for the code
- StoreUnavailableError: the underlying database failed

Endpoints translate these into HTTP status codes.
"""

from typing import Optional


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class InvalidInputError(URLShortenerException):
    """Raised when caller-supplied input is malformed."""
    pass


class InvalidURLError(InvalidInputError):
    """Raised when URL validation fails."""

    def __init__(self, url: str, reason: str = "Invalid URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class InvalidCodeError(InvalidInputError):
    """Raised when a short code does not match [A-Za-z0-9]{6,8}."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__("Code must match [A-Za-z0-9]{6,8}")


class CodeConflictError(URLShortenerException):
    """Raised when a short code is already in use."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Code '{short_code}' already exists")


class LinkNotFoundError(URLShortenerException):
    """Raised when a short code is not found in the database."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Code '{short_code}' not found")


class StoreUnavailableError(URLShortenerException):
    """Raised when database operations fail."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")


class AllocationExhaustedError(StoreUnavailableError):
    """Raised when every generated code collided within the attempt bound."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"No free short code found after {attempts} attempts")
