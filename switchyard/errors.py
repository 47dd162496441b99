"""
Error types for the switchyard SDK.

Delivery failures are never raised to callers. They are classified into
these types so the logs name what went wrong.
"""

import logging
from enum import Enum
from typing import Optional

import httpx


class ErrorCategory(str, Enum):
    """Categories of errors for classification."""

    AUTH = "auth"
    NETWORK = "network"
    RATE_LIMIT = "rate_limit"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


class SwitchyardError(Exception):
    """Base exception for all switchyard SDK errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, category={self.category})"


class AuthenticationError(SwitchyardError):
    """The SDK key was rejected (401/403)."""

    def __init__(self, message: str = "Invalid SDK key", status_code: int = 401):
        super().__init__(message, category=ErrorCategory.AUTH, status_code=status_code)


class NetworkError(SwitchyardError):
    """A connection, timeout or transport error occurred."""

    def __init__(self, message: str = "Network error"):
        super().__init__(message, category=ErrorCategory.NETWORK)


class RateLimitError(SwitchyardError):
    """Rate limited (429)."""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message, category=ErrorCategory.RATE_LIMIT, status_code=429)


class ValidationError(SwitchyardError):
    """The collector rejected the payload (400)."""

    def __init__(self, message: str = "Validation error"):
        super().__init__(message, category=ErrorCategory.VALIDATION, status_code=400)


class NotFoundError(SwitchyardError):
    """Resource not found (404)."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, category=ErrorCategory.NOT_FOUND, status_code=404)


class InternalError(SwitchyardError):
    """Server error (5xx)."""

    def __init__(self, message: str = "Internal server error", status_code: int = 500):
        super().__init__(message, category=ErrorCategory.INTERNAL, status_code=status_code)


def classify_error(error: httpx.HTTPError) -> SwitchyardError:
    """
    Classify an httpx exception raised while posting.

    Transport failures, timeouts included, are network errors. Anything
    else httpx raises is reported as unknown.
    """
    message = str(error) or error.__class__.__name__
    if isinstance(error, httpx.TransportError):
        return NetworkError(message)
    return SwitchyardError(message)


def error_for_status(status_code: int, message: str) -> SwitchyardError:
    """Map an HTTP status code to the matching error type."""
    if status_code == 401 or status_code == 403:
        return AuthenticationError(message, status_code)
    if status_code == 404:
        return NotFoundError(message)
    if status_code == 429:
        return RateLimitError(message)
    if status_code == 400:
        return ValidationError(message)
    if 500 <= status_code < 600:
        return InternalError(message, status_code)
    return SwitchyardError(message, status_code=status_code)


def check_response(response: httpx.Response, logger: logging.Logger) -> bool:
    """
    Validate an HTTP response.

    Returns True for any 2xx status. Otherwise logs the classified failure
    and returns False; nothing is raised.
    """
    if response.is_success:
        return True

    request = response.request
    error = error_for_status(
        response.status_code,
        f"{request.method} {request.url} failed with status {response.status_code}",
    )
    if isinstance(error, AuthenticationError):
        logger.error(f"Invalid SDK key when accessing URI: {request.url}")
    else:
        logger.error(f"{error.message} ({error.category.value})")
    return False
