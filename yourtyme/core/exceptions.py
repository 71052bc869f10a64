"""
Custom exceptions for the YourTyme backend.
Provides structured error handling for profile storage and Slack integration.
"""

from typing import Any, Dict, Optional

from fastapi import status


class YourTymeException(Exception):
    """Base exception for the YourTyme backend."""

    def __init__(
        self,
        message: str,
        error_code: str = "YOURTYME_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# Lookups
class NotFoundError(YourTymeException):
    """Raised when a requested resource does not exist."""

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "NOT_FOUND", details)


class ProfileNotFoundError(NotFoundError):
    """Raised when a user profile is not found."""

    def __init__(self, user_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"User not found: {user_id}", details)
        self.error_code = "PROFILE_NOT_FOUND"


class CommunityNotFoundError(NotFoundError):
    """Raised when a channel community is not found."""

    def __init__(self, channel_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("Community not found", details or {"channel_id": channel_id})
        self.error_code = "COMMUNITY_NOT_FOUND"


class CityNotFoundError(NotFoundError):
    """Raised when the time lookup service does not know a city."""

    def __init__(self, city: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"City not found: {city}", details)
        self.error_code = "CITY_NOT_FOUND"


# Authentication
class UnauthorizedError(YourTymeException):
    """Raised when the caller identity is missing or unknown."""

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "UNAUTHORIZED", details)


class InvalidSignatureError(UnauthorizedError):
    """Raised when a Slack request signature does not verify."""

    def __init__(self, message: str = "Invalid Slack signature", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.error_code = "INVALID_SIGNATURE"


# Upstream services
class UpstreamTransientError(YourTymeException):
    """Raised when a retryable call to Slack or the time service fails."""

    def __init__(self, message: str = "Upstream service unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "UPSTREAM_TRANSIENT", details)


class UpstreamPermanentError(YourTymeException):
    """Raised when an upstream call fails in a way retrying cannot fix."""

    def __init__(self, message: str = "Upstream request rejected", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "UPSTREAM_PERMANENT", details)


# Configuration
class ConfigError(YourTymeException):
    """Raised when a required credential or secret is missing."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIG_ERROR", details)


# Database Operations
class DatabaseError(YourTymeException):
    """Raised when database operations fail."""

    def __init__(self, message: str = "Database operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "DATABASE_ERROR", details)


# Validation
class ValidationError(YourTymeException):
    """Raised when input validation fails."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


def error_payload(exc: YourTymeException) -> Dict[str, Any]:
    """Structured error body returned by every HTTP handler."""
    return {
        "error": exc.message,
        "error_code": exc.error_code,
        "details": exc.details,
    }


def get_exception_status_code(exc: YourTymeException) -> int:
    """
    Get the appropriate HTTP status code for a YourTymeException.

    Args:
        exc: YourTymeException instance

    Returns:
        int: HTTP status code
    """
    status_mapping = {
        # Lookups
        "NOT_FOUND": status.HTTP_404_NOT_FOUND,
        "PROFILE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
        "COMMUNITY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
        "CITY_NOT_FOUND": status.HTTP_404_NOT_FOUND,

        # Authentication
        "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
        "INVALID_SIGNATURE": status.HTTP_401_UNAUTHORIZED,

        # Upstream services
        "UPSTREAM_TRANSIENT": status.HTTP_502_BAD_GATEWAY,
        "UPSTREAM_PERMANENT": status.HTTP_400_BAD_REQUEST,

        # Configuration & storage
        "CONFIG_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
        "DATABASE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,

        # Validation
        "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
    }

    return status_mapping.get(exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
