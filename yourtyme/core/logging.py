"""
Logging configuration for the YourTyme backend.
Provides structured logging for profile, community and Slack operations.
"""

import logging
import sys
from typing import Any, Dict

import structlog
from structlog.stdlib import LoggerFactory

from yourtyme.core.config import settings


def setup_logging() -> None:
    """
    Configure structured logging for the application.
    Sets up different log formats for development and production environments.
    """

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _get_processor(),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper()),
    )

    # Set specific logger levels
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("motor").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("slack_sdk").setLevel(logging.WARNING)


def _get_processor():
    """
    Get the appropriate processor based on environment.

    Returns:
        Processor function for structlog
    """
    if settings.ENVIRONMENT == "production":
        return structlog.processors.JSONRenderer()
    else:
        return structlog.dev.ConsoleRenderer(colors=True)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        structlog.stdlib.BoundLogger: Configured logger instance
    """
    return structlog.get_logger(name)


# Specialized logging functions for YourTyme operations

def log_profile_operation(
    operation: str,
    user_id: str = None,
    city: str = None,
    **kwargs
) -> None:
    """
    Log user profile operations.

    Args:
        operation: Operation type (add_city, delete_city, update_name, oauth_upsert)
        user_id: Slack user ID
        city: City involved, if any
        **kwargs: Additional context
    """
    logger = get_logger("profile.operation")
    logger.info(
        "Profile operation",
        operation=operation,
        user_id=user_id,
        city=city,
        **kwargs
    )


def log_community_operation(
    operation: str,
    channel_id: str = None,
    user_id: str = None,
    **kwargs
) -> None:
    """
    Log channel community operations.

    Args:
        operation: Operation type (create, add_member, clear_members)
        channel_id: Slack channel ID
        user_id: Slack user ID
        **kwargs: Additional context
    """
    logger = get_logger("community.operation")
    logger.info(
        "Community operation",
        operation=operation,
        channel_id=channel_id,
        user_id=user_id,
        **kwargs
    )


def log_home_sync(
    user_id: str,
    channels: int,
    members: int,
    partial: bool = False,
    fallback: bool = False,
    duration: float = None,
    **kwargs
) -> None:
    """
    Log the outcome of a Home tab synchronisation.

    Args:
        user_id: Slack user the view was published for
        channels: Number of channel groups rendered
        members: Number of member rows rendered
        partial: Whether the time budget truncated member resolution
        fallback: Whether the fallback error view was published
        duration: Run time in seconds
        **kwargs: Additional context
    """
    logger = get_logger("home.sync")
    logger.info(
        "Home sync",
        user_id=user_id,
        channels=channels,
        members=members,
        partial=partial,
        fallback=fallback,
        duration=duration,
        **kwargs
    )


def log_oauth_operation(
    operation: str,
    user_id: str = None,
    team_id: str = None,
    status: str = "success",
    **kwargs
) -> None:
    """
    Log Slack OAuth operations.

    Args:
        operation: Operation type (install_url, callback)
        user_id: Slack user ID
        team_id: Slack workspace ID
        status: Operation status
        **kwargs: Additional context
    """
    logger = get_logger("oauth.operation")
    logger.info(
        "OAuth operation",
        operation=operation,
        user_id=user_id,
        team_id=team_id,
        status=status,
        **kwargs
    )


def log_error(error: Exception, context: Dict[str, Any] = None) -> None:
    """
    Log an error with context.

    Args:
        error: Exception instance
        context: Additional context information
    """
    logger = get_logger("error")
    logger.error(
        "An error occurred",
        error=str(error),
        error_type=type(error).__name__,
        context=context or {},
        exc_info=True
    )


def log_request(method: str, url: str, status_code: int, duration: float, **kwargs) -> None:
    """
    Log HTTP request details.

    Args:
        method: HTTP method
        url: Request URL
        status_code: Response status code
        duration: Request duration in seconds
        **kwargs: Additional context to log
    """
    logger = get_logger("http.request")
    logger.info(
        "HTTP request completed",
        method=method,
        url=url,
        status_code=status_code,
        duration=duration,
        **kwargs
    )
