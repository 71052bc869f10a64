"""
Retry helper for calls to Slack, MongoDB and the world time service.
Every external call made while syncing the Home tab goes through `retry`.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

from yourtyme.core.logging import get_logger

logger = get_logger(__name__)

DelayPolicy = Callable[[int], float]

_NO_FALLBACK = object()


def exponential_backoff(
    base: float = 1.0, factor: float = 2.0, cap: float = 16.0
) -> DelayPolicy:
    """
    Build a capped multiplicative delay policy.

    Args:
        base: Delay after the first failed attempt, in seconds
        factor: Multiplier applied for every further attempt
        cap: Upper bound for a single delay

    Returns:
        Callable mapping the 1-based failed attempt number to a delay
    """

    def policy(attempt: int) -> float:
        return min(cap, base * (factor ** (attempt - 1)))

    return policy


def fixed_delay(seconds: float = 1.0) -> DelayPolicy:
    """Build a policy that waits the same amount after every failure."""

    def policy(attempt: int) -> float:
        return seconds

    return policy


async def retry(
    operation: Callable[[], Awaitable[Any]],
    max_attempts: int,
    delay_policy: DelayPolicy,
    *,
    fallback: Any = _NO_FALLBACK,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    timeout: Optional[float] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    description: str = "operation",
) -> Any:
    """
    Invoke `operation` until it succeeds or `max_attempts` is exhausted.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        max_attempts: Total number of attempts, at least 1
        delay_policy: Maps the failed attempt number to a wait in seconds
        fallback: Value returned once attempts are exhausted; when omitted the
            last error is raised instead
        retry_on: Exception types that count as a failed attempt; anything
            else propagates immediately
        timeout: Per-attempt deadline in seconds
        sleep: Awaitable sleep, replaceable in tests
        description: Label used in log lines

    Returns:
        The operation's result, or `fallback` after exhaustion
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: Optional[BaseException] = None
    for attempt in range(1, max_attempts + 1):
        try:
            if timeout is not None:
                return await asyncio.wait_for(operation(), timeout)
            return await operation()
        except retry_on + (asyncio.TimeoutError,) as exc:
            last_error = exc
            if attempt == max_attempts:
                break
            delay = delay_policy(attempt)
            logger.warning(
                f"{description} failed, retrying",
                attempt=attempt,
                max_attempts=max_attempts,
                delay=delay,
                error=str(exc) or type(exc).__name__,
            )
            await sleep(delay)

    logger.error(
        f"{description} failed after {max_attempts} attempts",
        error=str(last_error) or type(last_error).__name__,
        degraded=fallback is not _NO_FALLBACK,
    )
    if fallback is _NO_FALLBACK:
        raise last_error
    return fallback
