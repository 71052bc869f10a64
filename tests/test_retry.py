import asyncio

import pytest

from yourtyme.core.exceptions import UpstreamPermanentError, UpstreamTransientError
from yourtyme.core.retry import exponential_backoff, fixed_delay, retry

pytestmark = pytest.mark.anyio


def test_exponential_backoff_is_capped():
    policy = exponential_backoff(base=1, factor=2, cap=16)
    assert [policy(n) for n in range(1, 7)] == [1, 2, 4, 8, 16, 16]


def test_fixed_delay_never_changes():
    policy = fixed_delay(1.5)
    assert {policy(n) for n in range(1, 5)} == {1.5}


async def test_retry_returns_first_success(no_sleep, sleeps):
    attempts = []

    async def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise UpstreamTransientError("try again")
        return "ok"

    result = await retry(
        flaky,
        5,
        exponential_backoff(base=1, factor=2, cap=16),
        retry_on=(UpstreamTransientError,),
        sleep=no_sleep,
    )

    assert result == "ok"
    assert len(attempts) == 3
    assert sleeps == [1, 2]


async def test_retry_returns_fallback_after_exhaustion(no_sleep, sleeps):
    async def always_fails():
        raise UpstreamTransientError("down")

    result = await retry(
        always_fails,
        3,
        fixed_delay(1),
        fallback=[],
        retry_on=(UpstreamTransientError,),
        sleep=no_sleep,
    )

    assert result == []
    assert sleeps == [1, 1]


async def test_retry_raises_last_error_without_fallback(no_sleep):
    async def always_fails():
        raise UpstreamTransientError("still down")

    with pytest.raises(UpstreamTransientError, match="still down"):
        await retry(
            always_fails, 2, fixed_delay(0), retry_on=(UpstreamTransientError,), sleep=no_sleep
        )


async def test_retry_does_not_retry_other_errors(no_sleep, sleeps):
    calls = []

    async def rejected():
        calls.append(1)
        raise UpstreamPermanentError("invalid_auth")

    with pytest.raises(UpstreamPermanentError):
        await retry(
            rejected,
            5,
            fixed_delay(1),
            fallback=None,
            retry_on=(UpstreamTransientError,),
            sleep=no_sleep,
        )

    assert len(calls) == 1
    assert sleeps == []


async def test_retry_counts_timeouts_as_failures(no_sleep):
    async def hangs():
        await asyncio.sleep(1)

    result = await retry(
        hangs, 2, fixed_delay(0), fallback="late", timeout=0.01, sleep=no_sleep
    )

    assert result == "late"


async def test_retry_rejects_zero_attempts():
    async def noop():
        return None

    with pytest.raises(ValueError):
        await retry(noop, 0, fixed_delay(0))
