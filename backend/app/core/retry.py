"""Bounded retry on a result predicate, with linear backoff (tenacity)."""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_result,
    stop_after_attempt,
    wait_incrementing,
)

logger = logging.getLogger(__name__)


def linear_backoff(base_seconds: float) -> wait_incrementing:
    """Delay before retry ``n`` (1-based) is ``base_seconds * n``."""
    return wait_incrementing(start=base_seconds, increment=base_seconds)


def _last_result(retry_state: RetryCallState) -> Any:
    return retry_state.outcome.result()


def retry_on_result(
    max_attempts: int,
    backoff: float,
    should_retry: Callable[[Any], bool],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> AsyncRetrying:
    """
    Retrying controller that calls an attempt up to ``max_attempts`` times.

    A result is retried only when ``should_retry(result)`` is true. When
    attempts run out the last result is returned instead of raising
    RetryError. Exceptions raised by the attempt propagate unchanged.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=linear_backoff(backoff),
        retry=retry_if_result(should_retry),
        sleep=sleep,
        before_sleep=before_sleep_log(logger, logging.INFO),
        retry_error_callback=_last_result,
    )
