"""Retry policy for throttled directory calls.

Quota errors are recognised by a marker substring in the error text. The
default policy waits a fixed second between attempts and never gives up,
so callers must bound the whole fetch with a deadline or cancel it. A
retry cap and a growing delay can be configured instead.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from dircontacts.domain.errors import QuotaExceededError

logger = logging.getLogger(__name__)

DEFAULT_QUOTA_MARKER = "quota"
DEFAULT_RETRY_DELAY_S = 1.0
DEFAULT_BACKOFF_FACTOR = 1.0  # Fixed delay
DEFAULT_MAX_DELAY_S = 60.0


@dataclass(frozen=True)
class QuotaRetryPolicy:
    """How to react to quota errors from the directory.

    Attributes:
        marker: Substring of the error text that identifies throttling.
        initial_delay_s: Delay before the first retry.
        backoff_factor: Multiplier applied to the delay after each retry.
        max_delay_s: Ceiling for the delay.
        max_retries: Number of retries before giving up; None retries
            until cancelled.
    """
    marker: str = DEFAULT_QUOTA_MARKER
    initial_delay_s: float = DEFAULT_RETRY_DELAY_S
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR
    max_delay_s: float = DEFAULT_MAX_DELAY_S
    max_retries: Optional[int] = None

    def is_quota_error(self, exc: BaseException) -> bool:
        """True if the error text mentions the quota marker."""
        return self.marker in str(exc)

    def delay_for(self, retry_number: int) -> float:
        """Delay before the given retry (1-based)."""
        delay = self.initial_delay_s * (self.backoff_factor ** (retry_number - 1))
        return min(delay, self.max_delay_s)

    def allows_retry(self, retry_number: int) -> bool:
        return self.max_retries is None or retry_number <= self.max_retries


async def call_with_quota_retry(
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    policy: QuotaRetryPolicy,
    on_retry: Optional[Callable[[int, float, Exception], None]] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    **kwargs: Any,
) -> Any:
    """Awaits func(*args, **kwargs), retrying while it fails with quota errors.

    Args:
        func: The coroutine function (API call) to execute.
        policy: Retry policy to apply.
        on_retry: Called with (retry_number, delay, error) before each sleep.
        sleep: Awaitable sleep; cancellation interrupts it.

    Returns:
        The result of the first successful call.

    Raises:
        QuotaExceededError: If the retry cap is reached.
        Exception: Any non-quota error, unchanged, on its first occurrence.
    """
    retry_number = 0
    while True:
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            logger.warning(f"Error loading contacts: {e}")
            if not policy.is_quota_error(e):
                raise
            retry_number += 1
            if not policy.allows_retry(retry_number):
                logger.error(f"Quota retries ({policy.max_retries}) exhausted. Last error: {e}")
                raise QuotaExceededError(e, attempts=retry_number) from e
            delay = policy.delay_for(retry_number)
            if on_retry is not None:
                on_retry(retry_number, delay, e)
            await sleep(delay)
