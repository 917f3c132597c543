"""Limits how hard the batch workers hit the directory.

Caps the number of batch calls in flight with a semaphore and, when
configured, paces call starts with a sliding window.
"""

import asyncio
import logging
import time
from collections import deque
from contextlib import asynccontextmanager
from typing import AsyncIterator, Deque, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 16


class BatchRateLimiter:
    """Concurrency cap plus optional sliding window rate limit."""

    def __init__(
        self,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        max_requests: Optional[int] = None,
        time_window: float = 60.0,
    ):
        """Initializes the limiter.

        Args:
            max_concurrent: Maximum number of calls in flight at once.
            max_requests: Maximum number of calls started per time window;
                None disables pacing.
            time_window: The time window in seconds.
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {max_concurrent}")
        self.max_concurrent = max_concurrent
        self.max_requests = max_requests
        self.time_window = time_window
        self.timestamps: Deque[float] = deque()
        # Primitives are bound to the event loop they were created on
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._lock: Optional[asyncio.Lock] = None
        logger.info(
            f"BatchRateLimiter initialized: max_concurrent={max_concurrent}, "
            f"pacing={'off' if max_requests is None else f'{max_requests}/{time_window}s'}"
        )

    def _cleanup_timestamps(self) -> None:
        """Removes timestamps older than the time window."""
        now = time.monotonic()
        while self.timestamps and now - self.timestamps[0] > self.time_window:
            self.timestamps.popleft()

    def _bind_to_running_loop(self) -> None:
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            self._loop = loop
            self._semaphore = asyncio.Semaphore(self.max_concurrent)
            self._lock = asyncio.Lock()

    async def wait_for_permission(self) -> None:
        """Waits until another call may start under the sliding window."""
        if self.max_requests is None:
            return
        self._bind_to_running_loop()
        while True:
            async with self._lock:
                self._cleanup_timestamps()
                if len(self.timestamps) < self.max_requests:
                    self.timestamps.append(time.monotonic())
                    return
                wait_time = max(0.0, self.timestamps[0] + self.time_window - time.monotonic())
            logger.debug(f"Rate limit reached. Waiting for {wait_time:.2f} seconds.")
            await asyncio.sleep(wait_time)

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Holds one concurrency slot for the duration of the block."""
        self._bind_to_running_loop()
        async with self._semaphore:
            await self.wait_for_permission()
            yield
