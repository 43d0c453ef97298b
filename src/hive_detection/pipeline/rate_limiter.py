"""Rate limiting for provider requests.

Enforces a minimum interval between dispatches. Callers serialize only the
acquisition of a dispatch slot; once a slot is granted, the request itself
runs concurrently with others.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import logging
import time

from hive_detection.constants import MIN_REQUEST_INTERVAL

log = logging.getLogger(__name__)


class RateLimiter:
    """Spaces dispatches at least `min_interval` seconds apart.

    The internal `asyncio.Lock` binds to the first event loop that waits on
    it, so a limiter (and the service owning it) belongs to one loop.
    """

    def __init__(
        self,
        min_interval: float = MIN_REQUEST_INTERVAL,
        *,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize the limiter.

        Args:
            min_interval: Minimum seconds between two dispatches (>= 0).
            clock: Monotonic clock; defaults to `time.monotonic`.
            sleep: Async sleep; defaults to `asyncio.sleep`.
        """
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.min_interval = float(min_interval)
        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        self._lock = asyncio.Lock()
        self._last_dispatch: float | None = None

    @property
    def last_dispatch(self) -> float | None:
        """Clock reading of the most recent permitted dispatch."""
        return self._last_dispatch

    async def acquire(self) -> None:
        """Wait until a dispatch is permitted, then claim the slot.

        Never fails; it can only delay the caller.
        """
        async with self._lock:
            if self._last_dispatch is not None:
                elapsed = self._clock() - self._last_dispatch
                remaining = self.min_interval - elapsed
                if remaining > 0:
                    log.debug("Rate limit: waiting %.3fs before dispatch", remaining)
                    await self._sleep(remaining)
            self._last_dispatch = self._clock()
