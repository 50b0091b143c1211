"""Rate Limiter: per-client admission control with a fixed window.

Each client identity (the caller's network address) gets a counter that
grows by one per admitted request. All counters are dropped together when
the window rolls over; entries are never expired individually. A client may
therefore burst up to twice the limit across a window boundary.

The window is tracked as an epoch (its start time): the first call after
the window has elapsed replaces the whole map before counting. The optional
``run_reset_loop`` performs the same rollover on a timer so idle clients do
not accumulate between requests.

Thread-safe via asyncio.Lock (single lock for the whole map).
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Fixed-window request counter keyed by client identity.

    Usage:
        limiter = RateLimiter(limit=60, window_seconds=60)

        if not await limiter.admit(client_ip):
            # reject with 429
            ...
    """

    def __init__(
        self,
        limit: int = 60,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._counts: dict[str, int] = {}
        self._window_start = clock()
        self._lock = asyncio.Lock()

    def _rollover(self, now: float) -> None:
        """Start a new window if the current one has elapsed. Caller holds the lock."""
        elapsed = now - self._window_start
        if elapsed < self.window_seconds:
            return
        skipped = int(elapsed // self.window_seconds)
        self._window_start += skipped * self.window_seconds
        # Swap in a fresh map; never clear entry by entry
        self._counts = {}
        logger.debug("Rate limit window reset")

    async def admit(self, client_id: str) -> bool:
        """Count a request for ``client_id``.

        Returns:
            True if admitted (counter incremented), False if the client has
            used up the window. Rejected calls do not increment.
        """
        async with self._lock:
            self._rollover(self._clock())
            count = self._counts.get(client_id, 0)
            if count >= self.limit:
                return False
            self._counts[client_id] = count + 1
            return True

    async def reset(self) -> None:
        """Drop all counters and start a new window now."""
        async with self._lock:
            self._counts = {}
            self._window_start = self._clock()

    def window_remaining(self) -> float:
        """Seconds until the current window rolls over."""
        remaining = self._window_start + self.window_seconds - self._clock()
        return max(remaining, 0.0)

    async def run_reset_loop(self) -> None:
        """Roll the window on a timer until cancelled."""
        while True:
            await asyncio.sleep(max(self.window_remaining(), 0.01))
            async with self._lock:
                self._rollover(self._clock())

    def get_stats(self) -> dict:
        """Current window stats (no per-client detail)."""
        return {
            "tracked_clients": len(self._counts),
            "limit": self.limit,
            "window_seconds": self.window_seconds,
            "window_remaining_seconds": round(self.window_remaining(), 3),
        }
