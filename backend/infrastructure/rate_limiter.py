"""
Sliding-window rate limiter for outbound generation calls.

The generation provider enforces a per-minute request quota for the whole API
key, so a single limiter instance is shared by every digest run in the process
(created once in the app lifespan, never reset).

Threading model:
- acquire() is a coroutine; waiting uses the injected async sleep so the event
  loop keeps serving webhooks
- Acquirers are serialized by an asyncio.Lock, so concurrent runs take slots
  in arrival order
"""

import asyncio
import logging
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Optional

logger = logging.getLogger("RateLimiter")

# Tolerance when comparing float timestamps against the window edge
_EPSILON = 1e-6


class RateLimiter:
    """Allow at most ``max_requests`` acquisitions per trailing ``window_seconds``."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._sleep = sleep
        self._timestamps: Deque[float] = deque()
        self._lock: Optional[asyncio.Lock] = None  # Lazy-init inside the running loop

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def _prune(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self.window_seconds - _EPSILON:
            self._timestamps.popleft()

    async def acquire(self) -> float:
        """
        Wait until a request slot is free and claim it.

        Returns:
            Total seconds spent waiting (0.0 when a slot was free immediately)
        """
        waited = 0.0
        async with self._get_lock():
            while True:
                now = self._clock()
                self._prune(now)

                if len(self._timestamps) < self.max_requests:
                    self._timestamps.append(now)
                    return waited

                wait = self.window_seconds - (now - self._timestamps[0])
                logger.info(
                    f"⏳ Rate limit reached ({len(self._timestamps)}/{self.max_requests} "
                    f"in {self.window_seconds:.0f}s), waiting {wait:.2f}s"
                )
                await self._sleep(max(wait, _EPSILON))
                waited += max(wait, 0.0)

    @property
    def in_window(self) -> int:
        """Number of requests recorded in the current window."""
        self._prune(self._clock())
        return len(self._timestamps)

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._timestamps.clear()
