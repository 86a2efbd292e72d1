"""Token-bucket admission control for outbound API calls."""

import asyncio
import time
from typing import Awaitable, Callable, Optional


class RateLimiter:
    """Async token bucket.

    Callers wait for a token instead of being rejected. Each ``acquire``
    reserves the next free slot under a lock and then sleeps outside it, so
    waiters are admitted in arrival order and K calls at ``rate`` per second
    with ``burst`` 1 span at least ``(K - 1) / rate`` seconds.
    """

    def __init__(
        self,
        rate: float,
        burst: int = 1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        if burst < 1:
            raise ValueError(f"burst must be at least 1, got {burst}")

        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burst)
        self._updated_at: Optional[float] = None
        self._lock = asyncio.Lock()

    def _refill(self, now: float) -> None:
        if self._updated_at is None:
            self._updated_at = now
            return
        elapsed = max(0.0, now - self._updated_at)
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
        self._updated_at = now

    async def acquire(self) -> None:
        """Wait until a token is available and consume it."""
        async with self._lock:
            now = self._clock()
            self._refill(now)
            self._tokens -= 1.0
            delay = 0.0 if self._tokens >= 0 else -self._tokens / self.rate

        if delay <= 0:
            return

        try:
            await self._sleep(delay)
        except asyncio.CancelledError:
            # Give the reserved slot back before propagating.
            async with self._lock:
                self._refill(self._clock())
                self._tokens = min(float(self.burst), self._tokens + 1.0)
            raise

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None
