"""Pacing strategies for successive calls to the reasoning service."""

import asyncio
import time
from typing import Awaitable, Callable, Optional, Protocol


class Throttle(Protocol):
    """Gate awaited before each outbound request."""

    async def wait(self) -> None:
        """Block until the next request may be sent."""
        ...


class NoThrottle:
    """Throttle that never waits."""

    async def wait(self) -> None:
        return None


class FixedIntervalThrottle:
    """Keeps at least ``interval`` seconds between successive requests.

    The first request passes immediately.
    """

    def __init__(
        self,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if interval < 0:
            raise ValueError("Throttle interval cannot be negative")
        self._interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last: Optional[float] = None

    @property
    def interval(self) -> float:
        """Minimum spacing between requests, in seconds."""
        return self._interval

    async def wait(self) -> None:
        if self._last is not None:
            remaining = self._interval - (self._clock() - self._last)
            if remaining > 0:
                await self._sleep(remaining)
        self._last = self._clock()
