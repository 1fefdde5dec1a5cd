import asyncio
import time
from typing import Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


class RateLimiter:
    """
    One permitted call per `min_interval_sec`, shared by every ledger request
    in the process. Waiting is an awaitable delay, never a blocking sleep.
    """

    def __init__(
        self,
        min_interval_sec: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if min_interval_sec < 0:
            raise ValueError("min_interval_sec must be >= 0")
        self._min_interval = min_interval_sec
        self._clock = clock
        self._sleep = sleep
        self._last_ts: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def min_interval(self) -> float:
        return self._min_interval

    async def acquire(self) -> None:
        async with self._lock:
            if self._last_ts is not None:
                elapsed = self._clock() - self._last_ts
                wait_for = self._min_interval - elapsed
                if wait_for > 0:
                    logger.info("rate_limit_wait", seconds=round(wait_for, 2))
                    await self._sleep(wait_for)
            self._last_ts = self._clock()
