from __future__ import annotations

import asyncio
import logging
import time
from functools import lru_cache
from typing import Awaitable, Callable

from resume_enricher.ai.config import load_ai_config

logger = logging.getLogger(__name__)


class TokenBucket:
    """Fixed-window token bucket shared by every outbound model call.

    The bucket holds at most ``capacity`` tokens and is topped back up to
    ``capacity`` once per ``refill_interval_s``; it does not trickle. The
    counter is only touched while ``_lock`` is held, and the lock is never held
    across a wait.
    """

    def __init__(
        self,
        capacity: int = 60,
        refill_interval_s: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if refill_interval_s <= 0:
            raise ValueError("refill_interval_s must be positive")
        self._capacity = capacity
        self._interval = float(refill_interval_s)
        self._clock = clock
        self._sleep = sleep
        self._tokens = capacity
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def refill_interval_s(self) -> float:
        return self._interval

    @property
    def available(self) -> int:
        self._refill()
        return self._tokens

    def _refill(self) -> None:
        elapsed = self._clock() - self._last_refill
        if elapsed < self._interval:
            return
        windows = int(elapsed // self._interval)
        self._last_refill += windows * self._interval
        self._tokens = self._capacity

    def _seconds_until_refill(self) -> float:
        return max(0.0, self._last_refill + self._interval - self._clock())

    async def try_acquire(self) -> bool:
        async with self._lock:
            self._refill()
            if self._tokens > 0:
                self._tokens -= 1
                return True
            return False

    async def acquire(self) -> None:
        while True:
            async with self._lock:
                self._refill()
                if self._tokens > 0:
                    self._tokens -= 1
                    return
                wait_s = self._seconds_until_refill()
            logger.debug("token_bucket_wait wait_s=%.3f", wait_s)
            await self._sleep(wait_s)


@lru_cache(maxsize=1)
def get_shared_bucket() -> TokenBucket:
    cfg = load_ai_config()
    return TokenBucket(
        capacity=cfg.tokens_per_interval,
        refill_interval_s=cfg.refill_interval_s,
    )
