from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from resume_enricher.ai.errors import ThrottledExhausted, UpstreamCallFailed
from resume_enricher.ai.throttle import TokenBucket, get_shared_bucket

logger = logging.getLogger(__name__)

RATE_LIMITED_STATUS = 429

RequestFn = Callable[[], Awaitable[httpx.Response]]

_UPSTREAM_ERRORS = (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, UpstreamCallFailed)


def retry_decision(
    attempt: int,
    status_code: int | None,
    *,
    max_attempts: int = 3,
    base_delay_s: float = 1.0,
) -> tuple[bool, float]:
    """Return ``(should_retry, delay_s)`` for a failed 1-based ``attempt``."""
    if status_code == RATE_LIMITED_STATUS and attempt < max_attempts:
        return True, base_delay_s * (2 ** attempt)
    return False, 0.0


def _as_upstream_error(exc: Exception) -> UpstreamCallFailed:
    if isinstance(exc, UpstreamCallFailed):
        return exc
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        return UpstreamCallFailed(
            f"Model endpoint returned HTTP {status_code}",
            status_code=status_code,
        )
    return UpstreamCallFailed(f"Model endpoint request failed: {exc}")


async def execute(
    request_fn: RequestFn,
    *,
    bucket: TokenBucket | None = None,
    max_attempts: int = 3,
    base_delay_s: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> httpx.Response:
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    gate = bucket or get_shared_bucket()
    last_error: UpstreamCallFailed | None = None

    for attempt in range(1, max_attempts + 1):
        if not await gate.try_acquire():
            logger.info("gemini_token_wait attempt=%s", attempt)
            await gate.acquire()
        try:
            return await request_fn()
        except _UPSTREAM_ERRORS as exc:
            error = _as_upstream_error(exc)
            cause: Exception = exc

        should_retry, delay_s = retry_decision(
            attempt,
            error.status_code,
            max_attempts=max_attempts,
            base_delay_s=base_delay_s,
        )
        if should_retry:
            logger.info("gemini_rate_limited attempt=%s delay_s=%s", attempt, delay_s)
            last_error = error
            await sleep(delay_s)
            continue

        if error.status_code == RATE_LIMITED_STATUS:
            raise ThrottledExhausted(
                f"Model endpoint still rate limited after {attempt} attempts",
                attempts=attempt,
            ) from cause
        if error is cause:
            raise error
        raise error from cause

    raise ThrottledExhausted(
        f"Model endpoint still rate limited after {max_attempts} attempts",
        attempts=max_attempts,
    ) from last_error
