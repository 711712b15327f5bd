# src/scrapers/retry.py

"""Bounded exponential-backoff retries for a single-target fetch."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger("merch_search.retry")

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before 0-indexed *attempt*: ``base_delay * 2**(attempt-1)``."""
    if attempt <= 0:
        return 0.0
    return base_delay * (2 ** (attempt - 1))


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 2.0,
    label: str = "",
) -> T:
    """Run *operation* until it succeeds or *max_attempts* are used.

    No jitter and no inspection of remote retry hints. The last
    exception is re-raised once every attempt has failed.
    """
    if max_attempts < 1:
        msg = f"max_attempts must be >= 1, got {max_attempts}"
        raise ValueError(msg)

    last_error: Exception | None = None
    for attempt in range(max_attempts):
        if attempt > 0:
            delay = backoff_delay(attempt, base_delay)
            logger.info(
                "[%s] Retrying in %.1fs (attempt %d/%d)",
                label,
                delay,
                attempt + 1,
                max_attempts,
            )
            await asyncio.sleep(delay)
        try:
            return await operation()
        except Exception as exc:
            last_error = exc
            logger.warning(
                "[%s] Attempt %d/%d failed: %s",
                label,
                attempt + 1,
                max_attempts,
                exc,
            )

    if last_error is None:
        msg = f"[{label}] no attempt was made"
        raise RuntimeError(msg)
    raise last_error
