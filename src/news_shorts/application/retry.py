"""Bounded retry with exponential backoff for network-facing calls."""

import asyncio
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from news_shorts import config
from news_shorts.logging_utils import get_logger

log = get_logger(__name__)

T = TypeVar("T")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    retry_on: Tuple[Type[BaseException], ...],
    attempts: Optional[int] = None,
    backoff: Optional[float] = None,
    description: str = "operation",
) -> T:
    """Await ``operation()`` until it succeeds or ``attempts`` are used up.

    Only exceptions in ``retry_on`` are retried; the wait doubles after each
    failure starting at ``backoff`` seconds. The last error is re-raised.
    """
    attempts = config.RETRY_ATTEMPTS if attempts is None else attempts
    backoff = config.RETRY_BACKOFF if backoff is None else backoff
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    delay = backoff
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            if attempt == attempts:
                log.warning("giving up", operation=description, attempts=attempts, error=str(e))
                raise
            log.info("retrying", operation=description, attempt=attempt,
                     wait=delay, error=str(e))
            await asyncio.sleep(delay)
            delay *= 2
    raise AssertionError("unreachable")
