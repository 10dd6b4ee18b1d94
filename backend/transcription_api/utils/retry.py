"""Bounded retry with a fixed delay between attempts."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_fixed

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Attempt %d failed (%s), retrying in %.1fs...",
        retry_state.attempt_number,
        exc,
        retry_state.next_action.sleep if retry_state.next_action else 0.0,
    )


async def retry_with_fixed_delay(
    work: Callable[[], Awaitable[T]],
    max_attempts: int,
    delay: float,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``work()`` up to ``max_attempts`` times, ``delay`` seconds apart.

    Only exceptions matching ``retry_on`` trigger another attempt; anything
    else propagates immediately.  When every attempt fails the last exception
    is re-raised unchanged.  The wait goes through ``sleep`` (``asyncio.sleep``
    by default) so only the calling task is suspended.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(delay),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=True,
    ):
        with attempt:
            return await work()
