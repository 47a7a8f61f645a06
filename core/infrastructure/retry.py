"""
Bounded exponential backoff for transient failures.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from core.domain.exceptions import TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 0.05,
    retry_on: Tuple[Type[BaseException], ...] = (TransientError,),
) -> T:
    """
    Run ``operation`` until it succeeds or ``max_attempts`` is reached.

    The delay before attempt ``n`` (0-based) is ``base_delay * 2 ** n``.
    The last failure is re-raised unchanged.

    Args:
        operation: Zero-argument coroutine factory
        max_attempts: Total number of attempts, including the first
        base_delay: Delay in seconds before the first retry
        retry_on: Exception types treated as transient

    Returns:
        Result of the first successful attempt
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except retry_on as exc:
            attempt += 1
            if attempt >= max_attempts:
                logger.error(
                    "Giving up after %d attempt(s): %s",
                    attempt,
                    exc,
                    extra={"attempts": attempt, "error_type": type(exc).__name__},
                )
                raise
            delay = base_delay * 2 ** (attempt - 1)
            logger.warning(
                "Transient failure, retrying in %.2fs (attempt %d/%d): %s",
                delay,
                attempt + 1,
                max_attempts,
                exc,
            )
            await asyncio.sleep(delay)
