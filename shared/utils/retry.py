import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_backoff(
    func: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    base_delay: float = 1.0,
    is_retryable: Callable[[BaseException], bool] = lambda exc: False,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str = "call",
) -> T:
    """
    Await ``func`` and retry it with exponential backoff.

    Only errors accepted by ``is_retryable`` are retried; anything else is
    re-raised immediately. After ``max_retries`` retries (delays of
    base_delay, 2*base_delay, 4*base_delay, ...) the last error is re-raised.

    Args:
        func: Zero-argument coroutine factory performing the call
        max_retries: Retries after the first attempt
        base_delay: Delay before the first retry, in seconds
        is_retryable: Predicate deciding whether an error is transient
        sleep: Awaitable sleep (injected in tests)
        label: Name used in log messages

    Returns:
        Whatever ``func`` returns on the first successful attempt
    """

    def log_retry(state: RetryCallState) -> None:
        delay = state.next_action.sleep if state.next_action else 0.0
        logger.warning(
            f"{label} hit a transient error (retry {state.attempt_number}/{max_retries}), waiting {delay:.1f}s"
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=base_delay),
        retry=retry_if_exception(is_retryable),
        sleep=sleep,
        before_sleep=log_retry,
        reraise=True,
    )
    return await retrying(func)
