"""
Bounded Retry

Explicit retry loop with exponential backoff for transient upstream failures.
"""
import time
from typing import Any, Callable, Optional, Tuple, Type

from src.taxscout.utils.logger import get_logger

logger = get_logger(__name__)


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before retry number `attempt` (1-based): base * 2**attempt."""
    return base_delay * (2 ** attempt)


def retry_call(
    func: Callable[..., Any],
    *args: Any,
    max_retries: int = 2,
    base_delay: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    give_up_on: Tuple[Type[BaseException], ...] = (),
    sleep: Optional[Callable[[float], None]] = None,
    **kwargs: Any,
) -> Any:
    """
    Call `func` and retry on transient failures.

    The function runs at most ``max_retries + 1`` times. Exceptions listed in
    `give_up_on` are re-raised immediately, even if they also match `retry_on`.

    Args:
        func: Callable to invoke
        max_retries: Number of retries after the first attempt
        base_delay: Backoff base in seconds (retry n waits base * 2**n)
        retry_on: Exception types considered transient
        give_up_on: Exception types that are never retried
        sleep: Sleep function, injectable for tests

    Returns:
        Whatever `func` returns

    Raises:
        The last exception once retries are exhausted
    """
    sleep = sleep or time.sleep
    attempt = 0

    while True:
        try:
            return func(*args, **kwargs)
        except give_up_on:
            raise
        except retry_on as e:
            attempt += 1
            if attempt > max_retries:
                logger.error(
                    "retries_exhausted",
                    func=getattr(func, "__name__", repr(func)),
                    max_retries=max_retries,
                    error=str(e)
                )
                raise

            delay = backoff_delay(attempt, base_delay)
            logger.warning(
                "transient_error_retrying",
                func=getattr(func, "__name__", repr(func)),
                attempt=attempt,
                max_retries=max_retries,
                delay_seconds=delay,
                error=str(e),
                error_type=type(e).__name__
            )
            sleep(delay)
