"""
Retries for catalog reads against the commerce platform.

Only transport failures are retried (connection resets, timeouts). HTTP
error statuses surface as ExternalServiceError on the first attempt.
"""
import asyncio
import functools
from typing import Callable, Optional, Tuple, Type

from variation_stock.config import config
from variation_stock.errors import RetryExhaustedError
from variation_stock.logger import logger


def backoff_delay(attempt: int, factor: float, cap: float) -> float:
    """Seconds to wait before retry number `attempt` (1-based), capped."""
    return min(factor ** (attempt - 1), cap)


def async_retry(
    max_retries: Optional[int] = None,
    backoff_factor: Optional[float] = None,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,)
):
    """
    Retry an async catalog call on the given transport exceptions.

    Settings left as None are read from config when the call is made,
    so tests and reloads see the current values.
    """
    def decorator(func: Callable):
        operation = func.__qualname__

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            retries = config.MAX_RETRIES if max_retries is None else max_retries
            factor = config.RETRY_BACKOFF if backoff_factor is None else backoff_factor

            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    attempt += 1
                    context = {"operation": operation, "attempt": attempt, "max_retries": retries}

                    if attempt > retries:
                        logger.error(
                            f"{operation} gave up after {attempt} attempts: {e}",
                            extra={"extra": context}
                        )
                        raise RetryExhaustedError(
                            f"{operation} failed after {retries} retries: {e}"
                        ) from e

                    delay = backoff_delay(attempt, factor, config.RETRY_BACKOFF_MAX)
                    logger.warning(
                        f"{operation} failed ({type(e).__name__}: {e}), retrying in {delay:.2f}s",
                        extra={"extra": dict(context, delay=delay)}
                    )
                    await asyncio.sleep(delay)

        return wrapper
    return decorator
