import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

import httpx
import openai

from config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = {429}


def is_retryable_error(exc: BaseException) -> bool:
    """Network failures, timeouts, rate limits and 5xx responses are retryable."""
    from services.item_recognition.errors import OracleResponseError, OracleTransportError

    if isinstance(exc, OracleTransportError):
        return True
    if isinstance(exc, OracleResponseError):
        return False
    if isinstance(exc, (openai.APIConnectionError, openai.RateLimitError, openai.InternalServerError)):
        return True
    if isinstance(exc, (httpx.TransportError, asyncio.TimeoutError)):
        return True

    status = _status_code(exc)
    if status is not None:
        return status >= 500 or status in RETRYABLE_STATUS_CODES
    return False


def _status_code(exc: BaseException) -> Optional[int]:
    status = getattr(exc, "status_code", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def calculate_backoff(attempt: int, base_delay: float, max_delay: float) -> float:
    exponential = base_delay * (2 ** (attempt - 1))
    jitter = random.uniform(0, 0.3 * exponential)
    return min(exponential + jitter, max_delay)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    operation_name: str = "operation",
    max_retries: Optional[int] = None,
    base_delay: Optional[float] = None,
    max_delay: Optional[float] = None,
    should_retry: Callable[[BaseException], bool] = is_retryable_error,
) -> T:
    retries = settings.oracle_max_retries if max_retries is None else max_retries
    base = settings.oracle_retry_base_delay if base_delay is None else base_delay
    cap = settings.oracle_retry_max_delay if max_delay is None else max_delay

    attempt = 1
    while True:
        try:
            return await fn()
        except Exception as exc:
            retryable = should_retry(exc)
            if attempt > retries or not retryable:
                logger.error(
                    f"{operation_name} failed after {attempt} attempt(s) "
                    f"(retryable={retryable}): {exc}"
                )
                raise
            delay = calculate_backoff(attempt, base, cap)
            logger.warning(
                f"{operation_name} failed, retrying in {delay:.2f}s "
                f"(attempt {attempt}/{retries}): {exc}"
            )
            await asyncio.sleep(delay)
            attempt += 1
