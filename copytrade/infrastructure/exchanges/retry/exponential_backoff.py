"""Exponential backoff retry logic for read-only exchange API calls.

Retry тільки для idempotent reads (balance, price). Order placement
ніколи не retry'ється: повторний ордер = подвійна позиція.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Type, TypeVar

from copytrade.domain.exchanges.exceptions import NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 2,
    base_delay: float = 0.5,
    max_delay: float = 4.0,
    exponential_base: float = 2.0,
    retryable_exceptions: tuple[Type[Exception], ...] = (NetworkError,),
) -> T:
    """Викликати func з exponential backoff.

    Args:
        func: Zero-arg coroutine function.
        max_retries: Кількість повторів після першої спроби.
        base_delay: Базова затримка в секундах.
        max_delay: Максимальна затримка в секундах.
        exponential_base: База для exponential backoff.
        retryable_exceptions: Exceptions, які можна retry.

    Returns:
        Результат func.

    Raises:
        Остання exception, якщо всі спроби вичерпано.

    Example:
        >>> # Перша спроба fails → wait 0.5s, друга → wait 1s, третя → raise
        >>> await retry_async(lambda: client.fetch_ticker(symbol), max_retries=2)
    """
    name = getattr(func, "__name__", repr(func))

    for attempt in range(max_retries + 1):
        try:
            result = await func()
            if attempt > 0:
                logger.info(
                    "retry.success",
                    extra={"function": name, "attempt": attempt + 1},
                )
            return result

        except retryable_exceptions as e:
            if attempt >= max_retries:
                logger.error(
                    "retry.exhausted",
                    extra={
                        "function": name,
                        "total_attempts": max_retries + 1,
                        "error": str(e),
                    },
                )
                raise

            delay = min(base_delay * (exponential_base**attempt), max_delay)
            logger.warning(
                "retry.attempt",
                extra={
                    "function": name,
                    "attempt": attempt + 1,
                    "max_retries": max_retries,
                    "delay_seconds": delay,
                    "error": str(e),
                },
            )
            await asyncio.sleep(delay)

    raise RuntimeError("Retry logic error: no attempt was made")
