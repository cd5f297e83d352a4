"""Retry with exponential backoff for SDK coroutines.

Delays follow ``base_delay_ms * 2 ** attempt`` with no jitter, so retry
timing is deterministic.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Collection, Dict, Optional, TypeVar, Union

from loopmessage_sdk.exceptions import LoopMessageError

logger = logging.getLogger(__name__)

T = TypeVar("T")

NON_RETRYABLE_CODES = frozenset({400, 401, 403, 404})

OnRetry = Callable[[int, float, BaseException], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings for one HTTP client (or one call, via overrides)."""

    max_retries: int = 3
    base_delay_ms: float = 500
    non_retryable: frozenset[Union[int, str]] = NON_RETRYABLE_CODES

    def delay_for_attempt(self, attempt: int) -> float:
        return self.base_delay_ms * (2 ** attempt)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_retries": self.max_retries,
            "base_delay_ms": self.base_delay_ms,
            "non_retryable": sorted(self.non_retryable, key=str),
        }


PRODUCTION_RETRY_POLICY = RetryPolicy(max_retries=5, base_delay_ms=500)
TEST_RETRY_POLICY = RetryPolicy(max_retries=2, base_delay_ms=100)


def is_non_retryable(error: BaseException, non_retryable: Collection[Union[int, str]]) -> bool:
    """Classified errors match on ``code``; anything else on its class name."""
    if isinstance(error, LoopMessageError):
        return error.code in non_retryable
    return type(error).__name__ in non_retryable


async def retry_with_exponential_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    base_delay_ms: float = 500,
    non_retryable: Collection[Union[int, str]] = NON_RETRYABLE_CODES,
    on_retry: Optional[OnRetry] = None,
) -> T:
    """Await ``operation`` until it succeeds or retrying is pointless.

    The operation runs at most ``max_retries + 1`` times. Non-retryable
    errors and the error from the final attempt are re-raised unchanged.
    ``on_retry`` receives ``(attempt_number, delay_ms, error)`` before each
    sleep, with ``attempt_number`` starting at 1.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as exc:
            if is_non_retryable(exc, non_retryable):
                raise
            if attempt >= max_retries:
                raise

            delay_ms = base_delay_ms * (2 ** attempt)
            if on_retry is not None:
                on_retry(attempt + 1, delay_ms, exc)
            logger.debug(f"Retry {attempt + 1}/{max_retries} in {delay_ms}ms after: {exc}")
            await asyncio.sleep(delay_ms / 1000)
            attempt += 1
