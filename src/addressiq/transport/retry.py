"""Deadline-aware retry with exponential backoff.

Used by the slow public providers (Overpass, BGT) that regularly answer with
transient 5xx or connection resets. The deadline is checked before every
attempt and before every sleep, so a retry loop never outlives its request.

Example:
    >>> result = await with_retry(3, 10.0, lambda: fetch(deadline), deadline, source="education")
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from addressiq.core.errors import ErrorKind, ProviderError, is_retryable
from addressiq.core.logging import get_logger
from addressiq.transport.deadline import Deadline

T = TypeVar("T")

log = get_logger(__name__)


@dataclass
class ExponentialBackoff:
    """Doubling delay, bounded attempt count.

    Delay before retry ``n`` (zero-based) = ``initial_delay * multiplier ** n``.
    """

    max_attempts: int = 3
    initial_delay: float = 1.0
    multiplier: float = 2.0

    def next_delay(self, attempt: int) -> float:
        return self.initial_delay * (self.multiplier**attempt)

    def should_retry(self, attempt: int, error: Exception) -> bool:
        if attempt >= self.max_attempts:
            return False
        return is_retryable(error)


@dataclass
class RetryContext:
    """Retry state for one call site.

    Example:
        >>> ctx = RetryContext(ExponentialBackoff(max_attempts=3), deadline, "facilities")
        >>> result = await ctx.run_async(fetch_facilities)
    """

    strategy: ExponentialBackoff
    deadline: Deadline
    source: str
    attempt: int = field(default=0, init=False)
    errors: list[Exception] = field(default_factory=list, init=False)

    async def run_async(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Execute ``func`` until it succeeds, gives a non-retryable error or runs out of attempts."""
        while True:
            self.deadline.check(self.source)
            self.attempt += 1
            try:
                return await func(*args, **kwargs)
            except ProviderError as e:
                self.errors.append(e)
                if not self.strategy.should_retry(self.attempt, e):
                    raise

                delay = self.strategy.next_delay(self.attempt - 1)
                self.deadline.check(self.source)
                if delay >= self.deadline.remaining():
                    raise ProviderError(
                        ErrorKind.TIMEOUT,
                        self.source,
                        f"deadline exceeded before retry {self.attempt + 1}: {e.message}",
                        cause=e,
                    ) from e

                log.debug(
                    "provider_retry",
                    source=self.source,
                    attempt=self.attempt,
                    delay=delay,
                    error=e.message,
                )
                await asyncio.sleep(delay)


async def with_retry(
    attempts: int,
    initial_delay: float,
    func: Callable[[], Awaitable[T]],
    deadline: Deadline,
    *,
    source: str,
) -> T:
    """Call ``func`` up to ``attempts`` times, doubling the delay between tries."""
    ctx = RetryContext(
        ExponentialBackoff(max_attempts=attempts, initial_delay=initial_delay),
        deadline,
        source,
    )
    return await ctx.run_async(func)


__all__ = ["ExponentialBackoff", "RetryContext", "with_retry"]
