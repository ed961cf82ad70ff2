"""Request deadlines.

A single :class:`Deadline` is created per aggregation request and threaded
explicitly through every adapter, retry loop and HTTP call. Nothing reads a
deadline from global or thread-local state.

Examples:
    >>> deadline = Deadline.after(30.0)
    >>> deadline.remaining() > 29
    True
    >>> deadline.request_timeout(10.0)
    10.0
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from addressiq.core.errors import ErrorKind, ProviderError


@dataclass
class Deadline:
    """Absolute deadline on the monotonic clock.

    Attributes:
        deadline: Absolute deadline timestamp (monotonic clock)
        timeout_seconds: Original budget in seconds
        start_time: When the deadline was created
    """

    deadline: float
    timeout_seconds: float
    start_time: float = field(default_factory=time.monotonic)

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        """Create a deadline ``seconds`` from now."""
        if seconds < 0:
            raise ValueError(f"Timeout must be non-negative, got {seconds}")
        now = time.monotonic()
        return cls(deadline=now + seconds, timeout_seconds=seconds, start_time=now)

    def remaining(self) -> float:
        """Remaining time until deadline in seconds (negative once expired)."""
        return self.deadline - time.monotonic()

    @property
    def elapsed(self) -> float:
        """Elapsed time since start in seconds."""
        return time.monotonic() - self.start_time

    def is_expired(self) -> bool:
        """True if deadline has passed."""
        return time.monotonic() >= self.deadline

    def check(self, source: str) -> None:
        """Raise a ``Timeout`` provider error for ``source`` if expired."""
        if self.is_expired():
            raise ProviderError(
                ErrorKind.TIMEOUT,
                source,
                f"deadline exceeded after {self.elapsed:.2f}s",
            )

    def request_timeout(self, default: float) -> float:
        """Per-request timeout: the client default capped by what is left."""
        return max(0.0, min(default, self.remaining()))


__all__ = ["Deadline"]
