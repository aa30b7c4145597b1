"""Request pacing for synthesis provider calls.

Responsibilities:
- Enforce a minimum interval between requests sharing the same key.
- Keep pacing policy independent from the provider HTTP client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from time import monotonic, sleep
from typing import Callable, Protocol


class RequestGate(Protocol):
    """Anything that can block until a keyed request may proceed."""

    def acquire(self, key: str) -> None:
        """Block until a request for `key` is allowed."""


@dataclass(slots=True)
class RateLimiter:
    """Per-key minimum-interval limiter used around provider requests."""

    min_interval_seconds: float = 0.0
    clock: Callable[[], float] = monotonic
    sleeper: Callable[[float], None] = sleep
    _next_allowed_at: dict[str, float] = field(default_factory=dict)

    def acquire(self, key: str) -> None:
        """Block until `key` is allowed, then reserve the next interval."""

        if self.min_interval_seconds <= 0.0:
            return
        now = self.clock()
        wait_seconds = self._next_allowed_at.get(key, 0.0) - now
        if wait_seconds > 0.0:
            self.sleeper(wait_seconds)
            now = self.clock()
        self._next_allowed_at[key] = now + self.min_interval_seconds
