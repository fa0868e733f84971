"""Fixed-window rate limiting keyed by caller.

Each caller gets ``max_calls`` per window. Windows are aligned to multiples
of ``window_seconds`` on the limiter's clock and counters reset completely at
each boundary (no sliding carry-over).
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class RateDecision:
    """Outcome of one rate-limit check."""
    allowed: bool
    remaining: int
    retry_after: float  # seconds until the current window closes


@dataclass
class FixedWindowRateLimiter:
    """Counts calls per key within fixed time buckets.

    Args:
        max_calls: Maximum calls per window
        window_seconds: Window length in seconds
        clock: Monotonic time source (injectable for tests)

    Example:
        >>> limiter = FixedWindowRateLimiter(max_calls=2, window_seconds=60)
        >>> [limiter.check("10.0.0.1").allowed for _ in range(3)]
        [True, True, False]
    """

    max_calls: int = 100
    window_seconds: float = 60.0
    clock: Callable[[], float] = time.monotonic
    _counts: dict[str, int] = field(default_factory=dict, repr=False)
    _current_window: int = field(default=-1, repr=False)

    def __post_init__(self) -> None:
        if self.max_calls < 1 or self.window_seconds <= 0:
            raise ValueError("max_calls must be >= 1 and window_seconds > 0")

    def _window(self, now: float) -> int:
        return math.floor(now / self.window_seconds)

    def check(self, key: str) -> RateDecision:
        """Count one call for key and report whether it is within budget."""
        now = self.clock()
        window = self._window(now)
        if window != self._current_window:
            # New boundary: every caller's counter from older windows is dead
            self._counts.clear()
            self._current_window = window
        retry_after = (window + 1) * self.window_seconds - now

        count = self._counts.get(key, 0)
        if count >= self.max_calls:
            return RateDecision(False, 0, retry_after)
        self._counts[key] = count + 1
        return RateDecision(True, self.max_calls - count - 1, retry_after)

    def reset(self) -> None:
        self._counts.clear()
        self._current_window = -1
