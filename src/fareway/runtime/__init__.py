"""Runtime: dispatch engine, call context, rate limiting, observability."""

from .context import Deadline, ToolContext
from .dispatch import Dispatcher
from .ratelimit import FixedWindowRateLimiter, RateDecision

__all__ = ["Deadline", "Dispatcher", "FixedWindowRateLimiter", "RateDecision", "ToolContext"]
