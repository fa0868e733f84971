"""Per-call execution context: the deadline and the collaborators a handler may use."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fareway.io.store import RecordStore


@dataclass(frozen=True, slots=True)
class Deadline:
    """Absolute monotonic deadline for one tool call. ``None`` means unbounded."""

    expires_at: float | None = None

    @classmethod
    def after(cls, seconds: float | None) -> Deadline:
        return cls(None if seconds is None else time.monotonic() + seconds)

    def remaining(self) -> float | None:
        """Seconds left (never negative), or None when unbounded."""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() >= self.expires_at


@dataclass(frozen=True, slots=True)
class ToolContext:
    """Handed to every tool handler alongside its validated params."""

    store: RecordStore
    deadline: Deadline = field(default_factory=Deadline)

    @property
    def timeout(self) -> float | None:
        """Remaining time to pass down to store calls."""
        return self.deadline.remaining()
