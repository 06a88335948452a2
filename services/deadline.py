"""Absolute per-request deadlines for outbound calls."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Optional, TypeVar

from services.errors import UpstreamUnavailable

T = TypeVar("T")

# Milliseconds of budget a caller has left, forwarded on internal hops.
BUDGET_HEADER = "X-Request-Budget-Ms"


@dataclass(frozen=True)
class Deadline:
    """A point on the monotonic clock after which outbound calls fail."""

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(expires_at=time.monotonic() + seconds)

    @classmethod
    def from_budget(cls, seconds: float, budget_ms: Optional[str] = None) -> "Deadline":
        """Start a deadline of ``seconds``, shortened by a forwarded caller budget."""
        deadline = cls.after(seconds)
        if budget_ms is None:
            return deadline
        try:
            budget = int(budget_ms.strip())
        except ValueError:
            return deadline
        return deadline.tighten(max(budget, 0) / 1000)

    def budget_ms(self) -> str:
        return str(int(self.remaining() * 1000))

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def tighten(self, ceiling: float) -> "Deadline":
        """Return whichever is earlier: this deadline or ``ceiling`` seconds from now."""
        candidate = time.monotonic() + ceiling
        if candidate < self.expires_at:
            return Deadline(expires_at=candidate)
        return self

    async def bound(self, awaitable: Awaitable[T], operation: str) -> T:
        """Await ``awaitable``, cancelling it once the deadline passes."""
        remaining = self.remaining()
        if remaining <= 0.0:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise UpstreamUnavailable(f"{operation} deadline exceeded")
        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailable(f"{operation} deadline exceeded") from exc
