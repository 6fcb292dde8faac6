"""Serialized request gate.

Architecture:
    Every outbound read funnels through one RequestGate per remote endpoint.
    The gate is purely a rate limiter: it spaces the *start* of consecutive
    calls by at least ``min_spacing`` seconds and dispatches them in
    submission order. Retries live in RetryPolicy.

Design Decisions:
    - Slot reservation instead of a lock: ``submit`` reserves its dispatch slot
      synchronously (no await between reading and advancing the cursor), so the
      event loop itself serializes cursor updates
    - A slow or failing task only occupies its own slot; later tickets wait for
      their slot, not for earlier tasks to finish
    - ``defer`` mirrors a server Retry-After by pushing the cursor forward
"""

from __future__ import annotations

import asyncio
import itertools
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from ..core.config import GateConfig
from .telemetry import log_gate_dispatch

T = TypeVar("T")

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class GateTicket:
    """A reserved dispatch slot for one submitted task."""

    sequence: int
    not_before: float
    label: str | None = None
    attempt: int = 0


class RequestGate:
    """FIFO rate limiter with a minimum spacing between dispatches."""

    def __init__(
        self,
        config: GateConfig | None = None,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._config = config or GateConfig()
        self._clock = clock
        self._sleep = sleep
        self._next_slot: float = float("-inf")
        self._last_dispatch: float | None = None
        self._sequence = itertools.count()
        self._pending = 0

    @property
    def min_spacing(self) -> float:
        return self._config.min_spacing

    @property
    def pending(self) -> int:
        """Tickets reserved but not yet dispatched."""
        return self._pending

    @property
    def last_dispatch(self) -> float | None:
        return self._last_dispatch

    def reserve(self, *, label: str | None = None, attempt: int = 0) -> GateTicket:
        """Reserve the next dispatch slot and advance the cursor."""
        now = self._clock()
        slot = max(now, self._next_slot)
        self._next_slot = slot + self._config.min_spacing
        return GateTicket(
            sequence=next(self._sequence), not_before=slot, label=label, attempt=attempt
        )

    def defer(self, seconds: float) -> None:
        """Hold back dispatches for ``seconds`` from now.

        Extends, never shortens, the current window. Tickets already reserved
        keep their slots.
        """
        if seconds <= 0:
            return
        self._next_slot = max(self._next_slot, self._clock() + seconds)

    async def submit(
        self,
        task: Callable[[], Awaitable[T]],
        *,
        label: str | None = None,
        attempt: int = 0,
    ) -> T:
        """Run ``task`` once its dispatch slot arrives.

        Args:
            task: Zero-argument callable returning an awaitable
            label: Optional request label for logs
            attempt: Retry attempt the task belongs to (for logs)

        Returns:
            Whatever the task returns; its exceptions propagate unchanged
        """
        ticket = self.reserve(label=label, attempt=attempt)
        queued_at = self._clock()
        self._pending += 1
        try:
            delay = ticket.not_before - queued_at
            if delay > 0:
                await self._sleep(delay)
        finally:
            self._pending -= 1

        self._last_dispatch = self._clock()
        log_gate_dispatch(
            sequence=ticket.sequence,
            label=ticket.label,
            attempt=ticket.attempt,
            waited_ms=(self._last_dispatch - queued_at) * 1000.0,
            pending=self._pending,
        )
        return await task()
