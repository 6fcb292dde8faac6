"""Bounded-concurrency batch execution.

This module provides the BatchExecutor, which settles many independent reads
in fixed-size windows: every task of a window runs concurrently, the window
settles completely, then the executor pauses before starting the next one.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from functools import partial
from time import perf_counter
from typing import Any

from ..core.config import BatchConfig
from ..models.outcome import ReadOutcome
from .gate import Sleep
from .retry import RetryPolicy, classify_error
from .telemetry import log_batch_window

Task = Callable[[], Awaitable[Any]]


class BatchExecutor:
    """Settles tasks window by window without letting failures cross tasks.

    At most ``batch_size`` tasks are in flight at once. One task's failure is
    captured in its own ReadOutcome and never cancels its siblings.
    """

    def __init__(
        self,
        retry: RetryPolicy,
        config: BatchConfig | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize batch executor.

        Args:
            retry: Retry policy used by ``run_reads`` for raw calls
            config: Window size and inter-window delay
            sleep: Awaitable sleep (injectable for tests)
        """
        self._retry = retry
        self._config = config or BatchConfig()
        self._sleep = sleep

    async def run_batch(
        self,
        tasks: Sequence[Task],
        *,
        batch_size: int | None = None,
        inter_batch_delay: float | None = None,
    ) -> list[ReadOutcome]:
        """Settle ``tasks`` in windows.

        Args:
            tasks: Zero-argument callables returning awaitables; each is
                expected to do its own retrying (see ``run_reads``)
            batch_size: Window size override
            inter_batch_delay: Pause between windows override (seconds)

        Returns:
            One ReadOutcome per task, in input order
        """
        size = batch_size or self._config.batch_size
        if size < 1:
            raise ValueError("batch_size must be >= 1")
        pause = self._config.inter_batch_delay if inter_batch_delay is None else inter_batch_delay

        outcomes: list[ReadOutcome] = []
        total_windows = (len(tasks) + size - 1) // size
        for window_index in range(total_windows):
            window = tasks[window_index * size : (window_index + 1) * size]
            started = perf_counter()
            settled = await asyncio.gather(*(self._settle(task) for task in window))
            outcomes.extend(settled)

            log_batch_window(
                window_index=window_index,
                total_windows=total_windows,
                succeeded=sum(1 for outcome in settled if outcome.ok),
                failed=sum(1 for outcome in settled if not outcome.ok),
                latency_ms=(perf_counter() - started) * 1000.0,
            )

            if window_index + 1 < total_windows and pause > 0:
                await self._sleep(pause)

        return outcomes

    async def run_reads(
        self,
        calls: Sequence[Task],
        *,
        labels: Sequence[str | None] | None = None,
        batch_size: int | None = None,
        inter_batch_delay: float | None = None,
    ) -> list[ReadOutcome]:
        """Like ``run_batch`` but wraps each raw call in the retry policy."""
        names = list(labels) if labels is not None else [None] * len(calls)
        if len(names) != len(calls):
            raise ValueError("labels must match calls")
        wrapped = [
            partial(self._retry.execute, call, label=name) for call, name in zip(calls, names)
        ]
        return await self.run_batch(
            wrapped, batch_size=batch_size, inter_batch_delay=inter_batch_delay
        )

    async def _settle(self, task: Task) -> ReadOutcome:
        try:
            return ReadOutcome.success(await task())
        except Exception as e:
            return ReadOutcome.failure(classify_error(e))
