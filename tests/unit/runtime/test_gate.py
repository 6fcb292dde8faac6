"""Unit tests for RequestGate."""

from __future__ import annotations

import asyncio
import time

import pytest

from movedao.reads.core import GateConfig
from movedao.reads.runtime import RequestGate
from tests.unit.fakes import FakeClock

SPACING = 0.05
TOLERANCE = 0.005


class TestRequestGateSpacing:
    """Dispatch spacing and ordering."""

    @pytest.mark.asyncio
    async def test_consecutive_starts_are_spaced(self):
        """Test that concurrent submissions start at least min_spacing apart."""
        gate = RequestGate(GateConfig(min_spacing=SPACING))
        starts: list[float] = []

        async def task():
            starts.append(time.monotonic())

        await asyncio.gather(*(gate.submit(task) for _ in range(4)))

        assert len(starts) == 4
        for earlier, later in zip(starts, starts[1:]):
            assert later - earlier >= SPACING - TOLERANCE

    @pytest.mark.asyncio
    async def test_dispatch_is_fifo(self):
        """Test that tasks dispatch in submission order."""
        gate = RequestGate(GateConfig(min_spacing=0.01))
        order: list[int] = []

        def make(i: int):
            async def task():
                order.append(i)
                return i

            return task

        results = await asyncio.gather(*(gate.submit(make(i)) for i in range(5)))

        assert order == [0, 1, 2, 3, 4]
        assert results == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_slow_task_does_not_block_next_dispatch(self):
        """Test that a slow task only delays dispatch by the spacing, not its runtime."""
        gate = RequestGate(GateConfig(min_spacing=0.01))
        started = asyncio.Event()
        starts: list[float] = []

        async def slow():
            starts.append(time.monotonic())
            started.set()
            await asyncio.sleep(0.3)

        async def fast():
            starts.append(time.monotonic())

        slow_task = asyncio.create_task(gate.submit(slow))
        await started.wait()
        await gate.submit(fast)

        assert starts[1] - starts[0] < 0.2
        slow_task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await slow_task

    @pytest.mark.asyncio
    async def test_failed_task_does_not_poison_queue(self):
        """Test that a failing task leaves later tasks on schedule."""
        gate = RequestGate(GateConfig(min_spacing=0.01))

        async def boom():
            raise RuntimeError("boom")

        async def ok():
            return "ok"

        results = await asyncio.gather(gate.submit(boom), gate.submit(ok), return_exceptions=True)

        assert isinstance(results[0], RuntimeError)
        assert results[1] == "ok"


class TestRequestGateCursor:
    """Slot reservation and Retry-After deferral."""

    def test_reserve_advances_cursor(self):
        """Test that reservations are spaced from the cursor, not from now."""
        clock = FakeClock(start=100.0)
        gate = RequestGate(GateConfig(min_spacing=1.0), clock=clock)

        first = gate.reserve()
        second = gate.reserve()
        third = gate.reserve()

        assert first.not_before == 100.0
        assert second.not_before == 101.0
        assert third.not_before == 102.0
        assert [t.sequence for t in (first, second, third)] == [0, 1, 2]

    def test_idle_gate_dispatches_immediately(self):
        """Test that a gate idle for longer than the spacing does not delay."""
        clock = FakeClock(start=100.0)
        gate = RequestGate(GateConfig(min_spacing=1.0), clock=clock)
        gate.reserve()
        clock.advance(10.0)

        assert gate.reserve().not_before == 110.0

    def test_defer_extends_window(self):
        """Test defer() pushes the next slot forward."""
        clock = FakeClock(start=100.0)
        gate = RequestGate(GateConfig(min_spacing=1.0), clock=clock)
        gate.defer(5.0)

        assert gate.reserve().not_before == 105.0

    def test_defer_never_shortens(self):
        """Test a shorter defer() leaves a longer window untouched."""
        clock = FakeClock(start=100.0)
        gate = RequestGate(GateConfig(min_spacing=1.0), clock=clock)
        gate.defer(10.0)
        gate.defer(2.0)
        gate.defer(0.0)

        assert gate.reserve().not_before == 110.0

    @pytest.mark.asyncio
    async def test_pending_counts_waiting_tickets(self):
        """Test pending reflects tickets waiting for their slot."""
        gate = RequestGate(GateConfig(min_spacing=0.05))

        async def noop():
            return None

        first = asyncio.create_task(gate.submit(noop))
        second = asyncio.create_task(gate.submit(noop))
        await asyncio.sleep(0)
        assert gate.pending >= 1

        await asyncio.gather(first, second)
        assert gate.pending == 0
        assert gate.last_dispatch is not None
