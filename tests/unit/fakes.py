"""Test doubles shared by the unit tests."""

from __future__ import annotations

from typing import Any

from movedao.reads.models import ReadRequest


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Awaitable sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeTransport:
    """ViewTransport answering from per-function handlers.

    ``views`` maps a function id to either a value, an exception instance or a
    callable taking the request's arguments.
    """

    def __init__(
        self,
        views: dict[str, Any] | None = None,
        events: Any = None,
    ) -> None:
        self.views = views or {}
        self.events = events if events is not None else []
        self.view_calls: list[ReadRequest] = []
        self.event_calls: list[tuple[str, int]] = []

    async def call_view(self, request: ReadRequest) -> Any:
        self.view_calls.append(request)
        handler = self.views.get(request.function)
        if handler is None:
            raise KeyError(f"no view registered for {request.function}")
        if isinstance(handler, BaseException):
            raise handler
        if callable(handler):
            return handler(*request.arguments)
        return handler

    async def fetch_events(self, event_type: str, limit: int) -> Any:
        self.event_calls.append((event_type, limit))
        if isinstance(self.events, BaseException):
            raise self.events
        return self.events[:limit]

    def calls_to(self, function: str) -> int:
        return sum(1 for r in self.view_calls if r.function == function)


def view_record(
    activity_id: int,
    *,
    timestamp: int | None = None,
    dao: str = "0xdao",
    user: str = "0xuser",
    activity_type: int = 2,
    tx: str = "",
    amount: str = "0",
) -> dict[str, Any]:
    """A raw ActivityRecord as the fullnode returns it."""
    return {
        "id": str(activity_id),
        "dao_address": dao,
        "activity_type": activity_type,
        "user_address": user,
        "title": "",
        "description": "",
        "amount": amount,
        "metadata": "0x",
        "timestamp": str(timestamp if timestamp is not None else 1_000 + activity_id),
        "transaction_hash": tx,
        "block_number": "0",
    }


def event(activity_id: int, **kwargs: Any) -> dict[str, Any]:
    """A raw ActivityEvent as the indexer returns it."""
    data = view_record(activity_id, **kwargs)
    data["activity_id"] = data.pop("id")
    return {"sequence_number": str(activity_id), "type": "ActivityEvent", "data": data}


