"""Fullnode and indexer transport.

This is the one place that speaks the remote's wire protocol: view calls go
to the fullnode REST ``/view`` endpoint, event-log scans go to the indexer's
GraphQL ``events`` table. Everything above it deals in ReadRequests and plain
JSON values.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from ..constants import NETWORK_CONFIG
from ..core.exceptions import MalformedResponseError, RemoteRejectedError
from ..models.request import ReadRequest
from .http import HTTPClient

logger = logging.getLogger(__name__)

EVENTS_QUERY = """
query ActivityEvents($type: String!, $limit: Int!) {
  events(
    where: {type: {_eq: $type}}
    order_by: {transaction_version: desc}
    limit: $limit
  ) {
    sequence_number
    transaction_version
    type
    data
  }
}
""".strip()


class ViewTransport(Protocol):
    """What the read layer consumes from the encoding layer."""

    async def call_view(self, request: ReadRequest) -> Any:
        """Execute a view function and return its decoded JSON result."""
        ...

    async def fetch_events(self, event_type: str, limit: int) -> list[dict[str, Any]]:
        """Return the newest ``limit`` events of ``event_type``, newest first."""
        ...


class FullnodeTransport:
    """ViewTransport backed by a fullnode REST API and a GraphQL indexer."""

    def __init__(
        self,
        fullnode_url: str = NETWORK_CONFIG["fullnode"],
        indexer_url: str = NETWORK_CONFIG["indexer"],
        *,
        timeout: float = NETWORK_CONFIG["request_timeout"],
    ) -> None:
        self._fullnode = HTTPClient(base_url=fullnode_url, timeout=timeout)
        self._indexer = HTTPClient(base_url=indexer_url, timeout=timeout)

    async def call_view(self, request: ReadRequest) -> Any:
        result = await self._fullnode.post("/view", json=request.to_payload())
        if not isinstance(result, list):
            raise MalformedResponseError(
                f"view {request.label} returned {type(result).__name__}, expected list",
                label=request.label,
            )
        return result

    async def fetch_events(self, event_type: str, limit: int) -> list[dict[str, Any]]:
        body = await self._indexer.post(
            "", json={"query": EVENTS_QUERY, "variables": {"type": event_type, "limit": limit}}
        )
        if not isinstance(body, dict):
            raise MalformedResponseError("indexer returned a non-object body")
        errors = body.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) and errors else errors
            message = first.get("message") if isinstance(first, dict) else str(first)
            raise RemoteRejectedError(f"indexer rejected query: {message}")
        try:
            events = body["data"]["events"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(f"indexer response missing events: {e}") from e
        if not isinstance(events, list):
            raise MalformedResponseError("indexer events is not a list")
        logger.debug("events_fetched", extra={"event_type": event_type, "count": len(events)})
        return events

    async def close(self) -> None:
        await self._fullnode.close()
        await self._indexer.close()

    async def __aenter__(self) -> FullnodeTransport:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
