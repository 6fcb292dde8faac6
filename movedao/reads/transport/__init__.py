"""Remote transport (fullnode views and indexer events)."""

from __future__ import annotations

from .fullnode import EVENTS_QUERY, FullnodeTransport, ViewTransport
from .http import HTTPClient

__all__ = [
    "EVENTS_QUERY",
    "FullnodeTransport",
    "HTTPClient",
    "ViewTransport",
]
