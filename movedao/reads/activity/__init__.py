"""Activity log pagination and optimistic records."""

from __future__ import annotations

from .paginator import ActivityFunctions, ActivityReader, LogPaginator
from .provisional import ProvisionalLedger

__all__ = [
    "ActivityFunctions",
    "ActivityReader",
    "LogPaginator",
    "ProvisionalLedger",
]
