"""Pagination over the append-only activity log.

Architecture:
    The log is id-addressed and grows monotonically. Two discovery
    strategies converge on the same Page shape:

    - Registry (strategy A): an authoritative count plus the id list, sorted
      newest first and sliced; each id in the slice is resolved to a record
      through the batch executor. Records are immutable, so their cache entries
      never age.
    - Event scan (strategy B): when the count query fails or reports zero, the
      newest ``page_size * overfetch`` ActivityEvents are filtered to the
      subject and truncated. The event source has no count, so ``total_items``
      is the number of items and ``has_next`` is the "page is full" heuristic.

Ordering:
    Registry pages order by (timestamp desc, id desc). Event pages order by
    timestamp desc with ties kept in event-source order (stable sort).

Provisional Records:
    Injected records the chain has not reflected yet lead the feed. Pages
    slice the combined list (provisionals, then chain records), so no page
    exceeds ``page_size`` and registry totals agree across pages. Records
    fetched for a page reconcile the ledger first; if that drops anything the
    page is sliced again.

Failure Policy:
    Registry failures fall through to the event scan. If both fail the page is
    empty rather than an exception: no activity is a normal state and the UI
    always needs something to render.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from ..constants import (
    ACTIVITY_EVENT_TYPE,
    GET_ACTIVITY_BY_ID,
    GET_DAO_ACTIVITIES,
    GET_TOTAL_ACTIVITIES,
    GET_USER_ACTIVITIES,
)
from ..core.config import PaginationConfig
from ..core.enums import PageSource, SubjectKind
from ..core.exceptions import MalformedResponseError, ReadError
from ..models.activity import ActivityRecord
from ..models.outcome import ReadOutcome
from ..models.page import Page, Subject
from ..models.request import ReadRequest
from .provisional import ProvisionalLedger

logger = logging.getLogger(__name__)


class ActivityReader(Protocol):
    """Cached, retried reads the paginator is built on (see ChainReader)."""

    async def read(self, request: ReadRequest) -> Any: ...

    async def read_batch(
        self, requests: Sequence[ReadRequest], *, batch_size: int | None = None
    ) -> list[ReadOutcome]: ...

    async def read_events(self, event_type: str, limit: int) -> Any: ...


@dataclass(frozen=True)
class ActivityFunctions:
    """View function ids and event type of one activity-tracker deployment."""

    total: str = GET_TOTAL_ACTIVITIES
    dao_ids: str = GET_DAO_ACTIVITIES
    user_ids: str = GET_USER_ACTIVITIES
    by_id: str = GET_ACTIVITY_BY_ID
    event_type: str = ACTIVITY_EVENT_TYPE


class LogPaginator:
    """Builds activity pages for a DAO, a user or the whole log."""

    def __init__(
        self,
        reader: ActivityReader,
        config: PaginationConfig | None = None,
        *,
        ledger: ProvisionalLedger | None = None,
        functions: ActivityFunctions | None = None,
    ) -> None:
        self._reader = reader
        self._config = config or PaginationConfig()
        self._ledger = ledger if ledger is not None else ProvisionalLedger()
        self._functions = functions or ActivityFunctions()

    @property
    def ledger(self) -> ProvisionalLedger:
        return self._ledger

    async def get_page(
        self,
        subject: Subject,
        page: int = 1,
        page_size: int | None = None,
    ) -> Page:
        """Return page ``page`` (1-based) of ``subject``'s activity.

        Outstanding provisional records lead the feed, so the pages slice the
        combined list: provisionals first, then the chain's records. Every
        page holds at most ``page_size`` items.

        Raises:
            ValueError: If ``page`` or ``page_size`` is below 1
        """
        size = self._config.default_page_size if page_size is None else page_size
        if page < 1:
            raise ValueError("page must be >= 1")
        if size < 1:
            raise ValueError("page_size must be >= 1")

        start = (page - 1) * size
        while True:
            pending = self._ledger.pending(subject)
            offset = max(0, start - len(pending))
            source, records, total = await self._fetch(subject, offset, size)
            # Dropping a provisional shifts the combined list, so slice again
            if not self._ledger.reconcile(records):
                break

        shown = pending[start : start + size]
        items = shown + records[: size - len(shown)]
        if source == PageSource.EVENTS:
            total_items = len(items)
            has_next = len(items) == size
        else:
            total_items = total + len(pending)
            has_next = start + size < total_items

        result = Page(
            items=items,
            page_index=page,
            page_size=size,
            total_items=total_items,
            has_next=has_next,
            has_prev=page > 1,
            source=source,
        )
        logger.info(
            "page_served",
            extra={
                "subject": subject.kind.value,
                "address": subject.address,
                "page": page,
                "items": len(result.items),
                "provisional": len(shown),
                "total_items": result.total_items,
                "source": result.source.value,
            },
        )
        return result

    async def _fetch(
        self, subject: Subject, offset: int, limit: int
    ) -> tuple[PageSource, list[ActivityRecord], int]:
        """Up to ``limit`` chain records from ``offset``, with the source's total."""
        try:
            window = await self._registry_window(subject, offset, limit)
        except (ReadError, TypeError, ValueError) as e:
            logger.warning(
                "page_strategy_fallback",
                extra={
                    "subject": subject.kind.value,
                    "address": subject.address,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            window = None
        if window is not None:
            records, total = window
            return PageSource.REGISTRY, records, total

        try:
            records = await self._event_window(subject, limit)
        except ReadError as e:
            logger.warning(
                "page_event_scan_failed",
                extra={
                    "subject": subject.kind.value,
                    "address": subject.address,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            return PageSource.EMPTY, [], 0
        return PageSource.EVENTS, records, len(records)

    # ------------------------------------------------------------------
    # Strategy A: registry
    # ------------------------------------------------------------------

    async def _registry_window(
        self, subject: Subject, offset: int, limit: int
    ) -> tuple[list[ActivityRecord], int] | None:
        count = _first_int(await self._reader.read(ReadRequest(function=self._functions.total)))
        if count <= 0:
            return None

        if subject.kind == SubjectKind.GLOBAL:
            # Global ids are gap-free, so the window follows from the count alone
            total = count
            newest = self._config.first_activity_id + count - 1
            window = [newest - i for i in range(offset, min(offset + limit, total))]
        else:
            function = (
                self._functions.dao_ids if subject.kind == SubjectKind.DAO else self._functions.user_ids
            )
            raw = await self._reader.read(ReadRequest(function=function, arguments=[subject.address]))
            ids = sorted(set(_int_list(raw)), reverse=True)
            total = len(ids)
            window = ids[offset : offset + limit]

        records = await self._resolve(window) if window else []
        return records, total

    async def _resolve(self, ids: list[int]) -> list[ActivityRecord]:
        requests = [ReadRequest(function=self._functions.by_id, arguments=[i]) for i in ids]
        outcomes = await self._reader.read_batch(
            requests, batch_size=self._config.record_batch_size
        )

        records: list[ActivityRecord] = []
        for activity_id, outcome in zip(ids, outcomes):
            if not outcome.ok:
                logger.warning(
                    "record_unresolved",
                    extra={"activity_id": activity_id, "error_message": str(outcome.error)},
                )
                continue
            try:
                records.append(ActivityRecord.from_view(outcome.value))
            except MalformedResponseError as e:
                logger.error(
                    "record_malformed", extra={"activity_id": activity_id, "error_message": str(e)}
                )

        records.sort(key=lambda r: r.sort_key, reverse=True)
        return records

    # ------------------------------------------------------------------
    # Strategy B: event scan
    # ------------------------------------------------------------------

    async def _event_window(self, subject: Subject, size: int) -> list[ActivityRecord]:
        limit = size * max(1, self._config.overfetch)
        events = await self._reader.read_events(self._functions.event_type, limit)
        if not isinstance(events, list):
            raise MalformedResponseError("event scan did not return a list")

        seen: set[int | None] = set()
        records: list[ActivityRecord] = []
        for event in events:
            try:
                record = ActivityRecord.from_event(event)
            except MalformedResponseError as e:
                logger.debug("event_skipped", extra={"error_message": str(e)})
                continue
            if record.id in seen or not subject.matches(record):
                continue
            seen.add(record.id)
            records.append(record)

        # Stable: equal timestamps keep the order the event source returned
        records.sort(key=lambda r: r.timestamp_seconds, reverse=True)
        return records[:size]


def _first_int(raw: Any) -> int:
    """Decode a single u64 view result (``["5"]`` or ``5``)."""
    if isinstance(raw, list) and not raw:
        raise MalformedResponseError("empty count result")
    value = raw[0] if isinstance(raw, list) else raw
    if isinstance(value, bool) or value is None:
        raise MalformedResponseError(f"expected integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(f"expected integer, got {value!r}") from e


def _int_list(raw: Any) -> list[int]:
    """Decode a ``vector<u64>`` view result (``[["1", "2"]]`` or ``["1", "2"]``)."""
    values = raw[0] if isinstance(raw, list) and len(raw) == 1 and isinstance(raw[0], list) else raw
    if not isinstance(values, list):
        raise MalformedResponseError(f"expected id list, got {type(values).__name__}")
    try:
        return [int(v) for v in values]
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(f"id list contains non-integers: {e}") from e
