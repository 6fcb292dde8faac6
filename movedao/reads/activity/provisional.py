"""Optimistic records the chain has not reflected yet."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from ..models.activity import ActivityRecord
from ..models.page import Subject

logger = logging.getLogger(__name__)


class ProvisionalLedger:
    """Holds locally injected records until their real counterparts appear.

    A provisional record is keyed by its id when the caller knows it, else by
    a client-assigned ``tmp-`` id. It is dropped when a real record covering
    it is observed:

    - by id, when the provisional record has one
    - by transaction hash, when it has one
    - otherwise by kind, DAO and subject with timestamps at most
      ``match_window`` seconds apart; each real record covers at most one
      provisional, the one closest in time

    Entries older than ``ttl`` seconds are expired so a transaction that never
    lands does not linger in the feed. ``ttl=None`` disables expiry.
    """

    def __init__(
        self,
        *,
        match_window: float = 300.0,
        ttl: float | None = 3600.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._match_window = match_window
        self._ttl = ttl
        self._clock = clock
        self._records: dict[str, ActivityRecord] = {}
        self._injected_at: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._records)

    @staticmethod
    def _key(record: ActivityRecord) -> str:
        if record.id is not None:
            return f"id:{record.id}"
        if record.client_id is None:
            raise ValueError("provisional record needs an id or a client_id")
        return record.client_id

    def inject(self, record: ActivityRecord) -> ActivityRecord:
        """Store ``record`` as provisional; re-injecting the same key replaces it.

        Returns:
            The stored (provisional) record
        """
        if not record.provisional:
            record = ActivityRecord.pending(
                **record.model_dump(exclude={"provisional", "client_id"}),
                client_id=record.client_id,
            )
        key = self._key(record)
        self._records[key] = record
        self._injected_at[key] = self._clock()
        logger.info(
            "activity_injected",
            extra={"key": key, "kind": record.kind.value, "dao": record.dao_address},
        )
        return record

    def reconcile(self, observed: Iterable[ActivityRecord]) -> int:
        """Drop provisionals now covered by real records.

        Returns:
            Number of provisional records dropped
        """
        self._expire()
        real = [r for r in observed if not r.provisional and r.id is not None]
        if not real or not self._records:
            return 0
        ids = {r.id for r in real}
        hashes = {r.fingerprint for r in real if r.has_tx_hash}

        dropped: list[str] = []
        loose: list[str] = []
        for key, pending in self._records.items():
            if pending.id is not None:
                if pending.id in ids:
                    dropped.append(key)
            elif pending.has_tx_hash:
                if pending.fingerprint in hashes:
                    dropped.append(key)
            else:
                loose.append(key)

        claimed = {self._records[key].id for key in dropped if self._records[key].id is not None}
        for key in loose:
            match = self._closest(self._records[key], real, claimed)
            if match is not None:
                claimed.add(match.id)
                dropped.append(key)

        for key in dropped:
            self._forget(key)
        if dropped:
            logger.info("activity_reconciled", extra={"dropped": len(dropped)})
        return len(dropped)

    def _closest(
        self, pending: ActivityRecord, real: list[ActivityRecord], claimed: set[int | None]
    ) -> ActivityRecord | None:
        candidates = [
            r for r in real if r.id not in claimed and r.resembles(pending, window=self._match_window)
        ]
        if not candidates:
            return None
        return min(
            candidates,
            key=lambda r: (abs(r.timestamp_seconds - pending.timestamp_seconds), r.id),
        )

    def pending(self, subject: Subject | None = None) -> list[ActivityRecord]:
        """Outstanding provisional records for ``subject``, newest first."""
        self._expire()
        records = [r for r in self._records.values() if subject is None or subject.matches(r)]
        records.sort(key=lambda r: r.sort_key, reverse=True)
        return records

    def clear(self) -> None:
        self._records.clear()
        self._injected_at.clear()

    def _expire(self) -> None:
        if self._ttl is None or not self._records:
            return
        cutoff = self._clock() - self._ttl
        expired = [key for key, at in self._injected_at.items() if at <= cutoff]
        for key in expired:
            self._forget(key)
        if expired:
            logger.info("activity_expired", extra={"expired": len(expired)})

    def _forget(self, key: str) -> None:
        del self._records[key]
        del self._injected_at[key]
