"""Two-level cache with fresh/stale/expired age bands.

Architecture:
    The in-memory map is authoritative for reads. Writes mark it dirty and a
    single flush task saves the latest snapshot to a durable CacheStore once
    per event-loop turn, with blocking stores run in a worker thread. The
    snapshot is hydrated back at start-up.
    Lookups are synchronous and never touch the network or the store.

Age bands (per key class, see CachePolicy):
    - fresh:  age < fresh_ttl              -> serve, no network
    - stale:  fresh_ttl <= age < stale_ttl -> serve, refresh in background
    - miss:   age >= stale_ttl or absent   -> caller waits for a refresh

Design Decisions:
    - Monotonic visibility: an entry is only replaced by one whose
      ``written_at`` is >= its own, so a slow refresh can never install data
      older than what a reader has already seen
    - One refresh task per key: stale-path and miss-path callers share it
    - Refresh tasks are detached; their only effect is a cache write, and a
      caller abandoning its await does not cancel them
    - Values are deep-copied on the way in and out
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial
from typing import Any

from ..core.config import CacheConfig, CachePolicy
from ..core.enums import CacheStatus
from .store import CacheStore

logger = logging.getLogger(__name__)

Refresh = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    written_at: float
    version: str


@dataclass(frozen=True)
class CacheLookup:
    """Result of a synchronous cache lookup."""

    status: CacheStatus
    value: Any = None
    age: float | None = None

    @property
    def hit(self) -> bool:
        return self.status != CacheStatus.MISS


class TieredCache:
    """In-memory cache with write-through persistence and stale-while-revalidate."""

    def __init__(
        self,
        store: CacheStore | None = None,
        config: CacheConfig | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache.

        Args:
            store: Durable store for snapshots (None keeps the cache memory-only)
            config: Namespace, version tag and per-key-class policies
            clock: Wall clock in epoch seconds (persisted timestamps must
                survive restarts, so this is not a monotonic clock)
        """
        self._store = store
        self._config = config or CacheConfig()
        self._clock = clock
        self._version = self._config.version
        self._entries: dict[str, CacheEntry] = {}
        self._key_policies: dict[str, CachePolicy] = {}
        self._refreshing: dict[str, asyncio.Task[Any]] = {}
        self._flush_task: asyncio.Task[None] | None = None
        self._dirty = False

    @property
    def version(self) -> str:
        return self._version

    @property
    def namespace(self) -> str:
        return self._config.namespace

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def policy_for(self, key: str) -> CachePolicy:
        """Policy of ``key``: an explicitly assigned one, else by key prefix."""
        return self._key_policies.get(key) or self._config.policy_for(key)

    def set_policy(self, key: str, policy: CachePolicy) -> None:
        self._key_policies[key] = policy

    def is_refreshing(self, key: str) -> bool:
        task = self._refreshing.get(key)
        return task is not None and not task.done()

    # ------------------------------------------------------------------
    # Synchronous path
    # ------------------------------------------------------------------

    def get(self, key: str) -> CacheLookup:
        """Classify the entry for ``key`` by age. Pure, no I/O."""
        entry = self._entries.get(key)
        if entry is None:
            return CacheLookup(status=CacheStatus.MISS)

        age = max(0.0, self._clock() - entry.written_at)
        policy = self.policy_for(key)
        if policy.fresh_ttl is None or age < policy.fresh_ttl:
            status = CacheStatus.FRESH
        elif policy.stale_ttl is None or age < policy.stale_ttl:
            status = CacheStatus.STALE
        else:
            return CacheLookup(status=CacheStatus.MISS, age=age)
        return CacheLookup(status=status, value=copy.deepcopy(entry.value), age=age)

    def put(self, key: str, value: Any, *, written_at: float | None = None) -> bool:
        """Install ``value`` unless a newer entry already exists.

        Args:
            key: Cache key
            value: JSON-serializable value (copied)
            written_at: Timestamp to record (defaults to now)

        Returns:
            True if the value was installed, False if a newer entry won
        """
        stamp = self._clock() if written_at is None else written_at
        current = self._entries.get(key)
        if current is not None and current.written_at > stamp:
            logger.debug(
                "cache_put_superseded",
                extra={"key": key, "current_at": current.written_at, "rejected_at": stamp},
            )
            return False

        self._entries[key] = CacheEntry(
            value=copy.deepcopy(value), written_at=stamp, version=self._version
        )
        self._persist()
        return True

    def invalidate_all(self, version_tag: str) -> int:
        """Drop every entry not tagged ``version_tag`` and adopt that tag.

        Returns:
            Number of entries dropped
        """
        self._version = version_tag
        before = len(self._entries)
        self._entries = {k: e for k, e in self._entries.items() if e.version == version_tag}
        dropped = before - len(self._entries)
        logger.info("cache_invalidated", extra={"version": version_tag, "dropped": dropped})
        self._persist()
        return dropped

    # ------------------------------------------------------------------
    # Refresh path
    # ------------------------------------------------------------------

    async def get_or_refresh(
        self,
        key: str,
        refresh: Refresh,
        *,
        policy: CachePolicy | None = None,
    ) -> Any:
        """Serve ``key`` from cache, refreshing as its age band requires.

        Args:
            key: Cache key
            refresh: Zero-argument callable fetching the authoritative value
            policy: Age bands for this key (defaults to the prefix policy)

        Returns:
            Fresh or stale value immediately; on miss, the refreshed value

        Raises:
            Exception: Whatever ``refresh`` raised, on the miss path only
        """
        if policy is not None:
            self._key_policies[key] = policy

        lookup = self.get(key)
        if lookup.status == CacheStatus.FRESH:
            return lookup.value
        if lookup.status == CacheStatus.STALE:
            self._spawn_refresh(key, refresh)
            return lookup.value

        task = self._spawn_refresh(key, refresh)
        fetched = await asyncio.shield(task)
        entry = self._entries.get(key)
        return copy.deepcopy(entry.value if entry is not None else fetched)

    def _spawn_refresh(self, key: str, refresh: Refresh) -> asyncio.Task[Any]:
        existing = self._refreshing.get(key)
        if existing is not None and not existing.done():
            return existing
        task = asyncio.create_task(self._run_refresh(key, refresh))
        self._refreshing[key] = task
        task.add_done_callback(partial(self._refresh_done, key))
        return task

    async def _run_refresh(self, key: str, refresh: Refresh) -> Any:
        # Stamp with the start time: a refresh that started later wins
        started = self._clock()
        value = await refresh()
        self.put(key, value, written_at=started)
        return value

    def _refresh_done(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._refreshing.get(key) is task:
            del self._refreshing[key]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                "cache_refresh_failed",
                extra={
                    "key": key,
                    "error_type": type(exc).__name__,
                    "error_message": str(exc),
                    "kept_stale": key in self._entries,
                },
            )

    async def drain(self) -> None:
        """Wait for outstanding refreshes and async snapshot writes."""
        while self._refreshing or (self._flush_task is not None and not self._flush_task.done()):
            pending: list[asyncio.Task[Any]] = list(self._refreshing.values())
            if self._flush_task is not None:
                pending.append(self._flush_task)
            await asyncio.gather(*pending, return_exceptions=True)

    # ------------------------------------------------------------------
    # Durable store
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        return {
            "version": self._version,
            "entries": {
                key: {"value": e.value, "written_at": e.written_at, "version": e.version}
                for key, e in self._entries.items()
            },
        }

    def _persist(self) -> None:
        """Mark the snapshot dirty and schedule one flush for this loop turn."""
        if self._store is None:
            return
        self._dirty = True
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: write through synchronously
            self._flush_now()
            return
        if self._flush_task is None or self._flush_task.done():
            self._flush_task = asyncio.create_task(self._flush())

    async def _flush(self) -> None:
        # One writer at a time; each pass saves the latest snapshot, so an
        # older snapshot never lands after a newer one
        while self._dirty:
            self._dirty = False
            snapshot = self.snapshot()
            try:
                if inspect.iscoroutinefunction(self._store.save):
                    await self._store.save(self._config.namespace, snapshot)
                else:
                    result = await asyncio.to_thread(
                        self._store.save, self._config.namespace, snapshot
                    )
                    if inspect.isawaitable(result):
                        await result
            except Exception as e:
                self._log_persist_failure(e)

    def _flush_now(self) -> None:
        self._dirty = False
        try:
            result = self._store.save(self._config.namespace, self.snapshot())
        except Exception as e:
            self._log_persist_failure(e)
            return
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            self._log_persist_failure(RuntimeError("async store used outside an event loop"))

    def _log_persist_failure(self, exc: Exception) -> None:
        logger.warning(
            "cache_persist_failed",
            extra={
                "namespace": self._config.namespace,
                "error_type": type(exc).__name__,
                "error_message": str(exc),
            },
        )

    async def hydrate(self) -> int:
        """Load the durable snapshot into memory once.

        Never touches the network. Absent, malformed or foreign-version
        snapshots are ignored.

        Returns:
            Number of entries installed
        """
        if self._store is None:
            return 0
        try:
            data = self._store.load(self._config.namespace)
            if inspect.isawaitable(data):
                data = await data
        except Exception as e:
            logger.warning(
                "cache_hydrate_failed",
                extra={"namespace": self._config.namespace, "error_message": str(e)},
            )
            return 0
        return self.load_snapshot(data)

    def load_snapshot(self, data: Any) -> int:
        """Install entries from a snapshot document, keeping newer in-memory ones."""
        if not isinstance(data, dict) or data.get("version") != self._version:
            return 0
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return 0

        installed = 0
        for key, raw in entries.items():
            if not isinstance(raw, dict) or "value" not in raw:
                continue
            written_at = raw.get("written_at")
            if isinstance(written_at, bool) or not isinstance(written_at, (int, float)):
                continue
            if raw.get("version", self._version) != self._version:
                continue
            current = self._entries.get(key)
            if current is not None and current.written_at > written_at:
                continue
            self._entries[key] = CacheEntry(
                value=raw["value"], written_at=float(written_at), version=self._version
            )
            installed += 1

        logger.info(
            "cache_hydrated",
            extra={"namespace": self._config.namespace, "entries": installed},
        )
        return installed
