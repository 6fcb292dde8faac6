"""High-level ChainReader: the public read API for application code.

This wires the resilient read layer together and exposes a small surface:

- ``read`` / ``read_batch`` for cached, retried view queries
- ``read_events`` for cached event-log scans
- ``get_activity_page`` for DAO, user and global activity feeds
- ``inject_activity`` for records the UI knows about before the chain does
- ``hydrate`` / ``invalidate_cache`` for the durable cache lifecycle

Notes:
- One ChainReader owns one RequestGate, so every read it issues (cache
  refreshes, batch windows, direct calls) shares the same request rate.
- Background refreshes are detached; ``aclose`` waits for them to finish.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from functools import partial
from typing import Any

from ..activity.paginator import ActivityFunctions, LogPaginator
from ..activity.provisional import ProvisionalLedger
from ..cache.store import CacheStore, JSONFileStore
from ..cache.tiered import TieredCache
from ..constants import EVENTS_FUNCTION_PREFIX, NETWORK_CONFIG
from ..core.config import CachePolicy, ReadLayerConfig
from ..models.activity import ActivityRecord
from ..models.outcome import ReadOutcome
from ..models.page import Page, Subject
from ..models.request import ReadRequest
from ..runtime.batch import BatchExecutor
from ..runtime.gate import Clock, RequestGate, Sleep
from ..runtime.retry import RetryPolicy
from ..transport.fullnode import FullnodeTransport, ViewTransport

logger = logging.getLogger(__name__)


class ChainReader:
    """Cached, rate-limited, retried reads against one remote endpoint."""

    def __init__(
        self,
        transport: ViewTransport,
        *,
        store: CacheStore | None = None,
        config: ReadLayerConfig | None = None,
        functions: ActivityFunctions | None = None,
        clock: Clock = time.time,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the reader.

        Args:
            transport: Executes view calls and event scans
            store: Durable store for cache snapshots (None = memory only)
            config: Tuning for gate, retry, batch, cache and pagination
            functions: Activity tracker function ids (defaults to the
                deployment in ``constants``)
            clock: Wall clock for cache ages
            sleep: Awaitable sleep shared by gate, retry and batch layers
        """
        self._config = config or ReadLayerConfig()
        self._transport = transport
        self.gate = RequestGate(self._config.gate, sleep=sleep)
        self.retry = RetryPolicy(self.gate, self._config.retry, sleep=sleep)
        self.batch = BatchExecutor(self.retry, self._config.batch, sleep=sleep)
        self.cache = TieredCache(store, self._config.cache, clock=clock)
        pagination = self._config.pagination
        self.ledger = ProvisionalLedger(
            match_window=pagination.provisional_match_window,
            ttl=pagination.provisional_ttl,
            clock=clock,
        )
        self.paginator = LogPaginator(
            self, pagination, ledger=self.ledger, functions=functions
        )

    @classmethod
    def connect(
        cls,
        fullnode_url: str = NETWORK_CONFIG["fullnode"],
        indexer_url: str = NETWORK_CONFIG["indexer"],
        *,
        cache_dir: str | None = None,
        config: ReadLayerConfig | None = None,
    ) -> ChainReader:
        """Build a reader over the fullnode/indexer HTTP transport.

        Args:
            fullnode_url: Fullnode REST base URL
            indexer_url: Indexer GraphQL URL
            cache_dir: Directory for the JSON cache snapshot (None = memory only)
            config: Optional tuning
        """
        store = JSONFileStore(cache_dir) if cache_dir else None
        return cls(FullnodeTransport(fullnode_url, indexer_url), store=store, config=config)

    async def read(self, request: ReadRequest, *, policy: CachePolicy | None = None) -> Any:
        """Single cached, retried view read.

        Raises:
            ReadError: When nothing is cached and the fetch fails
        """
        fetch = partial(
            self.retry.execute,
            partial(self._transport.call_view, request),
            label=request.label,
        )
        return await self.cache.get_or_refresh(request.cache_key, fetch, policy=policy)

    async def read_batch(
        self,
        requests: Sequence[ReadRequest],
        *,
        batch_size: int | None = None,
    ) -> list[ReadOutcome]:
        """Read many requests with bounded concurrency.

        Cache hits (fresh or stale) are answered straight away; only misses
        occupy batch windows.

        Returns:
            One ReadOutcome per request, in input order
        """
        outcomes: list[ReadOutcome | None] = [None] * len(requests)
        misses: list[int] = []
        for index, request in enumerate(requests):
            if self.cache.get(request.cache_key).hit:
                outcomes[index] = ReadOutcome.success(await self.read(request))
            else:
                misses.append(index)

        if misses:
            settled = await self.batch.run_batch(
                [partial(self.read, requests[i]) for i in misses], batch_size=batch_size
            )
            for index, outcome in zip(misses, settled):
                outcomes[index] = outcome

        return [outcome for outcome in outcomes if outcome is not None]

    async def read_events(self, event_type: str, limit: int) -> Any:
        """Cached scan of the newest ``limit`` events of ``event_type``."""
        request = ReadRequest(function=f"{EVENTS_FUNCTION_PREFIX}{event_type}", arguments=[limit])
        fetch = partial(
            self.retry.execute,
            partial(self._transport.fetch_events, event_type, limit),
            label="events",
        )
        return await self.cache.get_or_refresh(request.cache_key, fetch)

    async def get_activity_page(
        self,
        subject: Subject,
        page: int = 1,
        page_size: int | None = None,
    ) -> Page:
        """Page ``page`` of ``subject``'s activity, newest first. Never raises on I/O."""
        return await self.paginator.get_page(subject, page, page_size)

    def inject_activity(self, record: ActivityRecord) -> ActivityRecord:
        """Show ``record`` in activity pages until the chain reflects it."""
        return self.ledger.inject(record)

    async def hydrate(self) -> int:
        """Load the durable cache snapshot. Never touches the network."""
        return await self.cache.hydrate()

    def invalidate_cache(self, version_tag: str) -> int:
        """Drop cached data from other deployments (contract/schema change)."""
        self.ledger.clear()
        return self.cache.invalidate_all(version_tag)

    async def aclose(self) -> None:
        await self.cache.drain()
        close = getattr(self._transport, "close", None)
        if close is not None:
            await close()
        logger.info("chain_reader_closed")

    async def __aenter__(self) -> ChainReader:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
