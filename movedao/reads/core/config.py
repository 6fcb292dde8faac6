"""Configuration dataclasses for the read layer.

Architecture:
    Each runtime component takes its own small frozen config so it can be
    constructed and tested alone. ReadLayerConfig bundles them for the
    ChainReader facade.

Design Decisions:
    - Seconds everywhere: asyncio sleeps and time.time() both speak seconds
    - Per-function cache policies: count queries, id lists, immutable records
      and event scans age at very different rates
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..constants import (
    EVENTS_FUNCTION_PREFIX,
    GET_ACTIVITY_BY_ID,
    GET_DAO_ACTIVITIES,
    GET_TOTAL_ACTIVITIES,
    GET_USER_ACTIVITIES,
)


@dataclass(frozen=True)
class CachePolicy:
    """Age bands for one class of cache keys.

    Attributes:
        fresh_ttl: Age below which an entry is served with no network activity
            (None = never leaves the fresh band)
        stale_ttl: Age below which a stale entry is still served while it is
            refreshed in the background (None = never expires)
    """

    fresh_ttl: float | None = 60.0
    stale_ttl: float | None = 300.0

    def __post_init__(self) -> None:
        if self.fresh_ttl is not None and self.fresh_ttl < 0:
            raise ValueError("fresh_ttl must be >= 0")
        if self.stale_ttl is not None:
            if self.fresh_ttl is None:
                raise ValueError("stale_ttl requires a finite fresh_ttl")
            if self.stale_ttl < self.fresh_ttl:
                raise ValueError("stale_ttl must be >= fresh_ttl")


IMMUTABLE = CachePolicy(fresh_ttl=None, stale_ttl=None)


def _default_policies() -> dict[str, CachePolicy]:
    return {
        GET_TOTAL_ACTIVITIES: CachePolicy(fresh_ttl=15.0, stale_ttl=120.0),
        GET_DAO_ACTIVITIES: CachePolicy(fresh_ttl=30.0, stale_ttl=300.0),
        GET_USER_ACTIVITIES: CachePolicy(fresh_ttl=30.0, stale_ttl=300.0),
        GET_ACTIVITY_BY_ID: IMMUTABLE,
        EVENTS_FUNCTION_PREFIX: CachePolicy(fresh_ttl=30.0, stale_ttl=120.0),
    }


@dataclass(frozen=True)
class GateConfig:
    min_spacing: float = 1.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    base_delay: float = 2.0
    cap_delay: float = 30.0
    jitter: float = 0.0  # fraction of the computed delay, 0 disables

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if not 0.0 <= self.jitter <= 1.0:
            raise ValueError("jitter must be within [0, 1]")


@dataclass(frozen=True)
class BatchConfig:
    batch_size: int = 5
    inter_batch_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")


@dataclass(frozen=True)
class CacheConfig:
    """Cache namespace, version and per-key-class policies.

    Policies are matched against ``ReadRequest.function`` by longest prefix;
    keys with no match use ``default_policy``.
    """

    namespace: str = "movedao_reads"
    version: str = "v1"
    default_policy: CachePolicy = field(default_factory=CachePolicy)
    policies: dict[str, CachePolicy] = field(default_factory=_default_policies)

    def policy_for(self, function: str) -> CachePolicy:
        best: str | None = None
        for prefix in self.policies:
            if function.startswith(prefix) and (best is None or len(prefix) > len(best)):
                best = prefix
        return self.policies[best] if best is not None else self.default_policy


@dataclass(frozen=True)
class PaginationConfig:
    default_page_size: int = 20
    overfetch: int = 2
    record_batch_size: int = 5
    first_activity_id: int = 0
    provisional_match_window: float = 300.0  # seconds between local and on-chain timestamps
    provisional_ttl: float | None = 3600.0  # None keeps provisionals until reconciled

    def __post_init__(self) -> None:
        if self.default_page_size < 1:
            raise ValueError("default_page_size must be >= 1")
        if self.provisional_match_window < 0:
            raise ValueError("provisional_match_window must be >= 0")
        if self.provisional_ttl is not None and self.provisional_ttl <= 0:
            raise ValueError("provisional_ttl must be > 0")


@dataclass(frozen=True)
class ReadLayerConfig:
    gate: GateConfig = field(default_factory=GateConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
