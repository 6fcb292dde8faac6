"""MoveDAO Reads - resilient read layer for the MoveDAO activity log."""

from .activity import ActivityFunctions, LogPaginator, ProvisionalLedger
from .cache import CacheLookup, CacheStore, InMemoryStore, JSONFileStore, TieredCache
from .clients import ChainReader
from .core import (
    IMMUTABLE,
    ActivityKind,
    BatchConfig,
    CacheConfig,
    CachePolicy,
    CacheStatus,
    CrossOriginBlockedError,
    DataError,
    ErrorClass,
    GateConfig,
    MalformedResponseError,
    PageSource,
    PaginationConfig,
    RateLimitedError,
    ReadError,
    ReadLayerConfig,
    RemoteRejectedError,
    RetryConfig,
    SubjectKind,
    TransientNetworkError,
)
from .models import ActivityRecord, Page, ReadOutcome, ReadRequest, Subject
from .runtime import BatchExecutor, RequestGate, RetryPolicy, classify_error
from .transport import FullnodeTransport, HTTPClient, ViewTransport

__version__ = "0.1.0"

__all__ = [
    # Facade
    "ChainReader",
    # Pipeline
    "BatchExecutor",
    "RequestGate",
    "RetryPolicy",
    "classify_error",
    # Cache
    "CacheLookup",
    "CacheStore",
    "InMemoryStore",
    "JSONFileStore",
    "TieredCache",
    # Activity
    "ActivityFunctions",
    "LogPaginator",
    "ProvisionalLedger",
    # Transport
    "FullnodeTransport",
    "HTTPClient",
    "ViewTransport",
    # Models
    "ActivityRecord",
    "Page",
    "ReadOutcome",
    "ReadRequest",
    "Subject",
    # Config
    "BatchConfig",
    "CacheConfig",
    "CachePolicy",
    "GateConfig",
    "IMMUTABLE",
    "PaginationConfig",
    "ReadLayerConfig",
    "RetryConfig",
    # Enums
    "ActivityKind",
    "CacheStatus",
    "ErrorClass",
    "PageSource",
    "SubjectKind",
    # Exceptions
    "CrossOriginBlockedError",
    "DataError",
    "MalformedResponseError",
    "RateLimitedError",
    "ReadError",
    "RemoteRejectedError",
    "TransientNetworkError",
]
