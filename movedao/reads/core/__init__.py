"""Core components."""

from .config import (
    IMMUTABLE,
    BatchConfig,
    CacheConfig,
    CachePolicy,
    GateConfig,
    PaginationConfig,
    ReadLayerConfig,
    RetryConfig,
)
from .enums import ActivityKind, CacheStatus, ErrorClass, PageSource, SubjectKind
from .exceptions import (
    CrossOriginBlockedError,
    DataError,
    MalformedResponseError,
    RateLimitedError,
    ReadError,
    RemoteRejectedError,
    TransientNetworkError,
)

__all__ = [
    "ActivityKind",
    "BatchConfig",
    "CacheConfig",
    "CachePolicy",
    "CacheStatus",
    "CrossOriginBlockedError",
    "DataError",
    "ErrorClass",
    "GateConfig",
    "IMMUTABLE",
    "MalformedResponseError",
    "PageSource",
    "PaginationConfig",
    "RateLimitedError",
    "ReadError",
    "ReadLayerConfig",
    "RemoteRejectedError",
    "RetryConfig",
    "SubjectKind",
    "TransientNetworkError",
]
