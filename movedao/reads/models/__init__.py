"""Data models for the read layer.

Architecture:
    Pydantic v2 models for everything that crosses the public API. All models
    are immutable (frozen=True) so a record handed to a caller cannot be
    mutated into the cache or into another caller's page.

Design Decisions:
    - Pydantic v2: Validation at the decode boundary (malformed payloads fail early)
    - Frozen models: Records are immutable on chain and stay immutable here
    - Decimal for amounts: Octa conversion without float rounding
    - ReadOutcome is a plain dataclass: it wraps exceptions, which pydantic
      does not validate

Model Categories:
    - Requests: ReadRequest
    - Activity: ActivityRecord, Page, Subject
    - Batching: ReadOutcome
"""

from .activity import ActivityRecord
from .outcome import ReadOutcome
from .page import Page, Subject
from .request import ReadRequest

__all__ = [
    "ActivityRecord",
    "Page",
    "ReadOutcome",
    "ReadRequest",
    "Subject",
]
