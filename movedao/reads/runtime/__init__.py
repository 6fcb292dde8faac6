"""Request pipeline: gate, retry and batch layers.

Architecture:
    - gate.py: RequestGate (FIFO dispatch with minimum spacing)
    - retry.py: RetryPolicy and classify_error (taxonomy + exponential backoff)
    - batch.py: BatchExecutor (bounded windows, settle-all outcomes)
    - telemetry.py: Structured logging

Every read, whatever its origin, passes RetryPolicy -> RequestGate, so the
gate alone bounds the outbound request rate.
"""

from __future__ import annotations

from .batch import BatchExecutor
from .gate import GateTicket, RequestGate
from .retry import RetryPolicy, classify_error, error_for_status

__all__ = [
    "BatchExecutor",
    "GateTicket",
    "RequestGate",
    "RetryPolicy",
    "classify_error",
    "error_for_status",
]
