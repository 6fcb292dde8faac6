"""Structured logging for the request pipeline.

This module provides telemetry hooks for the gate, retry and batch layers,
emitting structured log records with stable event names.
"""

from __future__ import annotations

import logging

from ..core.enums import ErrorClass
from ..core.exceptions import ReadError

logger = logging.getLogger(__name__)


def log_gate_dispatch(
    *,
    sequence: int,
    label: str | None,
    attempt: int,
    waited_ms: float,
    pending: int,
) -> None:
    """Log a task leaving the request gate.

    Args:
        sequence: Submission sequence number
        label: Optional request label
        attempt: Zero-based retry attempt of the task
        waited_ms: Time spent waiting for the dispatch slot
        pending: Tickets still waiting behind this one
    """
    logger.debug(
        "gate_dispatch",
        extra={
            "sequence": sequence,
            "label": label,
            "attempt": attempt,
            "waited_ms": waited_ms,
            "pending": pending,
        },
    )


def log_retry_scheduled(
    *,
    label: str | None,
    attempt: int,
    max_attempts: int,
    delay: float,
    error: ReadError,
) -> None:
    """Log a retryable failure and the backoff before the next attempt.

    Args:
        label: Optional request label
        attempt: One-based number of the attempt that failed
        max_attempts: Attempt ceiling
        delay: Backoff delay in seconds
        error: Classified error
    """
    logger.warning(
        "read_retry_scheduled",
        extra={
            "label": label,
            "attempt": attempt,
            "max_attempts": max_attempts,
            "delay_s": delay,
            "error_class": error.error_class.value,
            "error_message": str(error),
        },
    )


def log_read_failed(*, label: str | None, attempts: int, error: ReadError) -> None:
    """Log a read that leaves the retry layer as a failure.

    Malformed responses are logged at error level since they point at a
    contract/schema mismatch rather than a flaky remote.
    """
    level = logging.ERROR if error.error_class == ErrorClass.MALFORMED else logging.WARNING
    logger.log(
        level,
        "read_failed",
        extra={
            "label": label,
            "attempts": attempts,
            "error_class": error.error_class.value,
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )


def log_batch_window(
    *,
    window_index: int,
    total_windows: int,
    succeeded: int,
    failed: int,
    latency_ms: float,
) -> None:
    """Log completion of one batch window.

    Args:
        window_index: Zero-based index of the window
        total_windows: Number of windows in the batch
        succeeded: Tasks that settled with a value
        failed: Tasks that settled with an error
        latency_ms: Wall-clock time of the window
    """
    logger.info(
        "batch_window_completed",
        extra={
            "window_index": window_index,
            "total_windows": total_windows,
            "succeeded": succeeded,
            "failed": failed,
            "latency_ms": latency_ms,
        },
    )
