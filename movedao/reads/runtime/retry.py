"""Classification-aware retry with exponential backoff.

Architecture:
    RetryPolicy wraps a single read. Each attempt is submitted through the
    shared RequestGate, so even a storm of retries stays within the gate's
    request rate. Failures are first mapped onto the ReadError taxonomy by
    ``classify_error``; only retryable classes consume further attempts.

Backoff:
    delay(attempt) = min(base_delay * 2 ** attempt, cap_delay), attempt
    starting at 0 for the first retry, optionally stretched by a random
    fraction (``jitter``) of itself.
"""

from __future__ import annotations

import asyncio
import json
import random
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import aiohttp

from ..core.config import RetryConfig
from ..core.exceptions import (
    CrossOriginBlockedError,
    MalformedResponseError,
    RateLimitedError,
    ReadError,
    RemoteRejectedError,
    TransientNetworkError,
)
from .gate import RequestGate, Sleep
from .telemetry import log_read_failed, log_retry_scheduled

T = TypeVar("T")

_RATE_LIMIT_HINTS = ("429", "too many requests", "rate limit")
_CORS_HINTS = ("cors", "cross-origin", "access-control-allow-origin")
_NETWORK_HINTS = ("timeout", "timed out", "network", "connection reset", "econnreset", "503")


def classify_error(exc: BaseException, *, label: str | None = None) -> ReadError:
    """Map an arbitrary failure onto the ReadError taxonomy.

    ReadErrors pass through unchanged. Everything else becomes the matching
    subclass with the original exception chained as ``__cause__``.
    """
    if isinstance(exc, ReadError):
        return exc

    message = str(exc) or type(exc).__name__
    error: ReadError

    if isinstance(exc, aiohttp.ContentTypeError):
        error = MalformedResponseError(message, label=label)
    elif isinstance(exc, aiohttp.ClientResponseError):
        error = error_for_status(exc.status, message, exc.headers, label=label)
    elif isinstance(
        exc,
        (
            asyncio.TimeoutError,
            TimeoutError,
            aiohttp.ClientConnectionError,
            aiohttp.ClientPayloadError,
            ConnectionError,
            OSError,
        ),
    ):
        error = TransientNetworkError(message, label=label)
    elif isinstance(exc, (json.JSONDecodeError, KeyError, TypeError, ValueError)):
        error = MalformedResponseError(message, label=label)
    else:
        error = _classify_message(message, label=label)

    error.__cause__ = exc
    return error


def error_for_status(
    status: int,
    message: str,
    headers: Any = None,
    *,
    vm_status: str | None = None,
    label: str | None = None,
) -> ReadError:
    """Map an HTTP error status onto the ReadError taxonomy."""
    if status == 429:
        return RateLimitedError(message, retry_after=_retry_after(headers), label=label)
    if status == 408 or status >= 500:
        return TransientNetworkError(message, label=label)
    if status == 403 and any(hint in message.lower() for hint in _CORS_HINTS):
        return CrossOriginBlockedError(message, label=label)
    return RemoteRejectedError(message, status_code=status, vm_status=vm_status, label=label)


def _classify_message(message: str, *, label: str | None) -> ReadError:
    lowered = message.lower()
    if any(hint in lowered for hint in _RATE_LIMIT_HINTS):
        return RateLimitedError(message, label=label)
    if any(hint in lowered for hint in _CORS_HINTS):
        return CrossOriginBlockedError(message, label=label)
    if any(hint in lowered for hint in _NETWORK_HINTS):
        return TransientNetworkError(message, label=label)
    return RemoteRejectedError(message, label=label)


def _retry_after(headers: Any) -> float | None:
    if not headers:
        return None
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except (TypeError, ValueError):
        return None


class RetryPolicy:
    """Retries retryable read failures through a shared RequestGate."""

    def __init__(
        self,
        gate: RequestGate,
        config: RetryConfig | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self._gate = gate
        self._config = config or RetryConfig()
        self._sleep = sleep
        self._rng = rng or random.Random()

    @property
    def gate(self) -> RequestGate:
        return self._gate

    @property
    def max_attempts(self) -> int:
        return self._config.max_attempts

    def backoff(self, attempt: int) -> float:
        """Delay before retry number ``attempt + 1`` (attempt is zero-based)."""
        delay = min(self._config.base_delay * (2**attempt), self._config.cap_delay)
        if self._config.jitter:
            delay += delay * self._config.jitter * self._rng.random()
        return delay

    async def execute(
        self,
        task: Callable[[], Awaitable[T]],
        *,
        label: str | None = None,
    ) -> T:
        """Run ``task`` with retries.

        Args:
            task: Zero-argument callable returning an awaitable read
            label: Optional request label for logs

        Returns:
            The task's result

        Raises:
            ReadError: The classified error, immediately for non-retryable
                classes, or the last one once attempts are exhausted
        """
        max_attempts = self._config.max_attempts
        for attempt in range(max_attempts):
            try:
                return await self._gate.submit(task, label=label, attempt=attempt)
            except Exception as e:
                error = classify_error(e, label=label)
                if not error.retryable or attempt + 1 >= max_attempts:
                    log_read_failed(label=label, attempts=attempt + 1, error=error)
                    if error is e:
                        raise
                    raise error from e

                delay = self.backoff(attempt)
                if isinstance(error, RateLimitedError) and error.retry_after:
                    self._gate.defer(error.retry_after)
                log_retry_scheduled(
                    label=label,
                    attempt=attempt + 1,
                    max_attempts=max_attempts,
                    delay=delay,
                    error=error,
                )
                await self._sleep(delay)

        raise AssertionError("unreachable")  # pragma: no cover
