"""Custom exception hierarchy."""

from __future__ import annotations

from .enums import ErrorClass


class DataError(Exception):
    """Base exception for all library errors."""

    pass


class ReadError(DataError):
    """A read against the remote source failed.

    Every failure that leaves the retry layer is a ReadError subclass, so
    callers only ever need to handle this one type. ``error_class`` tells which
    branch of the taxonomy the failure belongs to.
    """

    error_class: ErrorClass = ErrorClass.REMOTE_REJECTED
    retryable: bool = False

    def __init__(self, message: str, *, label: str | None = None) -> None:
        super().__init__(message)
        self.label = label


class RateLimitedError(ReadError):
    """Remote transport signaled a rate or quota error."""

    error_class = ErrorClass.RATE_LIMITED
    retryable = True

    def __init__(
        self,
        message: str,
        *,
        retry_after: float | None = None,
        label: str | None = None,
    ) -> None:
        super().__init__(message, label=label)
        self.retry_after = retry_after


class TransientNetworkError(ReadError):
    """Connection reset, timeout, DNS failure."""

    error_class = ErrorClass.TRANSIENT_NETWORK
    retryable = True


class CrossOriginBlockedError(ReadError):
    """Request blocked by a cross-origin security policy.

    Retried because it sometimes clears up on a slow remote, but callers
    should treat it as effectively permanent once retries are exhausted.
    """

    error_class = ErrorClass.CROSS_ORIGIN_BLOCKED
    retryable = True


class RemoteRejectedError(ReadError):
    """Remote explicitly returned an application-level error."""

    error_class = ErrorClass.REMOTE_REJECTED
    retryable = False

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        vm_status: str | None = None,
        label: str | None = None,
    ) -> None:
        super().__init__(message, label=label)
        self.status_code = status_code
        self.vm_status = vm_status


class MalformedResponseError(ReadError):
    """Response could not be decoded into the expected shape."""

    error_class = ErrorClass.MALFORMED
    retryable = False
