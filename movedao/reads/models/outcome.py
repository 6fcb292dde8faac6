"""Settle-all result of a single batched read."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..core.exceptions import ReadError


@dataclass(frozen=True)
class ReadOutcome:
    """Success or failure of one task in a batch.

    Exactly one of ``value`` (on success) or ``error`` is meaningful.
    """

    value: Any = None
    error: ReadError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value or raise the captured error."""
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, value: Any) -> ReadOutcome:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ReadError) -> ReadOutcome:
        return cls(error=error)
