"""Read request descriptor."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReadRequest(BaseModel):
    """A view query: a remote function id plus its ordered arguments.

    Two requests are equivalent when function and arguments are structurally
    equal; equivalence is what the cache keys on. ``key`` overrides the
    derived cache key for callers that group several requests under one name.
    """

    function: str = Field(..., min_length=1)
    arguments: tuple[Any, ...] = ()
    key: str | None = None

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @field_validator("arguments", mode="before")
    @classmethod
    def validate_arguments(cls, v: Any) -> tuple[Any, ...]:
        """Accept any sequence and require JSON-serializable values."""
        if v is None:
            return ()
        if isinstance(v, (str, bytes)) or not hasattr(v, "__iter__"):
            raise ValueError("arguments must be a sequence")
        args = tuple(v)
        try:
            json.dumps(args)
        except (TypeError, ValueError) as e:
            raise ValueError(f"arguments must be JSON-serializable: {e}") from e
        return args

    @property
    def cache_key(self) -> str:
        if self.key is not None:
            return self.key
        encoded = json.dumps(list(self.arguments), sort_keys=True, separators=(",", ":"))
        return f"{self.function}|{encoded}"

    @property
    def label(self) -> str:
        """Short name for logs (module::function)."""
        return "::".join(self.function.split("::")[-2:])

    def to_payload(self) -> dict[str, Any]:
        """Body for the fullnode ``/view`` endpoint."""
        return {
            "function": self.function,
            "type_arguments": [],
            "arguments": [_encode_argument(a) for a in self.arguments],
        }


def _encode_argument(value: Any) -> Any:
    # Move u64 arguments travel as decimal strings
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    return value
