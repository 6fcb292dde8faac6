"""Activity record data model."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..constants import OCTAS_PER_UNIT
from ..core.enums import ActivityKind
from ..core.exceptions import MalformedResponseError


class ActivityRecord(BaseModel):
    """One immutable entry of the on-chain activity log.

    Identity is ``id``. Records injected locally before the chain reflects them
    are ``provisional``; those may lack an id and carry a ``client_id`` instead.
    """

    id: int | None = Field(default=None, ge=0)
    kind: ActivityKind
    subject_address: str = ""
    dao_address: str = ""
    timestamp_seconds: int = Field(..., ge=0)
    amount: Decimal | None = None
    transaction_hash: str = ""
    title: str = ""
    description: str = ""
    block_number: int | None = None
    provisional: bool = False
    client_id: str | None = None

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @model_validator(mode="after")
    def validate_identity(self) -> ActivityRecord:
        """Real records need an id; provisional ones need an id or a client id."""
        if self.id is None and not (self.provisional and self.client_id):
            raise ValueError("record without id must be provisional with a client_id")
        return self

    @property
    def has_tx_hash(self) -> bool:
        return self.transaction_hash not in ("", "0x")

    @property
    def fingerprint(self) -> tuple[Any, ...]:
        """Identity used to match an id-less provisional record to its real one."""
        if self.has_tx_hash:
            return ("tx", self.transaction_hash.lower())
        return (
            "fields",
            self.kind.value,
            self.dao_address.lower(),
            self.subject_address.lower(),
            self.timestamp_seconds,
        )

    def resembles(self, other: ActivityRecord, *, window: float) -> bool:
        """Same kind, DAO and subject, with timestamps at most ``window`` seconds apart.

        Locally stamped records rarely carry the exact on-chain timestamp, so
        id-less provisionals without a transaction hash are matched this way.
        """
        return (
            self.kind == other.kind
            and self.dao_address.lower() == other.dao_address.lower()
            and self.subject_address.lower() == other.subject_address.lower()
            and abs(self.timestamp_seconds - other.timestamp_seconds) <= window
        )

    @property
    def sort_key(self) -> tuple[int, int]:
        """Newest-first ordering key: timestamp, then id."""
        return (self.timestamp_seconds, self.id if self.id is not None else -1)

    @classmethod
    def pending(cls, *, client_id: str | None = None, **fields: Any) -> ActivityRecord:
        """Build a provisional record for something the chain has not reflected yet."""
        if client_id is None and fields.get("id") is None:
            client_id = f"tmp-{uuid.uuid4().hex}"
        return cls(provisional=True, client_id=client_id, **fields)

    @classmethod
    def from_view(cls, raw: Any) -> ActivityRecord:
        """Decode a ``get_activity_by_id`` view result.

        Args:
            raw: View return value, either ``[record]`` or the record mapping

        Raises:
            MalformedResponseError: If the payload is not an ActivityRecord
        """
        if isinstance(raw, list) and len(raw) == 1:
            raw = raw[0]
        if not isinstance(raw, Mapping):
            raise MalformedResponseError(f"expected activity record, got {type(raw).__name__}")
        return cls._decode(raw, id_field="id")

    @classmethod
    def from_event(cls, raw: Any) -> ActivityRecord:
        """Decode an ``ActivityEvent`` (either the event or its ``data`` payload)."""
        if not isinstance(raw, Mapping):
            raise MalformedResponseError(f"expected activity event, got {type(raw).__name__}")
        data = raw.get("data", raw)
        if not isinstance(data, Mapping):
            raise MalformedResponseError("activity event has no data payload")
        return cls._decode(data, id_field="activity_id")

    @classmethod
    def _decode(cls, data: Mapping[str, Any], *, id_field: str) -> ActivityRecord:
        try:
            amount = _octas_to_units(data.get("amount"))
            block = data.get("block_number")
            return cls(
                id=int(data[id_field]),
                kind=ActivityKind.from_code(int(data.get("activity_type", 0))),
                subject_address=str(data.get("user_address") or ""),
                dao_address=str(data.get("dao_address") or ""),
                timestamp_seconds=int(data.get("timestamp") or 0),
                amount=amount,
                transaction_hash=_hex(data.get("transaction_hash")),
                title=str(data.get("title") or ""),
                description=str(data.get("description") or ""),
                block_number=int(block) if block not in (None, "") else None,
            )
        except (KeyError, TypeError, ValueError, InvalidOperation, ValidationError) as e:
            raise MalformedResponseError(f"cannot decode activity record: {e}") from e


def _octas_to_units(value: Any) -> Decimal | None:
    if value in (None, "", 0, "0"):
        return None
    return Decimal(str(value)) / OCTAS_PER_UNIT


def _hex(value: Any) -> str:
    """Normalize a ``vector<u8>`` (byte list or hex string) to ``0x`` hex."""
    if value is None:
        return ""
    if isinstance(value, list):
        if not value:
            return ""
        return "0x" + "".join(f"{int(b):02x}" for b in value)
    return str(value)
