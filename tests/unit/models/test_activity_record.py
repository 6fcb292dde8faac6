"""Unit tests for ActivityRecord decoding and identity."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from movedao.reads.core import ActivityKind, MalformedResponseError
from movedao.reads.models import ActivityRecord
from tests.unit.fakes import event, view_record


class TestDecoding:
    """Decoding fullnode views and indexer events."""

    def test_from_view(self):
        raw = view_record(5, timestamp=1234, activity_type=7, amount="250000000", tx="0xAB")
        record = ActivityRecord.from_view([raw])

        assert record.id == 5
        assert record.kind == ActivityKind.STAKE
        assert record.timestamp_seconds == 1234
        assert record.amount == Decimal("2.5")
        assert record.transaction_hash == "0xAB"
        assert record.dao_address == "0xdao"
        assert record.subject_address == "0xuser"
        assert record.block_number == 0
        assert not record.provisional

    def test_from_event(self):
        record = ActivityRecord.from_event(event(9, timestamp=50))

        assert record.id == 9
        assert record.timestamp_seconds == 50

    def test_zero_amount_is_none(self):
        assert ActivityRecord.from_view(view_record(1)).amount is None

    def test_unknown_code(self):
        record = ActivityRecord.from_view(view_record(1, activity_type=99))
        assert record.kind == ActivityKind.UNKNOWN

    def test_byte_list_hash(self):
        raw = view_record(1)
        raw["transaction_hash"] = [0xDE, 0xAD]
        assert ActivityRecord.from_view(raw).transaction_hash == "0xdead"

        raw["transaction_hash"] = []
        assert ActivityRecord.from_view(raw).transaction_hash == ""

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            [],
            "record",
            {"activity_type": 1, "timestamp": "1"},
            {"id": "not-a-number", "timestamp": "1"},
            {"id": "-3", "timestamp": "1"},
        ],
    )
    def test_malformed(self, raw):
        with pytest.raises(MalformedResponseError):
            ActivityRecord.from_view(raw)


class TestIdentity:
    """Identity, ordering and provisional records."""

    def test_id_required_for_real_records(self):
        with pytest.raises(ValidationError):
            ActivityRecord(kind=ActivityKind.STAKE, timestamp_seconds=1)

    def test_pending_assigns_client_id(self):
        record = ActivityRecord.pending(kind=ActivityKind.STAKE, timestamp_seconds=1)

        assert record.provisional
        assert record.id is None
        assert record.client_id.startswith("tmp-")

    def test_pending_with_id_keeps_no_client_id(self):
        record = ActivityRecord.pending(id=4, kind=ActivityKind.STAKE, timestamp_seconds=1)
        assert record.client_id is None

    def test_fingerprint_prefers_tx_hash(self):
        a = ActivityRecord(id=1, kind=ActivityKind.STAKE, timestamp_seconds=1, transaction_hash="0xAA")
        b = ActivityRecord.pending(kind=ActivityKind.UNSTAKE, timestamp_seconds=9, transaction_hash="0xaa")
        assert a.fingerprint == b.fingerprint

    def test_fingerprint_falls_back_to_fields(self):
        a = ActivityRecord(
            id=1, kind=ActivityKind.STAKE, timestamp_seconds=5, dao_address="0xD", transaction_hash="0x"
        )
        b = ActivityRecord.pending(kind=ActivityKind.STAKE, timestamp_seconds=5, dao_address="0xd")
        assert a.fingerprint == b.fingerprint

    def test_sort_key_breaks_ties_by_id(self):
        older = ActivityRecord(id=1, kind=ActivityKind.STAKE, timestamp_seconds=5)
        newer = ActivityRecord(id=2, kind=ActivityKind.STAKE, timestamp_seconds=5)
        assert sorted([older, newer], key=lambda r: r.sort_key, reverse=True)[0] is newer
