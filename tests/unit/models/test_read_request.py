"""Unit tests for ReadRequest."""

import pytest
from pydantic import ValidationError

from movedao.reads.constants import GET_ACTIVITY_BY_ID, GET_DAO_ACTIVITIES
from movedao.reads.models import ReadRequest


class TestReadRequest:
    """Test ReadRequest model."""

    def test_cache_key_is_structural(self):
        """Test equivalent requests share a cache key."""
        a = ReadRequest(function=GET_DAO_ACTIVITIES, arguments=["0xdao"])
        b = ReadRequest(function=GET_DAO_ACTIVITIES, arguments=("0xdao",))

        assert a.cache_key == b.cache_key
        assert a == b

    def test_cache_key_distinguishes_arguments(self):
        a = ReadRequest(function=GET_ACTIVITY_BY_ID, arguments=[1])
        b = ReadRequest(function=GET_ACTIVITY_BY_ID, arguments=[2])

        assert a.cache_key != b.cache_key
        assert a.cache_key.startswith(GET_ACTIVITY_BY_ID)

    def test_explicit_key_wins(self):
        request = ReadRequest(function=GET_ACTIVITY_BY_ID, arguments=[1], key="record:1")
        assert request.cache_key == "record:1"

    def test_label(self):
        request = ReadRequest(function="0xabc::activity_tracker::get_activity_by_id")
        assert request.label == "activity_tracker::get_activity_by_id"

    def test_payload_encodes_integers_as_strings(self):
        request = ReadRequest(function=GET_ACTIVITY_BY_ID, arguments=[7, True, "0x1"])

        assert request.to_payload() == {
            "function": GET_ACTIVITY_BY_ID,
            "type_arguments": [],
            "arguments": ["7", True, "0x1"],
        }

    def test_frozen(self):
        request = ReadRequest(function=GET_ACTIVITY_BY_ID)
        with pytest.raises(ValidationError):
            request.function = "other"  # type: ignore[misc]

    def test_rejects_empty_function(self):
        with pytest.raises(ValidationError):
            ReadRequest(function="")

    def test_rejects_string_arguments(self):
        with pytest.raises(ValidationError):
            ReadRequest(function=GET_ACTIVITY_BY_ID, arguments="0xdao")

    def test_rejects_unserializable_arguments(self):
        with pytest.raises(ValidationError):
            ReadRequest(function=GET_ACTIVITY_BY_ID, arguments=[object()])
