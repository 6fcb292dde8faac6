"""Unit tests for the durable cache stores."""

from unittest.mock import patch

import pytest

from movedao.reads.cache import InMemoryStore, JSONFileStore


class TestInMemoryStore:
    def test_round_trip_does_not_alias(self):
        store = InMemoryStore()
        data = {"entries": {"k": [1]}}
        store.save("ns", data)
        data["entries"]["k"].append(2)

        assert store.load("ns") == {"entries": {"k": [1]}}

    def test_absent(self):
        assert InMemoryStore().load("ns") is None

    def test_corrupt(self):
        store = InMemoryStore()
        store.raw["ns"] = "{"
        assert store.load("ns") is None


class TestJSONFileStore:
    def test_round_trip(self, tmp_path):
        store = JSONFileStore(tmp_path / "cache")
        store.save("movedao_reads", {"version": "v1", "entries": {}})

        assert store.path_for("movedao_reads").exists()
        assert store.load("movedao_reads") == {"version": "v1", "entries": {}}

    def test_absent_file(self, tmp_path):
        assert JSONFileStore(tmp_path).load("missing") is None

    def test_corrupt_file(self, tmp_path):
        store = JSONFileStore(tmp_path)
        store.path_for("ns").write_text("{broken", encoding="utf-8")

        assert store.load("ns") is None

    def test_namespace_sanitized(self, tmp_path):
        path = JSONFileStore(tmp_path).path_for("../evil/ns")
        assert path.parent == tmp_path
        assert path.name == ".._evil_ns.json"

    def test_failed_write_leaves_previous_snapshot(self, tmp_path):
        """Test a failed save neither truncates the old file nor leaves temp files."""
        store = JSONFileStore(tmp_path)
        store.save("ns", {"n": 1})

        with patch("movedao.reads.cache.store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                store.save("ns", {"n": 2})

        assert store.load("ns") == {"n": 1}
        assert [p.name for p in tmp_path.iterdir()] == ["ns.json"]
