"""Tests for the key-value backends and the collection store."""

import json
import logging

import pytest

from tripkeeper.core.collection_store import CollectionStore, MediaStore
from tripkeeper.core.protocols import KeyValueStoreProtocol
from tripkeeper.core.storage import (
    MemoryKeyValueStore,
    SqliteKeyValueStore,
    StorageQuotaExceeded,
)


def test_memory_store_basic_operations():
    kv = MemoryKeyValueStore()
    kv.set_item("a", "1")
    kv.set_item("b", "2")
    assert kv.get_item("a") == "1"
    assert kv.keys() == ["a", "b"]

    kv.remove_item("a")
    assert kv.get_item("a") is None
    kv.clear()
    assert kv.keys() == []


def test_memory_store_enforces_quota():
    kv = MemoryKeyValueStore(quota_bytes=20)
    kv.set_item("k", "x" * 10)

    with pytest.raises(StorageQuotaExceeded):
        kv.set_item("other", "y" * 15)
    assert kv.usage_bytes() == 11

    # Overwriting a key does not count its old value twice
    kv.set_item("k", "z" * 15)
    assert kv.get_item("k") == "z" * 15


def test_sqlite_store_round_trip(tmp_path):
    kv = SqliteKeyValueStore(str(tmp_path / "store.db"))
    assert isinstance(kv, KeyValueStoreProtocol)

    kv.set_item("trips", "[]")
    kv.set_item("trips", '[{"id": "1"}]')

    assert kv.get_item("trips") == '[{"id": "1"}]'
    assert kv.get_item("missing") is None
    assert kv.keys() == ["trips"]

    reopened = SqliteKeyValueStore(str(tmp_path / "store.db"))
    assert reopened.get_item("trips") == '[{"id": "1"}]'


def test_sqlite_store_enforces_quota(tmp_path):
    kv = SqliteKeyValueStore(str(tmp_path / "store.db"), quota_bytes=32)
    kv.set_item("a", "x" * 10)
    with pytest.raises(StorageQuotaExceeded):
        kv.set_item("b", "y" * 30)
    assert kv.get_item("b") is None


def test_missing_collection_reads_empty():
    store = CollectionStore(MemoryKeyValueStore())
    assert store.load("trips") == []


def test_corrupt_collection_reads_empty_and_warns(caplog):
    kv = MemoryKeyValueStore()
    kv.set_item("trips", "{not json")
    kv.set_item("meals", json.dumps({"id": "not-a-list"}))
    store = CollectionStore(kv)

    with caplog.at_level(logging.WARNING):
        assert store.load("trips") == []
        assert store.load("meals") == []

    assert "not valid JSON" in caplog.text


def test_non_object_entries_are_dropped():
    kv = MemoryKeyValueStore()
    kv.set_item("trips", json.dumps([{"id": "1"}, "junk", 3]))
    assert CollectionStore(kv).load("trips") == [{"id": "1"}]


def test_save_returns_false_when_quota_exceeded():
    kv = MemoryKeyValueStore(quota_bytes=40)
    store = CollectionStore(kv)

    assert store.save("trips", [{"id": "1"}]) is True
    assert store.save("trips", [{"id": "1", "notes": "x" * 100}]) is False
    # Previous state is untouched
    assert store.load("trips") == [{"id": "1"}]


def test_media_store_partitions_by_album():
    store = CollectionStore(MemoryKeyValueStore())
    media_store = MediaStore(store)

    media_store.for_album("a1").save([{"id": "m1"}])
    media_store.for_album("a2").save([])

    assert store.kv_store.get_item("album_media_a1") == '[{"id": "m1"}]'
    assert sorted(media_store.album_ids()) == ["a1", "a2"]

    with pytest.raises(ValueError):
        media_store.for_album("")
