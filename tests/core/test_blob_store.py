from pathlib import Path

import pytest

from src.sara.core.blob_store import MemoryBlobStore, SqliteBlobStore


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path: Path):
    if request.param == "memory":
        return MemoryBlobStore()
    return SqliteBlobStore(tmp_path / "blobs" / "sara.db")


def test_get_missing_returns_none(store):
    assert store.get("users", "web:nobody") is None


def test_set_get_overwrite_and_delete(store):
    store.set("users", "web:s1", {"id": "web-s1", "name": "A"})
    store.set("users", "web:s1", {"id": "web-s1", "name": "B"})
    assert store.get("users", "web:s1") == {"id": "web-s1", "name": "B"}

    store.delete("users", "web:s1")
    assert store.get("users", "web:s1") is None
    store.delete("users", "web:s1")


def test_list_is_sorted_prefix_scoped_and_collection_scoped(store):
    store.set("damage_reports", "u2/r1", {"id": "r1"})
    store.set("damage_reports", "u1/r2", {"id": "r2"})
    store.set("damage_reports", "u1/r1", {"id": "r1"})
    store.set("demo_projects", "u1/x", {"id": "x"})

    assert store.list("damage_reports") == ["u1/r1", "u1/r2", "u2/r1"]
    assert store.list("damage_reports", prefix="u1/") == ["u1/r1", "u1/r2"]
    assert store.list("missing") == []


def test_list_prefix_treats_like_wildcards_literally(store):
    store.set("users", "web:a_b", {"id": 1})
    store.set("users", "web:axb", {"id": 2})
    store.set("users", "web:a%c", {"id": 3})

    assert store.list("users", prefix="web:a_") == ["web:a_b"]
    assert store.list("users", prefix="web:a%") == ["web:a%c"]


def test_lists_of_records_round_trip(store):
    history = [{"id": "m1", "contents": {"text": "hi"}}, {"id": "m2", "contents": {"text": "yo"}}]
    store.set("messages", "web-s1", history)
    assert store.get("messages", "web-s1") == history


def test_memory_store_isolates_returned_values():
    store = MemoryBlobStore()
    store.set("users", "k", {"tags": ["a"]})
    value = store.get("users", "k")
    value["tags"].append("b")
    assert store.get("users", "k") == {"tags": ["a"]}


def test_memory_store_rejects_non_json_values():
    store = MemoryBlobStore()
    with pytest.raises(TypeError):
        store.set("users", "k", {"when": object()})


def test_sqlite_store_persists_across_instances(tmp_path: Path):
    db_path = tmp_path / "sara.db"
    SqliteBlobStore(db_path).set("demo_meta", "seeded", {"seeded": True})
    assert SqliteBlobStore(db_path).get("demo_meta", "seeded") == {"seeded": True}
