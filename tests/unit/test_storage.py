"""
Unit tests for the key-value storage adapters.
"""

import json

import pytest

from linkshelf.adapters.json_storage import JsonFileKeyValueStore, create_json_storage
from linkshelf.adapters.memory_storage import InMemoryKeyValueStore
from linkshelf.core.ports.storage import StorageCorruptedError


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(tmp_path / "area.json")


class TestKeyValueContract:
    """Behaviour shared by every KeyValueStorePort implementation."""

    async def test_get_missing_key(self, store):
        assert await store.get(["absent"]) == {}

    async def test_defaults_for_missing_keys(self, store):
        await store.set({"a": 1})

        result = await store.get(["a", "b"], {"a": 0, "b": []})

        assert result == {"a": 1, "b": []}

    async def test_set_and_remove(self, store):
        await store.set({"a": 1, "b": 2})
        await store.remove(["a", "missing"])

        assert await store.get(["a", "b"]) == {"b": 2}

    async def test_reads_are_copies(self, store):
        await store.set({"items": [1, 2]})

        first = await store.get(["items"])
        first["items"].append(3)

        assert (await store.get(["items"]))["items"] == [1, 2]


class TestJsonFileStore:
    async def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "sync.json"
        await JsonFileKeyValueStore(path).set({"apiKey": "k"})

        assert await JsonFileKeyValueStore(path).get(["apiKey"]) == {"apiKey": "k"}
        assert json.loads(path.read_text()) == {"apiKey": "k"}

    async def test_corrupted_file(self, tmp_path):
        path = tmp_path / "local.json"
        path.write_text("{not json")

        with pytest.raises(StorageCorruptedError) as exc:
            await JsonFileKeyValueStore(path).get(["savedLinks"])
        assert str(path) in str(exc.value)

    async def test_non_object_document(self, tmp_path):
        path = tmp_path / "local.json"
        path.write_text("[1, 2]")

        with pytest.raises(StorageCorruptedError):
            await JsonFileKeyValueStore(path).get(["savedLinks"])

    async def test_no_temp_files_left(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "local.json")

        await store.set({"a": 1})
        await store.set({"b": 2})

        assert [p.name for p in tmp_path.iterdir()] == ["local.json"]

    def test_factory_creates_area_file_path(self, tmp_path):
        store = create_json_storage(tmp_path / "data", "sync")

        assert store.path == tmp_path / "data" / "sync.json"
        assert store.path.parent.is_dir()
