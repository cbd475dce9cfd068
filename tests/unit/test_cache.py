"""Tests for the key-value cache adapters."""

import json
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from cspm_identity.cache import InMemoryKeyValueStore, JsonFileKeyValueStore
from cspm_identity.cache.redis import RedisKeyValueStore
from cspm_identity.exceptions import CacheError


@pytest.mark.asyncio
class TestInMemoryKeyValueStore:
    async def test_get_missing(self):
        assert await InMemoryKeyValueStore().get("nope") is None

    async def test_set_get_delete(self):
        store = InMemoryKeyValueStore()

        await store.set("k", [{"a": 1}])
        assert await store.get("k") == [{"a": 1}]

        await store.delete("k")
        assert await store.get("k") is None
        await store.delete("k")

    async def test_values_are_copied(self):
        value = {"a": [1]}
        store = InMemoryKeyValueStore({"k": value})

        value["a"].append(2)
        fetched = await store.get("k")
        fetched["a"].append(3)

        assert await store.get("k") == {"a": [1]}


@pytest.mark.asyncio
class TestJsonFileKeyValueStore:
    async def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "cache.json")

        assert await store.get("CSPM_USERS_DB") is None

    async def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "nested" / "cache.json"
        state = {"authenticated": True}
        await JsonFileKeyValueStore(path).set("CSPM_AUTH_STATE", state)

        reopened = JsonFileKeyValueStore(path)

        assert await reopened.get("CSPM_AUTH_STATE") == {"authenticated": True}
        assert json.loads(path.read_text()) == {
            "CSPM_AUTH_STATE": {"authenticated": True}
        }
        assert not path.with_name("cache.json.tmp").exists()

    async def test_keys_are_independent(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "cache.json")
        await store.set("a", 1)
        await store.set("b", 2)

        await store.delete("a")

        assert await store.get("a") is None
        assert await store.get("b") == 2

    async def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{not json")

        with pytest.raises(CacheError, match="Corrupt"):
            await JsonFileKeyValueStore(path).get("k")

    async def test_non_object_file_raises(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("[1, 2]")

        with pytest.raises(CacheError):
            await JsonFileKeyValueStore(path).set("k", 1)

    async def test_blank_file_is_empty(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("  \n")

        assert await JsonFileKeyValueStore(path).get("k") is None


@pytest.mark.asyncio
class TestRedisKeyValueStore:
    @pytest_asyncio.fixture
    async def redis_client(self):
        return AsyncMock()

    @pytest_asyncio.fixture
    async def store(self, redis_client):
        return RedisKeyValueStore(redis_client, namespace="tenant-1:")

    async def test_get_set(self, store, redis_client):
        value = [{"email": "a@co.test"}]
        json_val = json.dumps(value)
        redis_client.get.return_value = json_val

        await store.set("CSPM_USERS_DB", value)
        result = await store.get("CSPM_USERS_DB")

        assert result == value
        redis_client.set.assert_called_with("tenant-1:CSPM_USERS_DB", json_val)
        redis_client.get.assert_called_with("tenant-1:CSPM_USERS_DB")

    async def test_get_missing(self, store, redis_client):
        redis_client.get.return_value = None

        assert await store.get("missing") is None

    async def test_delete(self, store, redis_client):
        await store.delete("CSPM_AUTH_STATE")

        redis_client.delete.assert_called_with("tenant-1:CSPM_AUTH_STATE")

    async def test_connection_error_raises_cache_error(self, store, redis_client):
        redis_client.set.side_effect = ConnectionError("refused")

        with pytest.raises(CacheError):
            await store.set("k", 1)

    async def test_corrupt_value_raises_cache_error(self, store, redis_client):
        redis_client.get.return_value = b"{oops"

        with pytest.raises(CacheError):
            await store.get("k")
