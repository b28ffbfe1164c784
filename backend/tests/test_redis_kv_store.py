"""Tests for the Redis-backed store, against a mocked redis.asyncio client."""

from unittest.mock import AsyncMock

import pytest
import redis

from adapters.redis.kv_store import RedisKeyValueStore
from domain.errors import StoreUnavailableError


@pytest.fixture
def redis_client():
    client = AsyncMock()
    client.get.return_value = None
    return client


async def test_get_returns_stored_value(redis_client):
    redis_client.get.return_value = '{"count": 1, "windowStart": 0}'
    store = RedisKeyValueStore(redis_client)

    assert await store.get("rate_limit:1.2.3.4") == '{"count": 1, "windowStart": 0}'
    redis_client.get.assert_awaited_once_with("rate_limit:1.2.3.4")


async def test_put_sets_expiry(redis_client):
    store = RedisKeyValueStore(redis_client)

    await store.put("block:1.2.3.4", "{}", 3600)

    redis_client.set.assert_awaited_once_with("block:1.2.3.4", "{}", ex=3600)


async def test_put_never_sends_zero_expiry(redis_client):
    store = RedisKeyValueStore(redis_client)

    await store.put("k", "v", 0)

    redis_client.set.assert_awaited_once_with("k", "v", ex=1)


async def test_delete(redis_client):
    store = RedisKeyValueStore(redis_client)

    await store.delete("failed_attempts:1.2.3.4")

    redis_client.delete.assert_awaited_once_with("failed_attempts:1.2.3.4")


@pytest.mark.parametrize("operation, args", [
    ("get", ("k",)),
    ("put", ("k", "v", 60)),
    ("delete", ("k",)),
])
async def test_redis_errors_become_store_unavailable(redis_client, operation, args):
    error = redis.ConnectionError("connection refused")
    redis_client.get.side_effect = error
    redis_client.set.side_effect = error
    redis_client.delete.side_effect = error
    store = RedisKeyValueStore(redis_client)

    with pytest.raises(StoreUnavailableError):
        await getattr(store, operation)(*args)


async def test_close_closes_client(redis_client):
    store = RedisKeyValueStore(redis_client)

    await store.close()

    redis_client.aclose.assert_awaited_once()


async def test_undecodable_value_reads_as_missing(redis_client):
    redis_client.get.side_effect = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
    store = RedisKeyValueStore(redis_client)

    assert await store.get("block:1.2.3.4") is None
