"""RedisKeyValueStore: KeyValueStorePort over redis.asyncio.

Every gateway instance pointed at the same Redis shares rate windows,
failure counters and blocks.
"""

import logging
from typing import Optional

import redis
from redis.asyncio import Redis

from domain.errors import StoreUnavailableError
from ports.kv_store import KeyValueStorePort

logger = logging.getLogger(__name__)


class RedisKeyValueStore(KeyValueStorePort):
    def __init__(self, client: Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str, timeout: float = 5.0) -> "RedisKeyValueStore":
        client = Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=timeout,
            socket_timeout=timeout,
        )
        logger.info(f"Redis store configured: {url}")
        return cls(client)

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._client.get(key)
        except UnicodeDecodeError as e:
            # Not written by us; treat like a missing record
            logger.warning(f"Ignoring undecodable value at {key}: {e}")
            return None
        except redis.RedisError as e:
            raise StoreUnavailableError(f"GET {key} failed: {e}") from e

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._client.set(key, value, ex=max(1, int(ttl_seconds)))
        except redis.RedisError as e:
            raise StoreUnavailableError(f"SET {key} failed: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except redis.RedisError as e:
            raise StoreUnavailableError(f"DEL {key} failed: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()
