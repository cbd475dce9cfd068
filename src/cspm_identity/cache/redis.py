"""Redis implementation of the scoped key-value store."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from ..exceptions import CacheError
from .ports import IKeyValueStore

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger("cspm_identity.redis_cache")


class RedisKeyValueStore(IKeyValueStore):
    """
    Redis implementation of IKeyValueStore.
    Uses JSON serialization; keys are optionally namespaced per client.
    """

    def __init__(self, redis_client: Redis[bytes], namespace: str = "") -> None:
        self._redis = redis_client
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    async def get(self, key: str) -> Any | None:
        try:
            val = await self._redis.get(self._key(key))
        except Exception as e:  # noqa: BLE001
            logger.warning("Redis get failed for key %s: %s", key, e)
            raise CacheError(f"Redis get failed for key {key}") from e
        if not val:
            return None
        try:
            return json.loads(val)
        except json.JSONDecodeError as e:
            raise CacheError(f"Corrupt cache value for key {key}") from e

    async def set(self, key: str, value: Any) -> None:
        val = json.dumps(value, default=str)
        try:
            await self._redis.set(self._key(key), val)
        except Exception as e:  # noqa: BLE001
            logger.warning("Redis set failed for key %s: %s", key, e)
            raise CacheError(f"Redis set failed for key {key}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(self._key(key))
        except Exception as e:  # noqa: BLE001
            logger.warning("Redis delete failed for key %s: %s", key, e)
            raise CacheError(f"Redis delete failed for key {key}") from e
