from __future__ import annotations

import time
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from gatekeeper.domain.errors import StoreUnavailable
from gatekeeper.domain.ports.expiring_store import ExpiringStorePort


class RedisExpiringStore(ExpiringStorePort):
    """
    ExpiringStorePort on plain Redis strings. Every key is namespaced so the
    instance can be shared with other applications.
    """

    def __init__(self, redis: Redis, *, namespace: str = "gk:") -> None:
        self._redis = redis
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._redis.get(self._key(key))
        except RedisError as e:
            raise StoreUnavailable(f"redis GET failed: {e}") from e

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._redis.set(self._key(key), value, ex=ttl_seconds)
        except RedisError as e:
            raise StoreUnavailable(f"redis SET failed: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(self._key(key))
        except RedisError as e:
            raise StoreUnavailable(f"redis DEL failed: {e}") from e

    async def get_expiry(self, key: str) -> Optional[float]:
        try:
            ttl_ms = await self._redis.pttl(self._key(key))
        except RedisError as e:
            raise StoreUnavailable(f"redis PTTL failed: {e}") from e
        # -2: missing key, -1: key without expiry
        if ttl_ms is None or ttl_ms < 0:
            return None
        return time.time() + ttl_ms / 1000.0
