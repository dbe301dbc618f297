from __future__ import annotations

import secrets
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from gatekeeper.domain.errors import StoreUnavailable
from gatekeeper.domain.ports.token_stores import ResetTokenStorePort


class RedisResetTokens(ResetTokenStorePort):
    """Opaque tokens handed out after a reset code was verified."""

    def __init__(
        self, redis: Redis, *, key_prefix: str = "gk:reset:", ttl_seconds: int = 600
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _key(self, token: str) -> str:
        return f"{self._prefix}{token}"

    async def issue(self, email: str) -> str:
        token = secrets.token_urlsafe(32)
        try:
            await self._redis.set(self._key(token), email, ex=self._ttl)
        except RedisError as e:
            raise StoreUnavailable(f"redis SET failed: {e}") from e
        return token

    async def get_email(self, token: str) -> Optional[str]:
        if not token:
            return None
        try:
            return await self._redis.get(self._key(token))
        except RedisError as e:
            raise StoreUnavailable(f"redis GET failed: {e}") from e

    async def revoke(self, token: str) -> None:
        try:
            await self._redis.delete(self._key(token))
        except RedisError as e:
            raise StoreUnavailable(f"redis DEL failed: {e}") from e
