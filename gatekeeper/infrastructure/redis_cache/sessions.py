from __future__ import annotations

import secrets
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from gatekeeper.domain.entities import Role, Session
from gatekeeper.domain.errors import StoreUnavailable
from gatekeeper.domain.ports.token_stores import SessionStorePort


class RedisSessions(SessionStorePort):
    def __init__(
        self, redis: Redis, *, key_prefix: str = "gk:sess:", ttl_seconds: int = 86400
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _key(self, token: str) -> str:
        return f"{self._prefix}{token}"

    async def create(self, user_id: str, role: Role = "subscriber") -> str:
        token = secrets.token_urlsafe(32)
        key = self._key(token)
        try:
            pipe = self._redis.pipeline(transaction=True)
            pipe.hset(key, mapping={"user_id": user_id, "role": role})
            pipe.expire(key, self._ttl)
            await pipe.execute()
        except RedisError as e:
            raise StoreUnavailable(f"redis session write failed: {e}") from e
        return token

    async def get(self, token: str) -> Optional[Session]:
        try:
            stored = await self._redis.hgetall(self._key(token))
        except RedisError as e:
            raise StoreUnavailable(f"redis session read failed: {e}") from e
        if not stored or "user_id" not in stored:
            return None
        role = "administrator" if stored.get("role") == "administrator" else "subscriber"
        return Session(user_id=stored["user_id"], role=role)

    async def revoke(self, token: str) -> None:
        try:
            await self._redis.delete(self._key(token))
        except RedisError as e:
            raise StoreUnavailable(f"redis session delete failed: {e}") from e
