from __future__ import annotations

from typing import Optional

from redis.asyncio import Redis

from gatekeeper.settings import get_settings

_client: Optional[Redis] = None


def get_redis() -> Redis:
    """
    Shared client for counters, codes, sessions and reset tokens.

    Short socket timeouts make an outage surface as StoreUnavailable within a
    request instead of hanging it; the rate limiter then fails open.
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = Redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=settings.redis_socket_timeout_seconds,
            socket_connect_timeout=settings.redis_socket_timeout_seconds,
        )
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
