import asyncio
import time

import pytest
from redis.asyncio import Redis

from gatekeeper.domain.code_generator import CodeGenerator
from gatekeeper.domain.errors import StoreUnavailable
from gatekeeper.domain.rate_limiter import RateLimiter
from gatekeeper.infrastructure.redis_cache.expiring_store import RedisExpiringStore


async def _flush_prefix(redis, prefix: str) -> None:
    keys = await redis.keys(f"{prefix}*")
    if keys:
        await redis.delete(*keys)


@pytest.mark.asyncio
async def test_set_get_delete_with_namespace(redis_client):
    ns = "gk:test:store:basic:"
    await _flush_prefix(redis_client, ns)
    store = RedisExpiringStore(redis_client, namespace=ns)

    await store.set("k", "v", 30)
    assert await store.get("k") == "v"
    assert await redis_client.get(f"{ns}k") == "v"

    await store.delete("k")
    assert await store.get("k") is None
    assert await store.get_expiry("k") is None


@pytest.mark.asyncio
async def test_expiry_is_absolute_epoch(redis_client):
    ns = "gk:test:store:exp:"
    await _flush_prefix(redis_client, ns)
    store = RedisExpiringStore(redis_client, namespace=ns)

    before = time.time()
    await store.set("k", "v", 120)
    expires_at = await store.get_expiry("k")
    assert before + 118 <= expires_at <= time.time() + 120


@pytest.mark.asyncio
async def test_key_without_ttl_has_no_expiry(redis_client):
    ns = "gk:test:store:persist:"
    await _flush_prefix(redis_client, ns)
    await redis_client.set(f"{ns}k", "v")

    assert await RedisExpiringStore(redis_client, namespace=ns).get_expiry("k") is None


@pytest.mark.asyncio
async def test_value_vanishes_after_ttl(redis_client):
    ns = "gk:test:store:ttl:"
    await _flush_prefix(redis_client, ns)
    store = RedisExpiringStore(redis_client, namespace=ns)

    await store.set("k", "v", 1)
    await asyncio.sleep(1.5)
    assert await store.get("k") is None


@pytest.mark.asyncio
async def test_limiter_and_codes_on_redis(redis_client):
    ns = "gk:test:store:e2e:"
    await _flush_prefix(redis_client, ns)
    store = RedisExpiringStore(redis_client, namespace=ns)
    limiter, codes = RateLimiter(store), CodeGenerator(store)

    for _ in range(5):
        await limiter.increment("login_", "1.2.3.4", 300)
    assert await limiter.is_limited("login_", "1.2.3.4", 5)
    assert 0 < await limiter.remaining_seconds("login_", "1.2.3.4") <= 300

    await codes.store_code("activate_", "user@example.com", "042918", 600)
    assert await codes.verify_code("activate_", "user@example.com", "042918")
    assert not await codes.verify_code("activate_", "user@example.com", "000000")


@pytest.mark.asyncio
async def test_unreachable_redis_raises_store_unavailable():
    dead = Redis.from_url(
        "redis://127.0.0.1:1/0", decode_responses=True, socket_connect_timeout=0.2
    )
    store = RedisExpiringStore(dead)
    try:
        with pytest.raises(StoreUnavailable):
            await store.get("k")
        # the limiter degrades instead of failing the request
        assert await RateLimiter(store).is_limited("p_", "id", 1) is False
    finally:
        await dead.aclose()
