# tests/integration/conftest.py
import os

import pytest
import pytest_asyncio
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError

from tests.integration.db_fixtures import pool  # noqa: F401

REDIS_URL = os.environ.get("REDIS_URL", "redis://redis:6379/0")


@pytest_asyncio.fixture
async def redis_client():
    r = Redis.from_url(REDIS_URL, encoding="utf-8", decode_responses=True)
    try:
        await r.ping()
    except (RedisConnectionError, OSError):
        await r.aclose()
        pytest.skip(f"redis not reachable at {REDIS_URL}")
    try:
        yield r
    finally:
        await r.aclose()

