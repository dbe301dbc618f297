from __future__ import annotations

from typing import Optional

from psycopg_pool import AsyncConnectionPool

from gatekeeper.settings import get_settings

_pool: Optional[AsyncConnectionPool] = None


def _with_connect_timeout(dsn: str, seconds: int) -> str:
    if "connect_timeout=" in dsn:
        return dsn
    sep = "&" if "?" in dsn else "?"
    return f"{dsn}{sep}connect_timeout={seconds}"


def get_pool() -> AsyncConnectionPool:
    """
    Create (if needed) and return the shared pool WITHOUT opening it.
    The app lifespan opens it; tests that override get_uow never do.
    """
    global _pool
    if _pool is None:
        s = get_settings()
        _pool = AsyncConnectionPool(
            _with_connect_timeout(s.database_url, s.db_connect_timeout_seconds),
            min_size=s.db_pool_min_size,
            max_size=max(s.db_pool_min_size, s.db_pool_max_size),
            timeout=5,
            open=False,
        )
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
