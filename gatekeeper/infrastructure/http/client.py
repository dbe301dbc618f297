from __future__ import annotations

from typing import Optional

import httpx

_client: Optional[httpx.AsyncClient] = None

USER_AGENT = "gatekeeper/0.1"


async def open_http_client(timeout: float = 10.0) -> httpx.AsyncClient:
    """Open the AsyncClient shared by outbound calls (the mail relay)."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(
            timeout=timeout, headers={"User-Agent": USER_AGENT}
        )
    return _client


def get_http_client() -> httpx.AsyncClient:
    if _client is None:
        raise RuntimeError(
            "HTTP client not opened yet. Call open_http_client() at startup."
        )
    return _client


async def close_http_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
