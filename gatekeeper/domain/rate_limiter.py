from __future__ import annotations

import logging
import math
import time
from typing import Callable, Optional

from gatekeeper.domain.errors import InvalidArgument, StoreUnavailable
from gatekeeper.domain.ports.expiring_store import ExpiringStorePort
from gatekeeper.domain.services import store_key
from gatekeeper.i18n import Gettext, passthrough

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "0.0.0.0"


def _require_str(name: str, value: object) -> None:
    if not isinstance(value, str):
        raise InvalidArgument(f"{name} must be a string")


def _require_positive_int(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgument(f"{name} must be a positive integer")


class RateLimiter:
    """
    Attempt counters per (prefix, identifier) on top of an expiring store.

    Every increment rewrites the counter with a full window from "now", so the
    window rolls forward with the most recent attempt. A burst near the end of
    a window therefore extends how long the identifier stays blocked.

    Counters are read-then-write: two concurrent increments can both read N
    and both write N + 1. The limiter is an abuse deterrent, not a quota.

    A store outage never blocks anyone: reads fall back to "no attempts".
    """

    def __init__(
        self,
        store: ExpiringStorePort,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._clock = clock

    async def _count(self, key: str) -> int:
        raw = await self._store.get(key)
        if raw is None:
            return 0
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("rate counter is not an integer", extra={"key": key})
            return 0

    async def is_limited(self, prefix: str, identifier: str, max_attempts: int) -> bool:
        _require_str("prefix", prefix)
        _require_str("identifier", identifier)
        _require_positive_int("max_attempts", max_attempts)

        key = store_key(prefix, identifier)
        try:
            attempts = await self._count(key)
        except StoreUnavailable:
            logger.warning("rate limit check skipped, store unavailable", extra={"key": key})
            return False
        return attempts >= max_attempts

    async def increment(self, prefix: str, identifier: str, window_seconds: int) -> None:
        _require_str("prefix", prefix)
        _require_str("identifier", identifier)
        _require_positive_int("window_seconds", window_seconds)

        key = store_key(prefix, identifier)
        try:
            attempts = await self._count(key)
            await self._store.set(key, str(attempts + 1), window_seconds)
        except StoreUnavailable:
            logger.warning("rate limit increment lost, store unavailable", extra={"key": key})

    async def remaining_seconds(self, prefix: str, identifier: str) -> int:
        """Seconds until the identifier's window closes; 0 when none is open."""
        _require_str("prefix", prefix)
        _require_str("identifier", identifier)

        key = store_key(prefix, identifier)
        try:
            expires_at = await self._store.get_expiry(key)
        except StoreUnavailable:
            logger.warning("rate limit expiry unknown, store unavailable", extra={"key": key})
            return 0
        if expires_at is None:
            return 0
        return max(0, math.ceil(expires_at - self._clock()))

    @staticmethod
    def format_wait(seconds: int, gettext: Gettext = passthrough) -> str:
        """
        Human-readable wait time, e.g. "2 minute(s) and 30 second(s)".
        Each phrase goes through ``gettext`` before interpolation.
        """
        if seconds <= 0:
            return gettext("a few seconds")

        minutes, secs = divmod(int(seconds), 60)
        if minutes > 0 and secs > 0:
            return gettext("{minutes} minute(s) and {seconds} second(s)").format(
                minutes=minutes, seconds=secs
            )
        if minutes > 0:
            return gettext("{minutes} minute(s)").format(minutes=minutes)
        return gettext("{seconds} second(s)").format(seconds=secs)

    @staticmethod
    def client_identifier(host: Optional[str]) -> str:
        """Peer address from the transport layer, never empty."""
        if not host or not host.strip():
            return UNKNOWN_CLIENT
        return host.strip()
