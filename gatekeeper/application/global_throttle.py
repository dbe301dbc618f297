from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional

from gatekeeper.domain.rate_limiter import RateLimiter
from gatekeeper.i18n import Gettext, passthrough

logger = logging.getLogger(__name__)

GLOBAL_PREFIX = "global_rest_"
PASSTHROUGH_METHODS = frozenset({"OPTIONS"})
REJECTION_MESSAGE = "Too many requests. Please try again in {wait}."


@dataclass(frozen=True)
class ThrottleRequest:
    method: str
    route: str
    identifier: str
    privileged: bool = False
    short_circuited: bool = False


@dataclass(frozen=True)
class ThrottleRejection:
    message: str
    retry_after: int
    status_code: int = 429

    def body(self) -> dict:
        return {"success": False, "message": self.message}


class GlobalThrottle:
    """
    Coarse per-client ceiling for every request under the protected route
    prefixes, checked before any route-specific logic.

    The counter prefix folds in the window and limit, so a configuration
    change starts from fresh counters instead of inheriting stale ones.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        *,
        limit: int,
        window_seconds: int,
        route_prefixes: Iterable[str],
        gettext: Gettext = passthrough,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._limit = limit
        self._window_seconds = window_seconds
        self._route_prefixes = tuple(route_prefixes)
        self._gettext = gettext

    def build_prefix(self) -> str:
        return f"{GLOBAL_PREFIX}{self._window_seconds}_{self._limit}_"

    def is_protected_route(self, route: str) -> bool:
        return any(route.startswith(p) for p in self._route_prefixes)

    def _passes_through(self, request: ThrottleRequest) -> bool:
        return (
            request.short_circuited
            or request.method.upper() in PASSTHROUGH_METHODS
            or not self.is_protected_route(request.route)
            or request.privileged
        )

    async def check(
        self,
        request: ThrottleRequest,
        is_privileged: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> Optional[ThrottleRejection]:
        """
        None lets the request through; a rejection must be returned as-is.

        ``is_privileged`` is only awaited once the cheap pass-through checks
        have failed, so OPTIONS and unprotected requests never pay for it.
        """
        if self._passes_through(request):
            return None
        if is_privileged is not None and await is_privileged():
            return None

        prefix = self.build_prefix()
        if await self._rate_limiter.is_limited(prefix, request.identifier, self._limit):
            remaining = await self._rate_limiter.remaining_seconds(
                prefix, request.identifier
            )
            logger.info(
                "global throttle rejected request",
                extra={
                    "client": request.identifier,
                    "route": request.route,
                    "retry_after": remaining,
                },
            )
            wait = RateLimiter.format_wait(remaining, self._gettext)
            return ThrottleRejection(
                message=self._gettext(REJECTION_MESSAGE).format(wait=wait),
                retry_after=remaining,
            )

        await self._rate_limiter.increment(
            prefix, request.identifier, self._window_seconds
        )
        return None
