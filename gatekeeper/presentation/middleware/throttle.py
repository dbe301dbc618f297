"""Global per-client request ceiling for the protected API routes."""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from gatekeeper.application.global_throttle import ThrottleRequest
from gatekeeper.domain.errors import StoreUnavailable
from gatekeeper.presentation.dependencies import (
    get_client_ip,
    get_global_throttle,
    get_sessions,
    resolve,
)

logger = logging.getLogger(__name__)


class GlobalThrottleMiddleware(BaseHTTPMiddleware):
    """Runs GlobalThrottle before routing; a rejection never reaches a route.

    Any middleware added after this one runs first and can set
    ``request.state.short_circuited = True`` to let a request through
    uncounted, e.g. a response already served from a cache.
    """

    async def _is_privileged(self, request: Request) -> bool:
        scheme, _, token = request.headers.get("Authorization", "").partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return False
        sessions = resolve(request, get_sessions)()
        try:
            session = await sessions.get(token.strip())
        except StoreUnavailable:
            logger.warning("session lookup failed, treating caller as anonymous")
            return False
        return session is not None and session.is_privileged

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        throttle = resolve(request, get_global_throttle)(request)
        route = request.url.path
        if not throttle.is_protected_route(route):
            return await call_next(request)

        rejection = await throttle.check(
            ThrottleRequest(
                method=request.method,
                route=route,
                identifier=resolve(request, get_client_ip)(request),
                short_circuited=getattr(request.state, "short_circuited", False),
            ),
            is_privileged=partial(self._is_privileged, request),
        )
        if rejection is not None:
            return JSONResponse(
                content=rejection.body(),
                status_code=rejection.status_code,
                headers={"Retry-After": str(rejection.retry_after)},
            )
        return await call_next(request)
