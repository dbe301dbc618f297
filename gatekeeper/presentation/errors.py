"""Renders errors as the ``{success, message, data}`` envelope."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gatekeeper.domain.errors import (
    AccountInactive,
    DomainError,
    InvalidArgument,
    RateLimited,
    StoreUnavailable,
)
from gatekeeper.domain.rate_limiter import RateLimiter
from gatekeeper.presentation.dependencies import get_gettext, resolve

logger = logging.getLogger(__name__)


def _envelope(message: str, data: dict | None = None) -> dict:
    body = {"success": False, "message": message}
    if data is not None:
        body["data"] = data
    return body


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    gettext = resolve(request, get_gettext)(request)
    message = gettext(exc.message)
    headers = None
    data = None

    if isinstance(exc, RateLimited):
        wait = RateLimiter.format_wait(exc.remaining_seconds, gettext)
        message = message.format(wait=wait)
        headers = {"Retry-After": str(exc.remaining_seconds)}
    elif isinstance(exc, AccountInactive):
        data = {"requires_activation": True, "email": exc.email}
    elif isinstance(exc, StoreUnavailable):
        logger.warning(
            "store unavailable", extra={"path": request.url.path, "detail": exc.detail}
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(message, data),
        headers=headers,
    )


async def invalid_argument_handler(request: Request, exc: InvalidArgument) -> JSONResponse:
    """A broken precondition is a bug; details stay in the log."""
    logger.error("invalid argument: %s", exc, exc_info=exc)
    gettext = resolve(request, get_gettext)(request)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(gettext("Internal server error.")),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Field-level validation failures, one line per field."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(x) for x in error["loc"]) if error["loc"] else "body"
        errors.append(f"{field}: {error['msg']}")

    gettext = resolve(request, get_gettext)(request)
    return JSONResponse(
        status_code=422,
        content=_envelope(gettext("Validation error."), {"errors": errors}),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled error on %s", request.url.path, exc_info=exc)
    gettext = resolve(request, get_gettext)(request)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(gettext("Internal server error.")),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidArgument, invalid_argument_handler)
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
