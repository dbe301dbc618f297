from __future__ import annotations

from dataclasses import dataclass

from gatekeeper.domain.errors import RateLimited
from gatekeeper.domain.rate_limiter import RateLimiter


@dataclass(frozen=True)
class AttemptLimit:
    prefix: str
    max_attempts: int
    window_seconds: int


# Keyed by client IP
REGISTER_LIMIT = AttemptLimit("register_attempts_", 3, 3600)
VERIFY_ACTIVATION_LIMIT = AttemptLimit("verify_activation_", 5, 300)
LOGIN_LIMIT = AttemptLimit("login_attempts_", 5, 300)
VERIFY_RESET_LIMIT = AttemptLimit("verify_reset_", 5, 300)

# Keyed by email
RESEND_ACTIVATION_LIMIT = AttemptLimit("resend_activation_", 3, 3600)
FORGOT_PASSWORD_LIMIT = AttemptLimit("forgot_attempts_", 3, 3600)

ACTIVATION_CODE_PREFIX = "activation_code_"
RESET_CODE_PREFIX = "reset_code_"


async def ensure_not_limited(
    rate_limiter: RateLimiter,
    limit: AttemptLimit,
    identifier: str,
    message: str | None = None,
) -> None:
    """Raise RateLimited, carrying the wait time, once the identifier is capped."""
    if await rate_limiter.is_limited(limit.prefix, identifier, limit.max_attempts):
        remaining = await rate_limiter.remaining_seconds(limit.prefix, identifier)
        raise RateLimited(remaining, message)


async def record_attempt(
    rate_limiter: RateLimiter, limit: AttemptLimit, identifier: str
) -> None:
    await rate_limiter.increment(limit.prefix, identifier, limit.window_seconds)
