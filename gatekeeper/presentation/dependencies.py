from typing import Callable, Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gatekeeper.application.global_throttle import GlobalThrottle
from gatekeeper.domain.code_generator import CodeGenerator
from gatekeeper.domain.entities import Session
from gatekeeper.domain.errors import Unauthenticated
from gatekeeper.domain.ports.expiring_store import ExpiringStorePort
from gatekeeper.domain.ports.mailer import MailerPort
from gatekeeper.domain.ports.token_stores import ResetTokenStorePort, SessionStorePort
from gatekeeper.domain.ports.unit_of_work import UnitOfWorkPort
from gatekeeper.domain.rate_limiter import RateLimiter
from gatekeeper.i18n import Gettext
from gatekeeper.infrastructure.db.pool import get_pool
from gatekeeper.infrastructure.db.uow import PgUnitOfWork
from gatekeeper.infrastructure.redis_cache.expiring_store import RedisExpiringStore
from gatekeeper.infrastructure.redis_cache.pool import get_redis
from gatekeeper.infrastructure.redis_cache.reset_tokens import RedisResetTokens
from gatekeeper.infrastructure.redis_cache.sessions import RedisSessions
from gatekeeper.infrastructure.security.password import hash_password, verify_password
from gatekeeper.settings import get_settings

bearer_scheme = HTTPBearer(auto_error=False)


def get_uow() -> UnitOfWorkPort:
    return PgUnitOfWork(get_pool())


def get_expiring_store() -> ExpiringStorePort:
    return RedisExpiringStore(get_redis(), namespace=get_settings().store_namespace)


def get_rate_limiter(
    store: ExpiringStorePort = Depends(get_expiring_store),
) -> RateLimiter:
    return RateLimiter(store)


def get_code_generator(
    store: ExpiringStorePort = Depends(get_expiring_store),
) -> CodeGenerator:
    return CodeGenerator(store)


def get_sessions() -> SessionStorePort:
    settings = get_settings()
    return RedisSessions(
        get_redis(),
        key_prefix=f"{settings.store_namespace}sess:",
        ttl_seconds=settings.session_ttl_seconds,
    )


def get_reset_tokens() -> ResetTokenStorePort:
    settings = get_settings()
    return RedisResetTokens(
        get_redis(),
        key_prefix=f"{settings.store_namespace}reset:",
        ttl_seconds=settings.reset_token_ttl_seconds,
    )


def get_mailer(request: Request) -> MailerPort:
    # This is set in gatekeeper.main lifespan()
    return request.app.state.mailer


def get_gettext(request: Request) -> Gettext:
    return request.app.state.translations.gettext


def get_client_ip(request: Request) -> str:
    host = request.client.host if request.client else None
    return RateLimiter.client_identifier(host)


def get_hash_password() -> Callable[..., str]:
    return hash_password


def get_verify_password() -> Callable[[str, str], bool]:
    return verify_password


def get_email_enabled() -> bool:
    return get_settings().email_enabled


def get_activation_code_ttl_seconds() -> int:
    return get_settings().activation_code_ttl_seconds


def get_reset_code_ttl_seconds() -> int:
    return get_settings().reset_code_ttl_seconds


async def get_bearer_token(
    auth: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> str:
    if auth is None or not auth.credentials:
        raise Unauthenticated("Authentication required.")
    return auth.credentials


async def get_current_session(
    token: str = Depends(get_bearer_token),
    sessions: SessionStorePort = Depends(get_sessions),
) -> Session:
    session = await sessions.get(token)
    if session is None:
        raise Unauthenticated()
    return session


def resolve(request: Request, provider: Callable):
    """Honour app.dependency_overrides for code that runs outside a route."""
    return request.app.dependency_overrides.get(provider, provider)


def get_global_throttle(request: Request) -> GlobalThrottle:
    settings = get_settings()
    store = resolve(request, get_expiring_store)()
    return GlobalThrottle(
        RateLimiter(store),
        limit=settings.global_throttle_limit,
        window_seconds=settings.global_throttle_window_seconds,
        route_prefixes=settings.throttle_route_prefixes,
        gettext=request.app.state.translations.gettext,
    )
