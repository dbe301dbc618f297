from contextlib import asynccontextmanager

from fastapi import FastAPI

from gatekeeper.i18n import load_translations
from gatekeeper.infrastructure.db.pool import close_pool, get_pool
from gatekeeper.infrastructure.email.http_mailer import HttpMailer
from gatekeeper.infrastructure.http.client import (
    close_http_client,
    get_http_client,
    open_http_client,
)
from gatekeeper.infrastructure.redis_cache.pool import close_redis, get_redis
from gatekeeper.logging import setup_logging
from gatekeeper.presentation.api import api
from gatekeeper.presentation.errors import register_exception_handlers
from gatekeeper.presentation.middleware.throttle import GlobalThrottleMiddleware
from gatekeeper.settings import get_settings

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    pool = get_pool()
    if not getattr(pool, "is_open", False):
        await pool.open()

    await open_http_client(timeout=settings.mail_timeout_seconds)

    get_redis()

    # One mailer for the app, sharing the HTTP client
    mailer = HttpMailer(base_url=settings.smtp_base_url, client=get_http_client())
    app.state.mailer = mailer

    try:
        yield
    finally:
        # shutdown
        await mailer.aclose()  # it won't close the shared client
        await close_http_client()
        await close_redis()
        await close_pool()


def create_app() -> FastAPI:
    setup_logging(settings.log_level, app_env=settings.app_env)
    app = FastAPI(title="Gatekeeper API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.translations = load_translations(settings.locale_dir, settings.language)
    app.add_middleware(GlobalThrottleMiddleware)
    register_exception_handlers(app)
    app.include_router(api)
    return app


app = create_app()
