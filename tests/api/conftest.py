import pytest
from fastapi.testclient import TestClient

from gatekeeper.application.global_throttle import GlobalThrottle
from gatekeeper.domain.rate_limiter import RateLimiter
from gatekeeper.main import create_app
from gatekeeper.presentation.dependencies import (
    get_expiring_store,
    get_global_throttle,
    get_hash_password,
    get_mailer,
    get_reset_tokens,
    get_sessions,
    get_uow,
    get_verify_password,
)
from tests.fakes import (
    FakeExpiringStore,
    FakeMailer,
    FakeResetTokens,
    FakeSessions,
    FakeUoW,
    FakeUserRepo,
)

PROTECTED = ("/v1/auth/", "/v1/users/")


class Deps:
    """Every fake wired into the app, for assertions."""

    def __init__(self) -> None:
        self.repo = FakeUserRepo()
        self.store = FakeExpiringStore()
        self.mailer = FakeMailer()
        self.sessions = FakeSessions()
        self.reset_tokens = FakeResetTokens()
        self.throttle_limit = 100

    def throttle(self, request) -> GlobalThrottle:
        return GlobalThrottle(
            RateLimiter(self.store),
            limit=self.throttle_limit,
            window_seconds=60,
            route_prefixes=PROTECTED,
        )


@pytest.fixture()
def deps():
    return Deps()


@pytest.fixture()
def app(deps):
    app = create_app()
    app.dependency_overrides[get_uow] = lambda: FakeUoW(deps.repo)
    app.dependency_overrides[get_expiring_store] = lambda: deps.store
    app.dependency_overrides[get_mailer] = lambda: deps.mailer
    app.dependency_overrides[get_sessions] = lambda: deps.sessions
    app.dependency_overrides[get_reset_tokens] = lambda: deps.reset_tokens
    app.dependency_overrides[get_global_throttle] = deps.throttle
    app.dependency_overrides[get_hash_password] = lambda: (lambda p, **_: "hashed-" + p)
    app.dependency_overrides[get_verify_password] = lambda: (
        lambda plain, hashed: hashed == "hashed-" + plain
    )
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app):
    return TestClient(app, raise_server_exceptions=False)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
