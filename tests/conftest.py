import pytest

from gatekeeper.domain.code_generator import CodeGenerator
from gatekeeper.domain.entities import User
from gatekeeper.domain.rate_limiter import RateLimiter
from tests.fakes import (
    GOOD_PASSWORD,
    FakeClock,
    FakeExpiringStore,
    FakeMailer,
    FakeResetTokens,
    FakeSessions,
    FakeUoW,
    FakeUserRepo,
)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    return FakeExpiringStore(clock)


@pytest.fixture()
def rate_limiter(store, clock):
    return RateLimiter(store, clock=clock)


@pytest.fixture()
def codes(store):
    return CodeGenerator(store)


@pytest.fixture()
def repo():
    return FakeUserRepo()


@pytest.fixture()
def uow(repo):
    return FakeUoW(repo)


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest.fixture()
def sessions():
    return FakeSessions()


@pytest.fixture()
def reset_tokens():
    return FakeResetTokens()


@pytest.fixture()
def hash_password_stub():
    return lambda p, **_: "hashed-" + p


@pytest.fixture()
def verify_password_stub():
    return lambda plain, hashed: hashed == "hashed-" + plain


@pytest.fixture()
def fixed_code(monkeypatch):
    """Make generated verification codes deterministic."""
    from gatekeeper.domain import services as domain_services

    monkeypatch.setattr(domain_services, "generate_code", lambda: "123456")
    return "123456"


@pytest.fixture()
def active_user(repo) -> User:
    return repo.add(
        User(
            username="alice",
            email="alice@example.com",
            first_name="Alice",
            last_name="Liddell",
            status="active",
        ),
        "hashed-" + GOOD_PASSWORD,
    )


@pytest.fixture()
def pending_user(repo) -> User:
    return repo.add(
        User(username="bob_p", email="bob@example.com", first_name="Bob", last_name="P"),
        "hashed-" + GOOD_PASSWORD,
    )
