from __future__ import annotations

import time
from dataclasses import replace
from typing import Callable

from gatekeeper.domain.entities import OutgoingEmail, Role, Session, User
from gatekeeper.domain.errors import StoreUnavailable, UserAlreadyExists

GOOD_PASSWORD = "Secret#123"


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeExpiringStore:
    """In-memory ExpiringStorePort; entries expire against ``clock``."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float]] = {}
        self.failing = False

    def _check(self) -> None:
        if self.failing:
            raise StoreUnavailable("store down")

    def _live(self, key: str) -> tuple[str, float] | None:
        entry = self._data.get(key)
        if entry and entry[1] <= self._clock():
            del self._data[key]
            return None
        return entry

    def keys(self) -> list[str]:
        return [k for k in list(self._data) if self._live(k)]

    async def get(self, key: str) -> str | None:
        self._check()
        entry = self._live(key)
        return entry[0] if entry else None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._check()
        self._data[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._check()
        self._data.pop(key, None)

    async def get_expiry(self, key: str) -> float | None:
        self._check()
        entry = self._live(key)
        return entry[1] if entry else None


class FakeUserRepo:
    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.hashes: dict[str, str] = {}
        self.set_active_calls: list[str] = []
        self._next = 0

    def add(self, user: User, password_hash: str) -> User:
        if user.id is None:
            self._next += 1
            user.id = f"u{self._next}"
        self.users[user.id] = user
        self.hashes[user.id] = password_hash
        return user

    def _record(self, user: User | None) -> tuple[User, str] | None:
        if user is None:
            return None
        return replace(user), self.hashes[user.id]

    async def create_pending(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
    ) -> User:
        if any(taken for taken in await self.find_taken(username, email)):
            raise UserAlreadyExists()
        user = self.add(
            User(
                username=username,
                email=email,
                first_name=first_name,
                last_name=last_name,
            ),
            password_hash,
        )
        return replace(user)

    async def find_taken(self, username: str, email: str) -> tuple[bool, bool]:
        email = email.strip().lower()
        return (
            any(u.username == username for u in self.users.values()),
            any(u.email == email for u in self.users.values()),
        )

    async def get_by_email_with_hash(self, email: str) -> tuple[User, str] | None:
        email = email.strip().lower()
        return self._record(next((u for u in self.users.values() if u.email == email), None))

    async def get_by_username_with_hash(self, username: str) -> tuple[User, str] | None:
        return self._record(
            next((u for u in self.users.values() if u.username == username), None)
        )

    async def get_by_id_with_hash(self, user_id: str) -> tuple[User, str] | None:
        return self._record(self.users.get(user_id))

    async def get_by_id(self, user_id: str) -> User | None:
        user = self.users.get(user_id)
        return replace(user) if user else None

    async def set_active(self, user_id: str) -> None:
        self.set_active_calls.append(user_id)
        self.users[user_id].status = "active"

    async def set_password_hash(self, user_id: str, password_hash: str) -> None:
        self.hashes[user_id] = password_hash

    async def update_names(self, user_id: str, first_name: str, last_name: str) -> None:
        self.users[user_id].first_name = first_name
        self.users[user_id].last_name = last_name


class FakeUoW:
    def __init__(self, repo: FakeUserRepo | None = None) -> None:
        self.db_users = repo or FakeUserRepo()
        self.committed = False
        self.rolled_back = False

    async def __aenter__(self) -> "FakeUoW":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc:
            self.rolled_back = True

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True


class FakeMailer:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[OutgoingEmail] = []
        self.fail = fail

    async def send(self, message: OutgoingEmail) -> None:
        if self.fail:
            raise RuntimeError("mail relay down")
        self.sent.append(message)


class FakeSessions:
    def __init__(self) -> None:
        self._store: dict[str, Session] = {}
        self._next = 0
        self.failing = False
        self.lookups = 0

    def _check(self) -> None:
        if self.failing:
            raise StoreUnavailable("store down")

    async def create(self, user_id: str, role: Role = "subscriber") -> str:
        self._check()
        self._next += 1
        token = f"tok-{self._next}"
        self._store[token] = Session(user_id=user_id, role=role)
        return token

    async def get(self, token: str) -> Session | None:
        self.lookups += 1
        self._check()
        return self._store.get(token)

    async def revoke(self, token: str) -> None:
        self._check()
        self._store.pop(token, None)


class FakeResetTokens:
    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self._next = 0
        self.failing = False

    def _check(self) -> None:
        if self.failing:
            raise StoreUnavailable("store down")

    async def issue(self, email: str) -> str:
        self._check()
        self._next += 1
        token = f"reset-{self._next}"
        self._store[token] = email
        return token

    async def get_email(self, token: str) -> str | None:
        self._check()
        return self._store.get(token)

    async def revoke(self, token: str) -> None:
        self._check()
        self._store.pop(token, None)
