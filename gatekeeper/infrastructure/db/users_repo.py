from __future__ import annotations

from typing import Any, Optional

import psycopg

from gatekeeper.domain.entities import User
from gatekeeper.domain.errors import UserAlreadyExists
from gatekeeper.domain.ports.user_repository import UserRepositoryPort

_COLUMNS = "id, username, email, first_name, last_name, role, status"


def _row_to_user(row: tuple[Any, ...]) -> User:
    uid, username, email, first_name, last_name, role, status = row[:7]
    return User(
        id=str(uid),
        username=str(username),
        email=str(email),
        first_name=first_name or "",
        last_name=last_name or "",
        role=role,
        status=status,
    )


class PgUserRepository(UserRepositoryPort):
    """
    Postgres implementation of UserRepositoryPort.

    NOTE:
    - Constructed with an *active async connection* supplied by the UoW.
    - It does not commit; the UnitOfWork controls the transaction boundary.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def _fetch_with_hash(
        self, where: str, value: str
    ) -> Optional[tuple[User, str]]:
        sql = f"SELECT {_COLUMNS}, password_hash FROM users WHERE {where}"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (value,))
            row = await cur.fetchone()
        if not row:
            return None
        return _row_to_user(row), row[7]

    async def create_pending(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
    ) -> User:
        sql = f"""
        INSERT INTO users (username, email, password_hash, first_name, last_name, role, status)
        VALUES (%s, LOWER(TRIM(%s)), %s, %s, %s, 'subscriber', 'pending')
        RETURNING {_COLUMNS}
        """
        try:
            async with self._conn.cursor() as cur:
                await cur.execute(
                    sql, (username, email, password_hash, first_name, last_name)
                )
                row = await cur.fetchone()
        except psycopg.errors.UniqueViolation as e:
            raise UserAlreadyExists() from e

        if not row:
            raise RuntimeError("create_pending returned no row")
        return _row_to_user(row)

    async def find_taken(self, username: str, email: str) -> tuple[bool, bool]:
        sql = """
        SELECT
          EXISTS (SELECT 1 FROM users WHERE username = %s),
          EXISTS (SELECT 1 FROM users WHERE email = LOWER(TRIM(%s)))
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (username, email))
            row = await cur.fetchone()
        return bool(row[0]), bool(row[1])

    async def get_by_email_with_hash(self, email: str) -> Optional[tuple[User, str]]:
        return await self._fetch_with_hash("email = LOWER(TRIM(%s))", email)

    async def get_by_username_with_hash(
        self, username: str
    ) -> Optional[tuple[User, str]]:
        return await self._fetch_with_hash("username = %s", username)

    async def get_by_id_with_hash(self, user_id: str) -> Optional[tuple[User, str]]:
        return await self._fetch_with_hash("id = %s", user_id)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        record = await self.get_by_id_with_hash(user_id)
        return record[0] if record else None

    async def set_active(self, user_id: str) -> None:
        async with self._conn.cursor() as cur:
            await cur.execute(
                "UPDATE users SET status = 'active' WHERE id = %s", (user_id,)
            )

    async def set_password_hash(self, user_id: str, password_hash: str) -> None:
        async with self._conn.cursor() as cur:
            await cur.execute(
                "UPDATE users SET password_hash = %s WHERE id = %s",
                (password_hash, user_id),
            )

    async def update_names(self, user_id: str, first_name: str, last_name: str) -> None:
        async with self._conn.cursor() as cur:
            await cur.execute(
                "UPDATE users SET first_name = %s, last_name = %s WHERE id = %s",
                (first_name, last_name, user_id),
            )
