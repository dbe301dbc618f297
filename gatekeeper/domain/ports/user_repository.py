from __future__ import annotations

from typing import Optional, Protocol

from gatekeeper.domain.entities import User


class UserRepositoryPort(Protocol):
    async def create_pending(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
    ) -> User:
        """
        Insert a new 'pending' subscriber and return it.
        Raise UserAlreadyExists if the username or email is taken.
        """

    async def find_taken(self, username: str, email: str) -> tuple[bool, bool]:
        """Return (username_taken, email_taken)."""

    async def get_by_email_with_hash(self, email: str) -> Optional[tuple[User, str]]:
        """Fetch user and password hash by (normalized) email."""

    async def get_by_username_with_hash(
        self, username: str
    ) -> Optional[tuple[User, str]]:
        """Fetch user and password hash by username."""

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Fetch user by id. Return None if not found."""

    async def get_by_id_with_hash(self, user_id: str) -> Optional[tuple[User, str]]:
        """Fetch user and password hash by id."""

    async def set_active(self, user_id: str) -> None:
        """Mark user as active."""

    async def set_password_hash(self, user_id: str, password_hash: str) -> None:
        """Replace the stored password hash."""

    async def update_names(self, user_id: str, first_name: str, last_name: str) -> None:
        """Update the profile names."""
