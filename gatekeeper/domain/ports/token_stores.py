from __future__ import annotations

from typing import Optional, Protocol

from gatekeeper.domain.entities import Role, Session


class SessionStorePort(Protocol):
    async def create(self, user_id: str, role: Role = "subscriber") -> str:
        """Open a session and return its bearer token."""

    async def get(self, token: str) -> Optional[Session]:
        """Resolve a bearer token, or None if unknown/expired."""

    async def revoke(self, token: str) -> None:
        """Close the session."""


class ResetTokenStorePort(Protocol):
    async def issue(self, email: str) -> str:
        """Return a short-lived token proving the email passed code verification."""

    async def get_email(self, token: str) -> Optional[str]:
        """Email the token was issued for, or None if unknown/expired."""

    async def revoke(self, token: str) -> None:
        """Spend the token."""
