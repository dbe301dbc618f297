from __future__ import annotations

from types import TracebackType
from typing import Protocol, Type

from gatekeeper.domain.ports.user_repository import UserRepositoryPort


class UnitOfWorkPort(Protocol):
    """
    Transaction boundary.

    Usage:
        async with uow as tx:
            user = await tx.db_users.create_pending(username=..., email=..., ...)
            await tx.commit()
    """

    db_users: UserRepositoryPort

    async def __aenter__(self) -> "UnitOfWorkPort":
        """Begin a new transaction."""

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """End the transaction, rolling back anything not committed."""

    async def commit(self) -> None:
        """Commit the transaction."""

    async def rollback(self) -> None:
        """Rollback the transaction."""
