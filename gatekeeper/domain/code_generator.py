from __future__ import annotations

import logging

from gatekeeper.domain import services as domain_services
from gatekeeper.domain.errors import InvalidArgument, StoreUnavailable
from gatekeeper.domain.ports.expiring_store import ExpiringStorePort

logger = logging.getLogger(__name__)


class CodeGenerator:
    """
    Issues short numeric verification codes and keeps one active code per
    (prefix, subject) in the expiring store.

    Codes are digits only so they can be typed on a phone keypad; the small
    keyspace is only acceptable because every verification endpoint is also
    rate limited.
    """

    def __init__(self, store: ExpiringStorePort) -> None:
        self._store = store

    @staticmethod
    def generate_code() -> str:
        return domain_services.generate_code()

    async def store_code(
        self, prefix: str, subject_key: str, code: str, ttl_seconds: int
    ) -> None:
        """Store/replace the subject's code. Store errors propagate."""
        if not isinstance(prefix, str):
            raise InvalidArgument("prefix must be a string")
        if not isinstance(subject_key, str) or not subject_key:
            raise InvalidArgument("subject_key must be a non-empty string")
        if not domain_services.is_well_formed_code(code):
            raise InvalidArgument("code must be a 6-digit string")
        if isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, int) or ttl_seconds <= 0:
            raise InvalidArgument("ttl_seconds must be a positive integer")

        await self._store.set(
            domain_services.store_key(prefix, subject_key), code, ttl_seconds
        )

    async def verify_code(self, prefix: str, subject_key: str, candidate: str) -> bool:
        """
        True if ``candidate`` equals the stored code. Never deletes; callers
        decide when a code is spent and call delete_code().
        """
        if not isinstance(prefix, str) or not isinstance(subject_key, str):
            raise InvalidArgument("prefix and subject_key must be strings")
        if not isinstance(candidate, str):
            raise InvalidArgument("candidate must be a string")

        key = domain_services.store_key(prefix, subject_key)
        try:
            stored = await self._store.get(key)
        except StoreUnavailable:
            logger.warning("code check failed, store unavailable", extra={"key": key})
            return False
        if stored is None:
            return False
        return domain_services.secure_compare(stored, candidate)

    async def delete_code(self, prefix: str, subject_key: str) -> None:
        if not isinstance(prefix, str) or not isinstance(subject_key, str):
            raise InvalidArgument("prefix and subject_key must be strings")

        key = domain_services.store_key(prefix, subject_key)
        try:
            await self._store.delete(key)
        except StoreUnavailable:
            # the code stays valid until its TTL runs out
            logger.warning("code not deleted, store unavailable", extra={"key": key})
