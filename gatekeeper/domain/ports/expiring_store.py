from typing import Optional, Protocol


class ExpiringStorePort(Protocol):
    """
    Shared key-value store whose entries vanish after a TTL.

    Implementations raise StoreUnavailable when the backend cannot be reached;
    an absent or expired key is simply None.
    """

    async def get(self, key: str) -> Optional[str]:
        """Current value, or None if absent/expired."""

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store/replace the value with TTL=ttl_seconds from now."""

    async def delete(self, key: str) -> None:
        """Remove the key regardless of its expiry."""

    async def get_expiry(self, key: str) -> Optional[float]:
        """Absolute expiry as epoch seconds, or None if absent/persistent."""
