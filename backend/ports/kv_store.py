"""KeyValueStorePort: abstract interface for the durable store behind the protection layer."""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorePort(ABC):
    """String-valued store with per-key TTL.

    Implementations raise StoreUnavailableError when an operation cannot be
    completed, so callers only ever need to handle one exception type.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if absent or expired."""

    @abstractmethod
    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store value under key; the store reclaims it after ttl_seconds."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key. Deleting an absent key is not an error."""

    async def close(self) -> None:
        """Release connections held by the store."""
