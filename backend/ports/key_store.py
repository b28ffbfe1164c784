"""KeyStorePort: abstract interface for gateway bearer-token validation."""

from abc import ABC, abstractmethod


class KeyStorePort(ABC):
    @abstractmethod
    def validate(self, token: str) -> bool:
        """Return True if the token grants access to the gateway."""
