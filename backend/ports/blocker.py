"""BlockerPort: abstract interface for failure-triggered identity blocking."""

from abc import ABC, abstractmethod

from domain.models import BlockStatus


class BlockerPort(ABC):
    @abstractmethod
    async def check(self, identity: str) -> BlockStatus:
        """Return whether identity is currently blocked, and why."""

    @abstractmethod
    async def track_failed_attempt(self, identity: str) -> None:
        """Record one authentication failure; block identity once the threshold is hit."""

    @abstractmethod
    async def reset_failed_attempts(self, identity: str) -> None:
        """Forget the failure streak after a successful authentication."""
