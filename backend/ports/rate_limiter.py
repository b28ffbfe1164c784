"""RateLimiterPort: abstract interface for request rate limiting."""

from abc import ABC, abstractmethod

from domain.models import RateLimitResult


class RateLimiterPort(ABC):
    @abstractmethod
    async def check(self, identity: str) -> RateLimitResult:
        """Count one request for identity and report whether it is over the limit."""
