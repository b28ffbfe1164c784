"""GuardRequestUseCase: decides allow/deny for a request and records auth outcomes.

Accepts the rate limiter and blocker via dependency injection. Holds no state
of its own: everything lives in the store behind the ports.
"""

import asyncio
import logging

from domain.models import SecurityDecision
from ports.blocker import BlockerPort
from ports.rate_limiter import RateLimiterPort

logger = logging.getLogger(__name__)


class GuardRequestUseCase:
    def __init__(self, rate_limiter: RateLimiterPort, blocker: BlockerPort):
        self._rate_limiter = rate_limiter
        self._blocker = blocker

    async def evaluate(self, identity: str) -> SecurityDecision:
        """Run both checks and combine them. Neither check is skipped on the other's result."""
        rate_limit, block = await asyncio.gather(
            self._rate_limiter.check(identity),
            self._blocker.check(identity),
        )
        decision = SecurityDecision(rate_limit=rate_limit, block=block)
        if decision.blocked:
            logger.warning(f"Denied {identity}: blocked ({block.reason})")
        elif decision.rate_limited:
            logger.warning(f"Denied {identity}: rate limited, retry after {rate_limit.retry_after}s")
        return decision

    async def record_auth_outcome(self, identity: str, success: bool) -> None:
        if success:
            await self._blocker.reset_failed_attempts(identity)
        else:
            logger.info(f"Failed authentication from {identity}")
            await self._blocker.track_failed_attempt(identity)
