"""KVFixedWindowRateLimiter: fixed-window request counter kept in a KeyValueStorePort.

Each identity owns one RateWindow record. A window opens on the first request
and admits max_requests_per_window requests until rate_limit_window seconds
have passed since it opened. A burst straddling a window boundary can get up
to twice the limit through; only the sustained rate is bounded.

The read and the write are separate store calls. Two concurrent requests can
read the same count and both write count + 1, losing one increment. That can
only make the limiter more permissive, never stricter than configured.
"""

import logging
import time
from typing import Callable, Optional

from domain.errors import MalformedRecordError, StoreUnavailableError
from domain.models import RateLimitResult, RateWindow, rate_limit_key
from domain.settings import SecuritySettings
from ports.kv_store import KeyValueStorePort
from ports.rate_limiter import RateLimiterPort

logger = logging.getLogger(__name__)


class KVFixedWindowRateLimiter(RateLimiterPort):
    def __init__(
        self,
        store: KeyValueStorePort,
        settings: SecuritySettings,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._settings = settings
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    async def _load(self, key: str) -> Optional[RateWindow]:
        raw = await self._store.get(key)
        if raw is None:
            return None
        try:
            return RateWindow.from_json(raw)
        except MalformedRecordError as e:
            logger.warning(f"Ignoring malformed rate window {key}: {e}")
            return None

    async def check(self, identity: str) -> RateLimitResult:
        key = rate_limit_key(identity)
        window = self._settings.rate_limit_window
        now = self._now()

        try:
            current = await self._load(key)
        except StoreUnavailableError as e:
            if self._settings.fail_open:
                logger.warning(f"Rate limit check skipped for {identity} (store unavailable): {e}")
                return RateLimitResult(limited=False)
            logger.error(f"Rate limit check failed closed for {identity}: {e}")
            return RateLimitResult(limited=True, retry_after=window)

        if current is None or now - current.window_start >= window:
            await self._save(key, RateWindow(count=1, window_start=now))
            return RateLimitResult(limited=False)

        if current.count >= self._settings.max_requests_per_window:
            retry_after = max(0, current.window_start + window - now)
            return RateLimitResult(limited=True, retry_after=retry_after)

        await self._save(key, RateWindow(count=current.count + 1, window_start=current.window_start))
        return RateLimitResult(limited=False)

    async def _save(self, key: str, window: RateWindow) -> None:
        # A lost write only under-counts; the decision already made stands
        try:
            await self._store.put(key, window.to_json(), self._settings.rate_limit_window)
        except StoreUnavailableError as e:
            logger.warning(f"Could not update rate window {key}: {e}")
