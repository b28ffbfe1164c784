"""KVFailureBlocker: failure-triggered identity blocking kept in a KeyValueStorePort.

max_failed_attempts consecutive authentication failures write a Block that
denies the identity for block_duration seconds. Only time clears a block.
The failure streak is deleted when the block is written, so a client coming
back after the block starts from zero again.
"""

import logging
import time
from typing import Callable, Optional

from domain.errors import MalformedRecordError, StoreUnavailableError
from domain.models import Block, BlockStatus, FailureCounter, block_key, failed_attempts_key
from domain.settings import STORE_UNAVAILABLE_REASON, SecuritySettings
from ports.blocker import BlockerPort
from ports.kv_store import KeyValueStorePort

logger = logging.getLogger(__name__)


class KVFailureBlocker(BlockerPort):
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

    async def _load_block(self, identity: str) -> Optional[Block]:
        key = block_key(identity)
        raw = await self._store.get(key)
        if raw is None:
            return None
        try:
            return Block.from_json(raw)
        except MalformedRecordError as e:
            logger.warning(f"Ignoring malformed block {key}: {e}")
            return None

    async def _load_failures(self, identity: str) -> FailureCounter:
        key = failed_attempts_key(identity)
        raw = await self._store.get(key)
        if raw is None:
            return FailureCounter()
        try:
            return FailureCounter.from_json(raw)
        except MalformedRecordError as e:
            logger.warning(f"Ignoring malformed failure counter {key}: {e}")
            return FailureCounter()

    async def check(self, identity: str) -> BlockStatus:
        try:
            block = await self._load_block(identity)
        except StoreUnavailableError as e:
            if self._settings.fail_open:
                logger.warning(f"Block check skipped for {identity} (store unavailable): {e}")
                return BlockStatus(blocked=False)
            logger.error(f"Block check failed closed for {identity}: {e}")
            return BlockStatus(blocked=True, reason=STORE_UNAVAILABLE_REASON)

        # The store's TTL may lag behind blocked_until; expiry is decided here
        if block is not None and block.is_active(self._now()):
            return BlockStatus(blocked=True, reason=block.reason)
        return BlockStatus(blocked=False)

    async def track_failed_attempt(self, identity: str) -> None:
        try:
            failures = await self._load_failures(identity)
            failures.count += 1

            if failures.count < self._settings.max_failed_attempts:
                await self._store.put(
                    failed_attempts_key(identity),
                    failures.to_json(),
                    self._settings.failed_attempts_ttl,
                )
                return

            block = Block(
                blocked_until=self._now() + self._settings.block_duration,
                reason=self._settings.block_reason,
            )
            await self._store.put(block_key(identity), block.to_json(), self._settings.block_duration)
            await self._store.delete(failed_attempts_key(identity))
            logger.warning(
                f"Blocked {identity} until {block.blocked_until} after {failures.count} failed attempts"
            )
        except StoreUnavailableError as e:
            logger.warning(f"Could not record failed attempt for {identity}: {e}")

    async def reset_failed_attempts(self, identity: str) -> None:
        try:
            await self._store.delete(failed_attempts_key(identity))
        except StoreUnavailableError as e:
            logger.warning(f"Could not reset failed attempts for {identity}: {e}")
