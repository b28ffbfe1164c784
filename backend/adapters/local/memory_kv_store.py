"""InMemoryKeyValueStore: process-local store with TTL (INFRA=local and tests)."""

import time
from typing import Callable, Optional

from ports.kv_store import KeyValueStorePort

DEFAULT_SWEEP_INTERVAL = 60


class InMemoryKeyValueStore(KeyValueStorePort):
    """Dict-backed store. Expired keys are dropped on read and by a sweep
    that runs from put() at most once per sweep_interval seconds.

    Only suitable for a single gateway process: state is not shared.
    """

    def __init__(self, clock: Callable[[], float] = time.time, sweep_interval: float = DEFAULT_SWEEP_INTERVAL):
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval
        self._data: dict[str, tuple[str, float]] = {}

    def _sweep(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._data.items() if expires_at <= now]
        for key in expired:
            del self._data[key]
        self._next_sweep = now + self._sweep_interval

    async def get(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._data[key]
            return None
        return value

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        now = self._clock()
        if now >= self._next_sweep:
            self._sweep(now)
        self._data[key] = (value, now + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data
