"""Tests for the fixed-window rate limiter."""

import json

from adapters.kv.rate_limiter import KVFixedWindowRateLimiter
from adapters.local.memory_kv_store import InMemoryKeyValueStore
from domain.errors import StoreUnavailableError
from domain.models import rate_limit_key
from domain.settings import SecuritySettings
from conftest import UnavailableStore


async def test_first_twenty_requests_pass_and_twenty_first_is_limited(rate_limiter):
    for _ in range(20):
        result = await rate_limiter.check("1.2.3.4")
        assert not result.limited
        assert result.retry_after is None

    result = await rate_limiter.check("1.2.3.4")
    assert result.limited
    assert 0 <= result.retry_after <= 60


async def test_retry_after_counts_down_and_never_goes_negative(rate_limiter, clock):
    for _ in range(20):
        await rate_limiter.check("1.2.3.4")

    seen = []
    for _ in range(5):
        clock.advance(2)
        result = await rate_limiter.check("1.2.3.4")
        assert result.limited
        seen.append(result.retry_after)

    assert seen == sorted(seen, reverse=True)
    assert seen[0] == 58
    assert all(value >= 0 for value in seen)


async def test_new_window_opens_after_window_elapses(rate_limiter, store, clock):
    for _ in range(21):
        await rate_limiter.check("1.2.3.4")

    clock.advance(60)
    result = await rate_limiter.check("1.2.3.4")
    assert not result.limited

    stored = json.loads(await store.get(rate_limit_key("1.2.3.4")))
    assert stored == {"count": 1, "windowStart": int(clock.now)}


async def test_limited_request_does_not_increment_count(rate_limiter, store):
    for _ in range(25):
        await rate_limiter.check("1.2.3.4")

    stored = json.loads(await store.get(rate_limit_key("1.2.3.4")))
    assert stored["count"] == 20


async def test_window_start_is_kept_while_counting(rate_limiter, store, clock):
    await rate_limiter.check("1.2.3.4")
    opened = int(clock.now)
    clock.advance(30)
    await rate_limiter.check("1.2.3.4")

    stored = json.loads(await store.get(rate_limit_key("1.2.3.4")))
    assert stored == {"count": 2, "windowStart": opened}


async def test_identities_are_counted_separately(rate_limiter):
    for _ in range(20):
        await rate_limiter.check("1.2.3.4")

    assert (await rate_limiter.check("1.2.3.4")).limited
    assert not (await rate_limiter.check("9.9.9.9")).limited


async def test_malformed_window_is_treated_as_absent(rate_limiter, store):
    await store.put(rate_limit_key("1.2.3.4"), "not json", 60)

    result = await rate_limiter.check("1.2.3.4")

    assert not result.limited
    assert json.loads(await store.get(rate_limit_key("1.2.3.4")))["count"] == 1


async def test_custom_thresholds(store, clock):
    limiter = KVFixedWindowRateLimiter(
        store, SecuritySettings(rate_limit_window=10, max_requests_per_window=2), clock=clock
    )

    assert not (await limiter.check("a")).limited
    assert not (await limiter.check("a")).limited
    result = await limiter.check("a")
    assert result.limited
    assert result.retry_after == 10


async def test_store_outage_fails_open_by_default(clock):
    limiter = KVFixedWindowRateLimiter(UnavailableStore(), SecuritySettings(), clock=clock)

    result = await limiter.check("1.2.3.4")

    assert not result.limited


async def test_store_outage_fails_closed_when_configured(clock):
    settings = SecuritySettings(fail_open=False)
    limiter = KVFixedWindowRateLimiter(UnavailableStore(), settings, clock=clock)

    result = await limiter.check("1.2.3.4")

    assert result.limited
    assert result.retry_after == settings.rate_limit_window


class ReadOnlyStore(InMemoryKeyValueStore):
    """Replica-style store: reads work, writes are refused."""

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        raise StoreUnavailableError("READONLY You can't write against a read only replica")


async def test_failed_write_does_not_deny_fresh_client(clock):
    limiter = KVFixedWindowRateLimiter(ReadOnlyStore(clock=clock), SecuritySettings(fail_open=False), clock=clock)

    result = await limiter.check("1.2.3.4")

    assert not result.limited
    assert result.retry_after is None


async def test_failed_write_keeps_existing_limit(clock):
    store = ReadOnlyStore(clock=clock)
    await InMemoryKeyValueStore.put(store, rate_limit_key("1.2.3.4"), json.dumps({"count": 20, "windowStart": clock()}), 60)
    limiter = KVFixedWindowRateLimiter(store, SecuritySettings(fail_open=False), clock=clock)

    result = await limiter.check("1.2.3.4")

    assert result.limited
    assert result.retry_after == 60
