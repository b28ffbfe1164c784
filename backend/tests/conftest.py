"""Pytest configuration and fixtures for gateway tests."""

import os

# Set test environment before importing application modules
os.environ["INFRA"] = "local"
os.environ["GATEWAY_TOKEN"] = "test-token"
os.environ["SIM_API_TOKEN"] = "upstream-token"

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from adapters.kv.blocker import KVFailureBlocker
from adapters.kv.rate_limiter import KVFixedWindowRateLimiter
from adapters.local.memory_kv_store import InMemoryKeyValueStore
from adapters.local.static_key_store import StaticKeyStore
from api import create_app
from config import get_config
from domain.errors import StoreUnavailableError, UpstreamError
from domain.settings import SecuritySettings
from domain.sims import SimDetail, SimSummary
from ports.kv_store import KeyValueStorePort
from ports.sim_api import SimApiPort
from use_cases.guard_request import GuardRequestUseCase

VALID_TOKEN = "test-token"
START = 1_700_000_000


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class UnavailableStore(KeyValueStorePort):
    """Store whose every operation fails, as during an outage."""

    def __init__(self):
        self.calls = 0

    async def get(self, key: str) -> Optional[str]:
        self.calls += 1
        raise StoreUnavailableError("connection refused")

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self.calls += 1
        raise StoreUnavailableError("connection refused")

    async def delete(self, key: str) -> None:
        self.calls += 1
        raise StoreUnavailableError("connection refused")


class FakeSimApi(SimApiPort):
    def __init__(self, sims=None, details=None, fail_with: Optional[str] = None):
        self.sims = sims if sims is not None else [
            SimSummary(id="sim-1", name="Tracker A", status="Online"),
            SimSummary(id="sim-2", name="Tracker B", status="Offline"),
        ]
        self.details = details or {}
        self.fail_with = fail_with
        self.sent: list[tuple[str, str]] = []
        self.closed = False

    def _maybe_fail(self):
        if self.fail_with:
            raise UpstreamError(self.fail_with)

    async def list_sims(self):
        self._maybe_fail()
        return list(self.sims), len(self.sims)

    async def get_sim(self, sim_id: str) -> SimDetail:
        self._maybe_fail()
        return self.details.get(sim_id, SimDetail())

    async def send_sms(self, sim_id: str, payload_text: str) -> dict:
        self._maybe_fail()
        self.sent.append((sim_id, payload_text))
        return {"success": True, "messages": [], "data": {"id": "msg-1"}}

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return SecuritySettings()


@pytest.fixture
def store(clock):
    return InMemoryKeyValueStore(clock=clock)


@pytest.fixture
def rate_limiter(store, settings, clock):
    return KVFixedWindowRateLimiter(store, settings, clock=clock)


@pytest.fixture
def blocker(store, settings, clock):
    return KVFailureBlocker(store, settings, clock=clock)


@pytest.fixture
def guard(rate_limiter, blocker):
    return GuardRequestUseCase(rate_limiter, blocker)


@pytest.fixture
def sim_api():
    return FakeSimApi()


def build_client(store, settings, clock, sim_api) -> TestClient:
    adapters = {
        "store": store,
        "rate_limiter": KVFixedWindowRateLimiter(store, settings, clock=clock),
        "blocker": KVFailureBlocker(store, settings, clock=clock),
        "key_store": StaticKeyStore([VALID_TOKEN]),
        "sim_api": sim_api,
    }
    app = create_app(get_config(), adapters=adapters, settings=settings)
    return TestClient(app)


@pytest.fixture
def client(store, settings, clock, sim_api):
    with build_client(store, settings, clock, sim_api) as test_client:
        yield test_client


def auth_headers(ip: str, token: str = VALID_TOKEN) -> dict:
    return {"Authorization": f"Bearer {token}", "CF-Connecting-IP": ip}
