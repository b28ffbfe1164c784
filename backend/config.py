import os
import json
import logging
import time
from typing import Dict, List, Any

from dotenv import load_dotenv

from domain.settings import SecuritySettings

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8787
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_SIM_API_URL = "https://api.s-imsy.com/api/v1"


def _env_bool(name: str, default: bool) -> bool:
    return os.environ.get(name, str(default)).strip().lower() in ("1", "true", "yes")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    return int(value) if value else default


def _load_security_settings() -> SecuritySettings:
    defaults = SecuritySettings()
    return SecuritySettings(
        rate_limit_window=_env_int("RATE_LIMIT_WINDOW", defaults.rate_limit_window),
        max_requests_per_window=_env_int("MAX_REQUESTS_PER_WINDOW", defaults.max_requests_per_window),
        block_duration=_env_int("BLOCK_DURATION", defaults.block_duration),
        max_failed_attempts=_env_int("MAX_FAILED_ATTEMPTS", defaults.max_failed_attempts),
        failed_attempts_ttl=_env_int("FAILED_ATTEMPTS_TTL", defaults.failed_attempts_ttl),
        fail_open=_env_bool("SECURITY_FAIL_OPEN", defaults.fail_open),
    )


class Config:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        self.host = os.environ.get("HOST", DEFAULT_HOST)
        self.port = int(os.environ.get("PORT", DEFAULT_PORT))
        self.debug = os.environ.get("DEBUG", "0") == "1"
        self.infra = os.environ.get("INFRA", "local").lower()
        self.redis_url = os.environ.get("REDIS_URL", DEFAULT_REDIS_URL)
        self.sim_api_url = os.environ.get("SIM_API_URL", DEFAULT_SIM_API_URL)
        self.security = _load_security_settings()

        # MCP_CONFIG is a JSON object; its "token" is both the gateway token
        # and the upstream SIM API token unless those are set separately.
        mcp_config = json.loads(os.environ.get("MCP_CONFIG") or "{}")
        shared_token = mcp_config.get("token", "")

        tokens_env = os.environ.get("GATEWAY_TOKEN", "")
        self.gateway_tokens: List[str] = [t.strip() for t in tokens_env.split(",") if t.strip()]
        if not self.gateway_tokens and shared_token:
            self.gateway_tokens = [shared_token]
        self.sim_api_token = os.environ.get("SIM_API_TOKEN") or shared_token

    def as_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "infra": self.infra,
            "sim_api_url": self.sim_api_url,
            "gateway_tokens": len(self.gateway_tokens),
            "has_sim_api_token": bool(self.sim_api_token),
            "rate_limit_window": self.security.rate_limit_window,
            "max_requests_per_window": self.security.max_requests_per_window,
            "block_duration": self.security.block_duration,
            "max_failed_attempts": self.security.max_failed_attempts,
            "fail_open": self.security.fail_open,
        }


config = Config()


def get_config() -> Config:
    return config


def create_store(cfg: Config, clock=time.time):
    """Create the key-value store based on INFRA env var."""
    infra = cfg.infra

    if infra == "local":
        from adapters.local.memory_kv_store import InMemoryKeyValueStore
        return InMemoryKeyValueStore(clock=clock)
    if infra == "redis":
        from adapters.redis.kv_store import RedisKeyValueStore
        return RedisKeyValueStore.from_url(cfg.redis_url)
    raise ValueError(f"Unknown INFRA: {infra!r}. Valid options: local, redis")


def create_infra_adapters(cfg: Config, clock=time.time, store=None, sim_api=None):
    """Create the protection, auth and upstream adapters.

    store and sim_api may be passed in to replace the configured ones.
    """
    from adapters.kv.rate_limiter import KVFixedWindowRateLimiter
    from adapters.kv.blocker import KVFailureBlocker
    from adapters.local.static_key_store import StaticKeyStore
    from adapters.http.sim_api import HttpSimApi

    if store is None:
        store = create_store(cfg, clock=clock)
    if sim_api is None:
        sim_api = HttpSimApi(token=cfg.sim_api_token, base_url=cfg.sim_api_url)

    adapters = {
        "store": store,
        "rate_limiter": KVFixedWindowRateLimiter(store, cfg.security, clock=clock),
        "blocker": KVFailureBlocker(store, cfg.security, clock=clock),
        "key_store": StaticKeyStore(cfg.gateway_tokens),
        "sim_api": sim_api,
    }

    logger.info(f"Infra adapters: {cfg.infra} -> {', '.join(type(v).__name__ for v in adapters.values())}")
    return adapters
