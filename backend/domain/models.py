"""Framework-agnostic domain models for the SIM gateway protection layer.

Stored records (RateWindow, FailureCounter, Block) are serialized as flat JSON
objects in the key-value store. Decisions (RateLimitResult, BlockStatus,
SecurityDecision) never leave the process.
"""

import json
from dataclasses import dataclass, field
from typing import Optional

from domain.errors import MalformedRecordError

RATE_LIMIT_PREFIX = "rate_limit"
FAILED_ATTEMPTS_PREFIX = "failed_attempts"
BLOCK_PREFIX = "block"


def rate_limit_key(identity: str) -> str:
    return f"{RATE_LIMIT_PREFIX}:{identity}"


def failed_attempts_key(identity: str) -> str:
    return f"{FAILED_ATTEMPTS_PREFIX}:{identity}"


def block_key(identity: str) -> str:
    return f"{BLOCK_PREFIX}:{identity}"


def _load_object(raw: str) -> dict:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedRecordError(f"Not valid JSON: {raw!r}") from e
    if not isinstance(data, dict):
        raise MalformedRecordError(f"Expected a JSON object, got {raw!r}")
    return data


def _require_int(data: dict, name: str) -> int:
    value = data.get(name)
    # bool is an int subclass; a stored true/false is not a count
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedRecordError(f"Field {name!r} must be an integer, got {value!r}")
    return value


@dataclass
class RateWindow:
    """Request count inside the fixed window that opened at window_start."""
    count: int
    window_start: int

    def to_json(self) -> str:
        return json.dumps({"count": self.count, "windowStart": self.window_start})

    @classmethod
    def from_json(cls, raw: str) -> "RateWindow":
        data = _load_object(raw)
        return cls(count=_require_int(data, "count"), window_start=_require_int(data, "windowStart"))


@dataclass
class FailureCounter:
    """Consecutive authentication failures for one identity."""
    count: int = 0

    def to_json(self) -> str:
        return json.dumps({"count": self.count})

    @classmethod
    def from_json(cls, raw: str) -> "FailureCounter":
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise MalformedRecordError(f"Not valid JSON: {raw!r}") from e
        # Older writers stored the bare number
        if isinstance(data, int) and not isinstance(data, bool):
            return cls(count=data)
        if not isinstance(data, dict):
            raise MalformedRecordError(f"Expected a JSON object, got {raw!r}")
        return cls(count=_require_int(data, "count"))


@dataclass
class Block:
    """An identity denied outright until blocked_until (exclusive)."""
    blocked_until: int
    reason: str

    def is_active(self, now: int) -> bool:
        return self.blocked_until > now

    def to_json(self) -> str:
        return json.dumps({"blockedUntil": self.blocked_until, "reason": self.reason})

    @classmethod
    def from_json(cls, raw: str) -> "Block":
        data = _load_object(raw)
        reason = data.get("reason")
        if not isinstance(reason, str):
            raise MalformedRecordError(f"Field 'reason' must be a string, got {reason!r}")
        return cls(blocked_until=_require_int(data, "blockedUntil"), reason=reason)


@dataclass(frozen=True)
class RateLimitResult:
    limited: bool
    retry_after: Optional[int] = None


@dataclass(frozen=True)
class BlockStatus:
    blocked: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class SecurityDecision:
    """Combined outcome of the rate-limit and block checks for one request.

    A block outranks a rate limit: the client has to wait out the block
    whatever its request rate is.
    """
    rate_limit: RateLimitResult = field(default_factory=lambda: RateLimitResult(limited=False))
    block: BlockStatus = field(default_factory=lambda: BlockStatus(blocked=False))

    @property
    def denied(self) -> bool:
        return self.block.blocked or self.rate_limit.limited

    @property
    def blocked(self) -> bool:
        return self.block.blocked

    @property
    def rate_limited(self) -> bool:
        return self.rate_limit.limited and not self.block.blocked
