"""SecuritySettings: immutable thresholds for the protection layer.

Passed into every protection component at construction so tests can run
with their own thresholds.
"""

from dataclasses import dataclass

DEFAULT_BLOCK_REASON = "Too many failed token attempts"
STORE_UNAVAILABLE_REASON = "Protection store unavailable"


@dataclass(frozen=True)
class SecuritySettings:
    rate_limit_window: int = 60
    max_requests_per_window: int = 20
    block_duration: int = 3600
    max_failed_attempts: int = 20
    # How long a failure streak survives without new failures
    failed_attempts_ttl: int = 3600
    fail_open: bool = True
    block_reason: str = DEFAULT_BLOCK_REASON

    def __post_init__(self):
        for name in ("rate_limit_window", "max_requests_per_window", "block_duration",
                     "max_failed_attempts", "failed_attempts_ttl"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
