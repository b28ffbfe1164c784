"""SIM records returned by the SIM-management API, reduced to what the tools report."""

from dataclasses import asdict, dataclass
from typing import Optional

BYTES_PER_MB = 1024 * 1024


def bytes_to_mb(value: Optional[float]) -> str:
    return f"{(value or 0) / BYTES_PER_MB:.2f} MB"


@dataclass
class SimSummary:
    id: str
    name: str
    status: Optional[str] = None

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class SimDetail:
    latest_activity: Optional[str] = None
    endpoint_active: Optional[bool] = None
    network_active: Optional[bool] = None
    latest_rat_type: Optional[str] = None
    latest_serving_operator: Optional[str] = None
    latest_country_name: Optional[str] = None
    usage_rolling_24h: float = 0
    usage_rolling_7d: float = 0
    usage_rolling_28d: float = 0

    def as_report(self) -> dict:
        """Human-facing view with usage in megabytes, keyed like the upstream API."""
        return {
            "latestActivity": self.latest_activity,
            "endpointStatus": self.endpoint_active,
            "endpointNetworkStatus": self.network_active,
            "latestRatType": self.latest_rat_type,
            "latestServingOperatorDescription": self.latest_serving_operator,
            "latestCountryName": self.latest_country_name,
            "usageRolling24H": bytes_to_mb(self.usage_rolling_24h),
            "usageRolling7D": bytes_to_mb(self.usage_rolling_7d),
            "usageRolling28D": bytes_to_mb(self.usage_rolling_28d),
        }
