"""HttpSimApi: SimApiPort over the SIM-management REST API.

Every response is wrapped in an envelope {success, messages, data}; a
non-2xx status or success=false raises UpstreamError.
"""

import logging
from typing import Any, Optional

import httpx

from domain.errors import UpstreamError
from domain.sims import SimDetail, SimSummary
from ports.sim_api import SimApiPort

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.s-imsy.com/api/v1"
DEFAULT_TIMEOUT = 15.0


def _nested(data: dict, outer: str, inner: str) -> Any:
    value = data.get(outer)
    return value.get(inner) if isinstance(value, dict) else None


def _usage(data: dict, field: str) -> float:
    value = data.get(field)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise UpstreamError(f"API returned a non-numeric {field}: {value!r}")
    return value


class HttpSimApi(SimApiPort):
    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(method, url, headers=self._headers, json=json)
        except httpx.HTTPError as e:
            logger.error(f"SIM API {method} {path} failed: {e}")
            raise UpstreamError(f"API request failed: {e}") from e

        if response.is_error:
            logger.warning(f"SIM API {method} {path} returned {response.status_code}")
            raise UpstreamError(
                f"API request failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError("API returned a non-JSON response") from e

        if not isinstance(body, dict):
            raise UpstreamError("API returned an unexpected response shape")
        if body.get("success") is False:
            raise UpstreamError(", ".join(body.get("messages") or ["API reported failure"]))
        return body

    async def list_sims(self) -> tuple[list[SimSummary], int]:
        body = await self._request("GET", "/endpoints")
        items = body.get("data") or []
        if not isinstance(items, list):
            raise UpstreamError("API returned an unexpected SIM list")
        sims = [
            SimSummary(
                id=str(item.get("id")),
                name=item.get("name"),
                status=_nested(item, "endpointNetworkStatus", "name"),
            )
            for item in items
            if isinstance(item, dict) and isinstance(item.get("name"), str)
        ]
        return sims, body.get("totalItems", len(sims))

    async def get_sim(self, sim_id: str) -> SimDetail:
        body = await self._request("GET", f"/endpoints/{sim_id}")
        data = body.get("data") or {}
        if not isinstance(data, dict):
            raise UpstreamError("API returned an unexpected SIM record")
        return SimDetail(
            latest_activity=data.get("latestActivity"),
            endpoint_active=_nested(data, "endpointStatus", "active"),
            network_active=_nested(data, "endpointNetworkStatus", "active"),
            latest_rat_type=_nested(data, "latestRatType", "name"),
            latest_serving_operator=data.get("latestServingOperatorDescription"),
            latest_country_name=data.get("latestCountryName"),
            usage_rolling_24h=_usage(data, "usageRolling24H"),
            usage_rolling_7d=_usage(data, "usageRolling7D"),
            usage_rolling_28d=_usage(data, "usageRolling28D"),
        )

    async def send_sms(self, sim_id: str, payload_text: str) -> dict:
        return await self._request(
            "POST",
            f"/endpoints/{sim_id}/sms",
            json={"payloadText": payload_text, "protocolId": 0, "dataCodingScheme": 0},
        )

    async def close(self) -> None:
        await self._client.aclose()
