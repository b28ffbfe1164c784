"""SimToolsUseCase: named tools exposed to the calling agent.

Tools address SIMs by name; names are resolved to ids through the SIM list
on every call. Upstream failures come back as error-text results so the
agent sees what went wrong instead of a bare 5xx.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from domain.errors import UnknownToolError, UpstreamError
from domain.sims import SimSummary
from ports.sim_api import SimApiPort

logger = logging.getLogger(__name__)


@dataclass
class ToolSpec:
    name: str
    description: str
    params: dict[str, str] = field(default_factory=dict)
    error_prefix: str = "Error"


@dataclass
class ToolResult:
    text: str
    is_error: bool = False


class SimNotFoundError(UpstreamError):
    pass


TOOLS = [
    ToolSpec(
        name="getSims",
        description="Get a list of all SIMs with their basic information",
        error_prefix="Error retrieving SIM information",
    ),
    ToolSpec(
        name="getSimInfo",
        description="Get detailed information about a specific SIM",
        params={"name": "The name of the SIM to get information for"},
        error_prefix="Error retrieving SIM information",
    ),
    ToolSpec(
        name="sendSms",
        description="Send an SMS message to a SIM card",
        params={
            "name": "The name of the SIM to send the SMS to",
            "payloadText": "The SMS message to send",
        },
        error_prefix="Error sending SMS",
    ),
]


class SimToolsUseCase:
    def __init__(self, sim_api: SimApiPort):
        self._api = sim_api
        self._specs = {spec.name: spec for spec in TOOLS}
        self._handlers: dict[str, Callable[[dict], Awaitable[str]]] = {
            "getSims": self._get_sims,
            "getSimInfo": self._get_sim_info,
            "sendSms": self._send_sms,
        }

    def list_tools(self) -> list[ToolSpec]:
        return list(self._specs.values())

    async def call(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        spec = self._specs.get(name)
        if spec is None:
            raise UnknownToolError(name)

        missing = [p for p in spec.params if not isinstance(arguments.get(p), str)]
        if missing:
            return ToolResult(f"{spec.error_prefix}: missing argument(s): {', '.join(missing)}", is_error=True)

        try:
            return ToolResult(await self._handlers[name](arguments))
        except UpstreamError as e:
            logger.warning(f"Tool {name} failed: {e}")
            return ToolResult(f"{spec.error_prefix}: {e}", is_error=True)

    async def _resolve(self, name: str) -> SimSummary:
        sims, _ = await self._api.list_sims()
        for sim in sims:
            if sim.name == name:
                return sim
        available = ", ".join(s.name for s in sims)
        raise SimNotFoundError(f"No SIM found with name: {name}. Available SIM names: {available}")

    async def _get_sims(self, arguments: dict) -> str:
        sims, total = await self._api.list_sims()
        details = json.dumps([s.as_dict() for s in sims], indent=2)
        return f"Total SIMs: {total}\n\nSIM Details:\n{details}"

    async def _get_sim_info(self, arguments: dict) -> str:
        name = arguments["name"]
        sim = await self._resolve(name)
        detail = await self._api.get_sim(sim.id)
        return f"SIM Information for {name}:\n{json.dumps(detail.as_report(), indent=2)}"

    async def _send_sms(self, arguments: dict) -> str:
        name = arguments["name"]
        sim = await self._resolve(name)
        result = await self._api.send_sms(sim.id, arguments["payloadText"])
        return f"SMS sent to SIM '{name}' (ID: {sim.id}). API response: {json.dumps(result, indent=2)}"
