"""SimApiPort: abstract interface for the remote SIM-management API."""

from abc import ABC, abstractmethod

from domain.sims import SimDetail, SimSummary


class SimApiPort(ABC):
    @abstractmethod
    async def list_sims(self) -> tuple[list[SimSummary], int]:
        """Return (sims, total_items)."""

    @abstractmethod
    async def get_sim(self, sim_id: str) -> SimDetail:
        """Return detailed information for one SIM."""

    @abstractmethod
    async def send_sms(self, sim_id: str, payload_text: str) -> dict:
        """Send an SMS to a SIM. Returns the raw API response."""

    async def close(self) -> None:
        """Release connections held by the client."""
