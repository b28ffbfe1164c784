"""Domain <-> HTTP mappers.

Converts SecurityDecision into the denial responses sent to callers and
ToolSpec / ToolResult into their DTOs.
"""

from typing import Optional

from fastapi.responses import JSONResponse

from domain.models import SecurityDecision
from domain.settings import SecuritySettings
from models import (
    BlockedResponse, ErrorResponse, RateLimitedResponse,
    ToolCallResponse, ToolContent, ToolInfo,
)
from use_cases.sim_tools import ToolResult, ToolSpec


def decision_to_response(decision: SecurityDecision, settings: SecuritySettings) -> Optional[JSONResponse]:
    """Return the denial response for a decision, or None when the request may proceed."""
    if decision.blocked:
        retry_after = settings.block_duration
        body = BlockedResponse(reason=decision.block.reason, retryAfter=retry_after)
        return JSONResponse(
            status_code=403,
            content=body.model_dump(),
            headers={"Retry-After": str(retry_after)},
        )

    if decision.rate_limited:
        retry_after = decision.rate_limit.retry_after
        body = RateLimitedResponse(retryAfter=retry_after)
        header = retry_after if retry_after is not None else settings.rate_limit_window
        return JSONResponse(
            status_code=429,
            content=body.model_dump(),
            headers={"Retry-After": str(header)},
        )

    return None


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def tool_to_dto(spec: ToolSpec) -> ToolInfo:
    return ToolInfo(name=spec.name, description=spec.description, params=spec.params)


def result_to_dto(result: ToolResult) -> ToolCallResponse:
    return ToolCallResponse(content=[ToolContent(text=result.text)], isError=result.is_error)
