from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "healthy"


class ErrorResponse(BaseModel):
    """Generic JSON error body"""
    error: str


class BlockedResponse(BaseModel):
    """Body of a 403 for a blocked identity"""
    error: str = "IP blocked"
    reason: Optional[str] = None
    retryAfter: int


class RateLimitedResponse(BaseModel):
    """Body of a 429 for a rate-limited identity"""
    error: str = "Rate limit exceeded"
    retryAfter: Optional[int] = None


class VerifyTokenResponse(BaseModel):
    valid: bool = True


class ToolInfo(BaseModel):
    name: str
    description: str
    params: Dict[str, str] = {}


class ToolList(BaseModel):
    tools: List[ToolInfo]


class ToolCallRequest(BaseModel):
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolContent(BaseModel):
    type: str = "text"
    text: str


class ToolCallResponse(BaseModel):
    content: List[ToolContent]
    isError: bool = False
