"""FastAPI application factory for the SIM gateway."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from auth import SecurityMiddleware
from config import Config, create_infra_adapters, get_config
from domain.errors import UnknownToolError
from domain.settings import SecuritySettings
from mappers import result_to_dto, tool_to_dto
from models import HealthResponse, ToolCallRequest, ToolCallResponse, ToolList, VerifyTokenResponse
from use_cases.guard_request import GuardRequestUseCase
from use_cases.sim_tools import SimToolsUseCase

logger = logging.getLogger(__name__)

CORS_HEADERS = ["Content-Type", "Authorization", "MCP-Protocol-Version", "MCP-Session-Id"]


def create_app(
    cfg: Optional[Config] = None,
    adapters: Optional[dict] = None,
    settings: Optional[SecuritySettings] = None,
) -> FastAPI:
    cfg = cfg or get_config()
    adapters = adapters or create_infra_adapters(cfg)
    settings = settings or cfg.security

    guard = GuardRequestUseCase(adapters["rate_limiter"], adapters["blocker"])
    tools = SimToolsUseCase(adapters["sim_api"])

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Gateway config: {cfg.as_dict()}")
        yield
        try:
            await adapters["sim_api"].close()
        finally:
            await adapters["store"].close()

    app = FastAPI(title="SIM Gateway", version="1.0.0", lifespan=lifespan)

    app.add_middleware(SecurityMiddleware, guard=guard, key_store=adapters["key_store"], settings=settings)
    # Outermost: preflight answers never reach the guard
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=CORS_HEADERS,
    )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse()

    @app.post("/verify-token", response_model=VerifyTokenResponse)
    async def verify_token():
        # Reaching the route means the middleware accepted the token
        return VerifyTokenResponse(valid=True)

    @app.get("/v1/tools", response_model=ToolList)
    async def list_tools():
        return ToolList(tools=[tool_to_dto(spec) for spec in tools.list_tools()])

    @app.post("/v1/tools/{name}", response_model=ToolCallResponse)
    async def call_tool(name: str, body: Optional[ToolCallRequest] = None):
        arguments = body.arguments if body else {}
        try:
            result = await tools.call(name, arguments)
        except UnknownToolError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return result_to_dto(result)

    return app
