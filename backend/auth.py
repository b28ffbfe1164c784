"""
Abuse protection and bearer-token auth middleware for the SIM gateway.
Every request except health checks and CORS preflight is rate limited
and checked against the block list. Requests to the gateway routes
(/verify-token, /v1/) are then authenticated, and their auth outcomes
feed back into the failure counter that drives blocking.
"""

import json
import logging
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from domain.settings import SecuritySettings
from mappers import decision_to_response, error_response
from ports.key_store import KeyStorePort
from use_cases.guard_request import GuardRequestUseCase

logger = logging.getLogger(__name__)

# Paths that bypass protection and auth entirely
OPEN_PATHS = {"/health"}

# Only these paths require a token. Everything else (unknown routes, docs)
# is still rate limited and block-checked but never counts as a failed login.
AUTH_PATHS = {"/verify-token"}
AUTH_PREFIXES = ("/v1/",)

UNKNOWN_IDENTITY = "unknown"


def get_client_identity(request: Request) -> str:
    """Client IP as reported by the proxy in front of us.

    CF-Connecting-IP (Cloudflare) wins over X-Forwarded-For. Clients with
    neither share the "unknown" bucket.
    """
    client_ip = request.headers.get("cf-connecting-ip", "").strip()
    if not client_ip:
        client_ip = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
    return client_ip or UNKNOWN_IDENTITY


async def extract_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, else a "token" field in a JSON POST body."""
    auth = request.headers.get("authorization", "")
    if auth.startswith("Bearer "):
        return auth[7:].strip() or None

    if request.method == "POST":
        try:
            body = json.loads(await request.body() or b"null")
        except ValueError:
            return None
        if isinstance(body, dict) and isinstance(body.get("token"), str):
            return body["token"] or None
    return None


class SecurityMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        guard: GuardRequestUseCase,
        key_store: KeyStorePort,
        settings: SecuritySettings,
    ):
        super().__init__(app)
        self.guard = guard
        self.key_store = key_store
        self.settings = settings

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in OPEN_PATHS:
            return await call_next(request)

        # Allow OPTIONS (CORS preflight)
        if request.method == "OPTIONS":
            return await call_next(request)

        identity = get_client_identity(request)

        decision = await self.guard.evaluate(identity)
        denial = decision_to_response(decision, self.settings)
        if denial is not None:
            return denial

        if path not in AUTH_PATHS and not path.startswith(AUTH_PREFIXES):
            return await call_next(request)

        token = await extract_token(request)
        if not token:
            await self.guard.record_auth_outcome(identity, success=False)
            return error_response("No token provided", 401)

        if not self.key_store.validate(token):
            logger.warning(f"Invalid token from {identity}")
            await self.guard.record_auth_outcome(identity, success=False)
            return error_response("Invalid token", 401)

        await self.guard.record_auth_outcome(identity, success=True)
        return await call_next(request)
