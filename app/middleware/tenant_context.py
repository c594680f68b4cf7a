"""Tenant context middleware.

Sets the current tenant ID in context from the verified bearer token
(falling back to the tenant header) so every log record for the request
carries it. Authorization is not decided here.
"""

from __future__ import annotations

from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.config import get_settings
from app.core.request_context import reset_tenant_id, set_tenant_id
from app.core.tenant_validation import is_valid_tenant_id_format
from app.infrastructure.security.jwt import verify_token


def _tenant_id_from_request(request: Request) -> str | None:
    """Return tenant_id from the JWT payload, else a well-formed tenant header."""
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        try:
            return verify_token(auth[7:].strip()).get("tenant_id")
        except ValueError:
            # Rejected with 401 by the auth dependency.
            pass
    header = request.headers.get(get_settings().tenant_header_name)
    if is_valid_tenant_id_format(header):
        return header
    return None


def TenantContextMiddleware(app: Callable) -> Callable:
    """Set tenant context (for logging) from token or header before route runs."""

    class _Middleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next: Callable) -> Response:
            token = set_tenant_id(_tenant_id_from_request(request))
            try:
                return await call_next(request)
            finally:
                reset_tenant_id(token)

    return _Middleware(app)
