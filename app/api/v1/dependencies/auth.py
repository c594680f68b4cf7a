"""Caller identity dependencies (composition root).

The bearer JWT is the only source of identity: user id, tenant and role
all come from verified claims. The tenant header, when sent, must agree.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.dtos.search import PermissionContext
from app.core.config import get_settings
from app.core.tenant_validation import is_valid_tenant_id_format
from app.domain.exceptions import AuthenticationException, AuthorizationException
from app.infrastructure.security.jwt import verify_token
from app.shared.enums import UserRole

_http_bearer = HTTPBearer(auto_error=False)


async def get_permission_context(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> PermissionContext:
    """Build the PermissionContext from the JWT; 401 if missing/invalid, 403 on tenant or role mismatch."""
    if not credentials:
        raise AuthenticationException("Not authenticated")
    try:
        payload = verify_token(credentials.credentials)
    except ValueError:
        raise AuthenticationException("Invalid or expired token") from None

    tenant_id = str(payload["tenant_id"])
    if not is_valid_tenant_id_format(tenant_id):
        raise AuthenticationException("Invalid tenant claim")

    header_tenant = request.headers.get(get_settings().tenant_header_name)
    if header_tenant is not None and header_tenant != tenant_id:
        raise AuthorizationException(message="Tenant mismatch")

    try:
        role = UserRole(payload["role"])
    except ValueError:
        raise AuthorizationException(message="Unknown role") from None

    return PermissionContext(
        user_id=str(payload["sub"]),
        tenant_id=tenant_id,
        role=role,
    )


CurrentPermissionContext = Annotated[PermissionContext, Depends(get_permission_context)]
