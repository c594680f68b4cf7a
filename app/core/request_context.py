"""Request-scoped context for log records.

Middleware sets the caller's tenant and the request id here so every log
line for a request carries them. Relational lookups set the RLS tenant
explicitly per session and do not read these variables.
"""

from contextvars import ContextVar, Token

current_tenant_id: ContextVar[str | None] = ContextVar(
    "current_tenant_id", default=None
)
current_request_id: ContextVar[str | None] = ContextVar(
    "current_request_id", default=None
)


def set_tenant_id(tenant_id: str | None) -> Token:
    """Set the current tenant ID; returns a token for reset_tenant_id."""
    return current_tenant_id.set(tenant_id)


def reset_tenant_id(token: Token) -> None:
    current_tenant_id.reset(token)


def get_tenant_id() -> str | None:
    """Return the current tenant ID if set."""
    return current_tenant_id.get()


def set_request_id(request_id: str | None) -> Token:
    return current_request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    current_request_id.reset(token)


def get_request_id() -> str | None:
    return current_request_id.get()
