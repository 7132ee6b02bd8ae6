"""Per-request identifiers kept in contextvars.

The middleware fills in the request and tracing ids, the auth dependency adds
the acting user and role. ``get_context`` feeds them to every log event.
"""

from contextvars import ContextVar
from typing import Any
from uuid import UUID, uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
actor_id_var: ContextVar[str | None] = ContextVar("actor_id", default=None)
actor_role_var: ContextVar[str | None] = ContextVar("actor_role", default=None)
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_LOG_FIELDS: dict[str, ContextVar[Any]] = {
    "request_id": request_id_var,
    "user_id": actor_id_var,
    "user_role": actor_role_var,
    "trace_id": trace_id_var,
    "correlation_id": correlation_id_var,
}


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Adopt the incoming request id or generate one; returns the id in use."""
    rid = request_id or str(uuid4())
    request_id_var.set(rid)
    return rid


def bind_actor(user_id: UUID | str, role: str | None = None) -> None:
    """Attach the authenticated user to subsequent log lines."""
    actor_id_var.set(str(user_id))
    actor_role_var.set(role)


def set_tracing(trace_id: str | None, correlation_id: str | None = None) -> None:
    if trace_id:
        trace_id_var.set(trace_id)
    if correlation_id:
        correlation_id_var.set(correlation_id)


def get_context() -> dict[str, Any]:
    """Non-empty context values keyed by their log field name."""
    values = {field: var.get() for field, var in _LOG_FIELDS.items()}
    return {field: value for field, value in values.items() if value}


def clear_context() -> None:
    request_id_var.set("")
    for var in (actor_id_var, actor_role_var, trace_id_var, correlation_id_var):
        var.set(None)
