"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Actor extraction from the Bearer JWT
- Loading the acting user's account for writes and personal reads
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from jose import JWTError

from commentable.auth.permissions import UserRole
from commentable.auth.schemas import Actor
from commentable.auth.security import decode_access_token
from commentable.core.context import bind_actor
from commentable.core.database import DbSession
from commentable.core.exceptions import PermissionDeniedError, UnauthorizedError
from commentable.core.status import EntityStatus
from commentable.users.models import User


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


def _actor_from_token(token: str) -> Actor:
    payload = decode_access_token(token)
    try:
        user_id = UUID(str(payload["sub"]))
        role = UserRole(payload.get("role", UserRole.USER.value))
    except ValueError as e:
        msg = "Malformed token claims"
        raise JWTError(msg) from e

    bind_actor(user_id, role.value)
    return Actor(id=user_id, role=role, username=payload.get("username"))


async def get_current_actor(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Actor:
    """Get the authenticated actor from the JWT access token.

    Raises:
        UnauthorizedError: If token is missing, invalid, or expired
    """
    if not token:
        msg = "Access token not provided"
        raise UnauthorizedError(msg)

    try:
        return _actor_from_token(token)
    except JWTError as e:
        msg = "Invalid or expired token"
        raise UnauthorizedError(msg) from e


async def get_optional_actor(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Actor | None:
    """Get the actor if authenticated, None otherwise.

    Use this for read endpoints that personalise results (e.g. the viewer's
    own reaction) but also serve anonymous visitors.
    """
    if not token:
        return None

    try:
        return _actor_from_token(token)
    except JWTError:
        return None


async def get_active_actor(
    actor: Annotated[Actor, Depends(get_current_actor)],
    session: DbSession,
) -> Actor:
    """Resolve the actor against the users table.

    The stored role wins over the token claim so demotions apply at once.

    Raises:
        UnauthorizedError: If the account no longer exists or was deleted
        PermissionDeniedError: If the account was removed by moderation
    """
    user = await session.get(User, actor.id)
    if user is None or user.status == EntityStatus.DELETED:
        msg = "Account not found"
        raise UnauthorizedError(msg)
    if user.status == EntityStatus.REMOVED:
        msg = "Account suspended"
        raise PermissionDeniedError(msg)

    bind_actor(user.id, user.role.value)
    return Actor(id=user.id, role=user.role, username=user.username)


OptionalActor = Annotated[Actor | None, Depends(get_optional_actor)]
ActiveActor = Annotated[Actor, Depends(get_active_actor)]
