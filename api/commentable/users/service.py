"""User accounts: sign-up, profile, soft delete and role management."""

from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from commentable.auth.permissions import Capability, UserRole, can_manage_role
from commentable.auth.schemas import Actor
from commentable.auth.security import create_access_token, hash_password
from commentable.core.database import utcnow
from commentable.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from commentable.core.logging import get_logger
from commentable.core.status import EntityStatus, ensure_transition

from .models import User
from .schemas import CreateUserRequest, UpdateProfileRequest


logger = get_logger(__name__)


def issue_access_token(user: User) -> str:
    """Mint an access token for ``user`` (tooling and tests)."""
    return create_access_token(
        {"sub": str(user.id), "role": user.role.value, "username": user.username}
    )


class UserService:
    """Service for user accounts."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_user(
        self,
        data: CreateUserRequest,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Register a new account.

        Raises:
            ConflictError: If the username or email is taken
        """
        email = data.email.lower()
        taken = await self.session.scalar(
            select(User.id).where(
                or_(User.username == data.username, User.email == email)
            )
        )
        if taken is not None:
            msg = "Username or email already registered"
            raise ConflictError(msg)

        user = User(
            username=data.username,
            email=email,
            password_hash=hash_password(data.password),
            display_name=data.display_name or data.username,
            role=role,
            status=EntityStatus.ACTIVE,
        )
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            msg = "Username or email already registered"
            raise ConflictError(msg) from e

        logger.info("user_created", user_id=str(user.id), role=role.value)
        return user

    async def get_user(self, user_id: UUID) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            msg = "User not found"
            raise NotFoundError(msg)
        return user

    async def _get_managed_user(self, actor: Actor, user_id: UUID) -> User:
        user = await self.get_user(user_id)
        if not actor.owns(user.id) and not actor.can(Capability.MANAGE_USERS):
            msg = "You can only change your own account"
            raise PermissionDeniedError(msg)
        return user

    async def update_profile(
        self,
        actor: Actor,
        user_id: UUID,
        data: UpdateProfileRequest,
    ) -> User:
        user = await self._get_managed_user(actor, user_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        await self.session.commit()
        return user

    async def delete_account(self, actor: Actor, user_id: UUID) -> User:
        """Soft delete an account (status ``deleted``, ``deleted_at`` stamped).

        Deleting an already deleted account is a no-op.
        """
        user = await self._get_managed_user(actor, user_id)
        if user.status == EntityStatus.DELETED:
            return user

        user.status = ensure_transition(
            user.status,
            EntityStatus.DELETED,
            force=actor.can(Capability.ADMINISTER_DATA),
        )
        user.deleted_at = utcnow()
        await self.session.commit()

        logger.info("user_deleted", user_id=str(user.id), by=str(actor.id))
        return user

    async def change_role(self, actor: Actor, user_id: UUID, role: UserRole) -> User:
        """Promote or demote a user.

        Actors may only manage users below their own level and may only grant
        roles below their own level.
        """
        actor.require(Capability.MANAGE_USERS)
        if actor.owns(user_id):
            msg = "You cannot change your own role"
            raise PermissionDeniedError(msg)

        user = await self.get_user(user_id)
        if not (can_manage_role(actor.role, user.role) and can_manage_role(actor.role, role)):
            msg = "You cannot assign this role"
            raise PermissionDeniedError(msg)

        previous = user.role
        user.role = role
        await self.session.commit()

        logger.info(
            "user_role_changed",
            user_id=str(user.id),
            previous=previous.value,
            role=role.value,
        )
        return user
