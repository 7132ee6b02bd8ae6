"""Identity passed explicitly into service operations."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from commentable.auth.permissions import Capability, UserRole, has_capability
from commentable.core.exceptions import PermissionDeniedError


class Actor(BaseModel):
    """The authenticated user performing an operation."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    role: UserRole = UserRole.USER
    username: str | None = None

    def can(self, capability: Capability) -> bool:
        return has_capability(self.role, capability)

    def require(self, capability: Capability, message: str | None = None) -> None:
        """Raise PermissionDeniedError unless the role grants ``capability``."""
        if not self.can(capability):
            raise PermissionDeniedError(message)

    def owns(self, user_id: UUID) -> bool:
        return self.id == user_id
