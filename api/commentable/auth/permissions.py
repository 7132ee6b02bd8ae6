"""Role-based access control.

Two views of the same roles:

- ``ROLE_HIERARCHY``: ordered levels (GUEST < USER < MODERATOR < ADMIN), used
  for role management (nobody may grant a role at or above their own).
- ``ROLE_CAPABILITIES``: the single authorization table every gated
  operation consults.
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles with hierarchical levels."""

    GUEST = "guest"
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.GUEST: 0,
    UserRole.USER: 1,
    UserRole.MODERATOR: 2,
    UserRole.ADMIN: 3,
}


class Capability(str, Enum):
    """Actions gated by role."""

    CREATE_CONTENT = "create_content"
    COMMENT = "comment"
    REACT = "react"
    REPORT = "report"
    EDIT_OWN = "edit_own"
    DELETE_OWN = "delete_own"
    VIEW_REPORTS = "view_reports"
    REVIEW_REPORTS = "review_reports"
    MODERATE_CONTENT = "moderate_content"
    MANAGE_USERS = "manage_users"
    ADMINISTER_DATA = "administer_data"


_MEMBER_CAPABILITIES = frozenset(
    {
        Capability.CREATE_CONTENT,
        Capability.COMMENT,
        Capability.REACT,
        Capability.REPORT,
        Capability.EDIT_OWN,
        Capability.DELETE_OWN,
    }
)

_MODERATOR_CAPABILITIES = _MEMBER_CAPABILITIES | {
    Capability.VIEW_REPORTS,
    Capability.REVIEW_REPORTS,
    Capability.MODERATE_CONTENT,
}

ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.GUEST: frozenset(),
    UserRole.USER: _MEMBER_CAPABILITIES,
    UserRole.MODERATOR: _MODERATOR_CAPABILITIES,
    UserRole.ADMIN: _MODERATOR_CAPABILITIES
    | {Capability.MANAGE_USERS, Capability.ADMINISTER_DATA},
}


def _coerce_role(role: UserRole | str) -> UserRole | None:
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole(role)
    except ValueError:
        return None


def get_role_level(role: UserRole | str) -> int:
    """Get the level for a role; unknown roles rank as GUEST."""
    coerced = _coerce_role(role)
    return ROLE_HIERARCHY[coerced] if coerced else 0


def can_manage_role(user_role: UserRole | str, target_role: UserRole | str) -> bool:
    """Check if user_role may assign target_role (strictly lower levels only).

    Examples:
        >>> can_manage_role(UserRole.ADMIN, UserRole.MODERATOR)
        True
        >>> can_manage_role(UserRole.MODERATOR, UserRole.USER)
        False
    """
    coerced = _coerce_role(user_role)
    if coerced is None or Capability.MANAGE_USERS not in ROLE_CAPABILITIES[coerced]:
        return False
    return get_role_level(user_role) > get_role_level(target_role)


def has_capability(role: UserRole | str, capability: Capability) -> bool:
    """Look up a capability in the authorization table."""
    coerced = _coerce_role(role)
    if coerced is None:
        return False
    return capability in ROLE_CAPABILITIES[coerced]
