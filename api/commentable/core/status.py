"""Lifecycle status shared by users, videos, posts and comments.

::

    active  -> deleted   (owner)
    active  -> flagged   (moderation, report escalation)
    flagged -> active    (moderator clears it)
    flagged -> removed   (moderator upholds it)

``deleted`` and ``removed`` are terminal; only direct data administration
(``force=True``) may leave them.
"""

from enum import Enum

from commentable.core.exceptions import ConflictError


class EntityStatus(str, Enum):
    ACTIVE = "active"
    DELETED = "deleted"
    FLAGGED = "flagged"
    REMOVED = "removed"


VISIBLE_STATUSES: frozenset[EntityStatus] = frozenset(
    {EntityStatus.ACTIVE, EntityStatus.FLAGGED}
)

ALLOWED_TRANSITIONS: dict[EntityStatus, frozenset[EntityStatus]] = {
    EntityStatus.ACTIVE: frozenset({EntityStatus.DELETED, EntityStatus.FLAGGED}),
    EntityStatus.FLAGGED: frozenset({EntityStatus.ACTIVE, EntityStatus.REMOVED}),
    EntityStatus.DELETED: frozenset(),
    EntityStatus.REMOVED: frozenset(),
}


def is_visible(status: EntityStatus) -> bool:
    """Visible entities appear in listings and accept new children."""
    return status in VISIBLE_STATUSES


def can_transition(current: EntityStatus, target: EntityStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(
    current: EntityStatus,
    target: EntityStatus,
    *,
    force: bool = False,
) -> EntityStatus:
    """Validate a status change and return the new status.

    Raises:
        ConflictError: If the transition is not allowed and not forced.
    """
    if force or can_transition(current, target):
        return target
    msg = f"Cannot change status from {current.value} to {target.value}"
    raise ConflictError(msg)
