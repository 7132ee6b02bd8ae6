"""Recompute-on-read counters and reply-tree reconstruction.

Reply counts, reaction summaries and per-commentable comment counts are
always derived from the rows themselves, batched per page. Only visible
children (active or flagged) are counted, matching what listings show. The
denormalised counter columns are re-synchronised from these counts whenever
children change.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from commentable.core.status import VISIBLE_STATUSES
from commentable.reactions.models import Reaction, ReactionType

from .commentables import get_commentable
from .models import Comment, CommentableType


def reply_count_expression() -> Any:
    """Correlated subquery counting visible direct replies of ``Comment``."""
    child = aliased(Comment)
    return (
        select(func.count(child.id))
        .where(
            child.parent_comment_id == Comment.id,
            child.status.in_(VISIBLE_STATUSES),
        )
        .correlate(Comment)
        .scalar_subquery()
    )


async def count_replies(
    session: AsyncSession,
    comment_ids: Sequence[UUID],
) -> dict[UUID, int]:
    if not comment_ids:
        return {}
    rows = await session.execute(
        select(Comment.parent_comment_id, func.count(Comment.id))
        .where(
            Comment.parent_comment_id.in_(comment_ids),
            Comment.status.in_(VISIBLE_STATUSES),
        )
        .group_by(Comment.parent_comment_id)
    )
    return {parent_id: count for parent_id, count in rows.all()}


async def reaction_counts(
    session: AsyncSession,
    comment_ids: Sequence[UUID],
) -> dict[UUID, dict[ReactionType, int]]:
    """Count reactions per type for each comment."""
    counts: dict[UUID, dict[ReactionType, int]] = defaultdict(dict)
    if not comment_ids:
        return counts
    rows = await session.execute(
        select(Reaction.comment_id, Reaction.reaction_type, func.count(Reaction.id))
        .where(Reaction.comment_id.in_(comment_ids))
        .group_by(Reaction.comment_id, Reaction.reaction_type)
    )
    for comment_id, reaction_type, count in rows.all():
        counts[comment_id][reaction_type] = count
    return counts


async def viewer_reactions(
    session: AsyncSession,
    viewer_id: UUID | None,
    comment_ids: Sequence[UUID],
) -> dict[UUID, ReactionType]:
    if viewer_id is None or not comment_ids:
        return {}
    rows = await session.execute(
        select(Reaction.comment_id, Reaction.reaction_type).where(
            Reaction.user_id == viewer_id,
            Reaction.comment_id.in_(comment_ids),
        )
    )
    return dict(rows.tuples().all())


async def count_comments(
    session: AsyncSession,
    commentable_type: CommentableType,
    commentable_ids: Sequence[UUID],
) -> dict[UUID, int]:
    """Count visible comments (all depths) on each commentable."""
    if not commentable_ids:
        return {}
    rows = await session.execute(
        select(Comment.commentable_id, func.count(Comment.id))
        .where(
            Comment.commentable_type == commentable_type,
            Comment.commentable_id.in_(commentable_ids),
            Comment.status.in_(VISIBLE_STATUSES),
        )
        .group_by(Comment.commentable_id)
    )
    return {commentable_id: count for commentable_id, count in rows.all()}


async def sync_comment_counters(session: AsyncSession, comment: Comment) -> None:
    """Refresh the stored counters touched by a change to ``comment``.

    Updates the parent's ``reply_count`` and the commentable's
    ``comment_count``. Pending changes are flushed first so they are counted.
    """
    await session.flush()

    if comment.parent_comment_id is not None:
        parent = await session.get(Comment, comment.parent_comment_id)
        if parent is not None:
            replies = await count_replies(session, [parent.id])
            parent.reply_count = replies.get(parent.id, 0)

    commentable = await get_commentable(
        session, comment.commentable_type, comment.commentable_id
    )
    if commentable is not None:
        totals = await count_comments(
            session, comment.commentable_type, [comment.commentable_id]
        )
        commentable.comment_count = totals.get(comment.commentable_id, 0)


async def sync_reaction_counter(session: AsyncSession, comment_id: UUID) -> int:
    """Refresh ``Comment.reaction_count`` from the reactions table."""
    await session.flush()
    total = await session.scalar(
        select(func.count(Reaction.id)).where(Reaction.comment_id == comment_id)
    )
    comment = await session.get(Comment, comment_id)
    if comment is not None:
        comment.reaction_count = total or 0
    return total or 0


def build_comment_tree(
    root: Any,
    descendants: Iterable[Any],
    max_depth: int,
) -> Any:
    """Attach descendants to ``root`` as nested ``replies`` lists.

    Nodes need ``id``, ``parent_comment_id`` and a ``replies`` list. Nodes
    deeper than ``max_depth`` below the root, or whose parent is missing
    from the input, are dropped. Sibling order follows the input order.

    Args:
        root: The thread's root node.
        descendants: Candidate reply nodes, in display order.
        max_depth: Levels of replies to keep (1 = direct replies only).

    Returns:
        ``root`` with its ``replies`` populated.
    """
    children: dict[UUID, list[Any]] = defaultdict(list)
    for node in descendants:
        if node.parent_comment_id is not None:
            children[node.parent_comment_id].append(node)

    frontier = [root]
    for _ in range(max_depth):
        next_frontier = []
        for node in frontier:
            node.replies = children.get(node.id, [])
            next_frontier.extend(node.replies)
        if not next_frontier:
            break
        frontier = next_frontier
    return root
