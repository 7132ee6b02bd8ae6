"""Comment service layer.

Business logic for:
- Comment creation on videos and posts, with threaded replies
- Listings with recomputed reply counts and reaction summaries
- Nested thread reconstruction
- Owner edits and soft deletion
"""

import html
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from commentable.auth.permissions import Capability
from commentable.auth.schemas import Actor
from commentable.config import get_settings
from commentable.core.exceptions import (
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
)
from commentable.core.logging import get_logger
from commentable.core.pagination import Page, PageParams, paginate
from commentable.core.rate_limit import RateLimiter
from commentable.core.status import (
    VISIBLE_STATUSES,
    EntityStatus,
    ensure_transition,
    is_visible,
)

from .aggregation import (
    build_comment_tree,
    count_replies,
    reaction_counts,
    reply_count_expression,
    sync_comment_counters,
    viewer_reactions,
)
from .commentables import require_open_commentable
from .models import Comment
from .schemas import (
    CommentFilters,
    CommentResponse,
    CommentThreadResponse,
    CreateCommentRequest,
    UpdateCommentRequest,
)


logger = get_logger(__name__)


# Allowed HTML tags (basic formatting only)
ALLOWED_TAGS = {"b", "i", "em", "strong", "code", "pre"}


def sanitize_content(content: str) -> str:
    """Escape HTML, then re-enable a few bare formatting tags."""
    escaped = html.escape(content, quote=False)
    for tag in ALLOWED_TAGS:
        escaped = escaped.replace(f"&lt;{tag}&gt;", f"<{tag}>")
        escaped = escaped.replace(f"&lt;/{tag}&gt;", f"</{tag}>")
    return escaped


class CommentService:
    """Service for comment management."""

    DEFAULT_SORT = "created_at"

    def __init__(self, session: AsyncSession, rate_limiter: RateLimiter | None = None):
        self.session = session
        self.rate_limiter = rate_limiter or RateLimiter()
        self.settings = get_settings()

    # ==========================================================================
    # Lookups
    # ==========================================================================

    async def find_comment(self, comment_id: UUID) -> Comment | None:
        return await self.session.get(Comment, comment_id)

    async def get_comment_entity(self, comment_id: UUID) -> Comment:
        """Fetch a comment in any status.

        Raises:
            NotFoundError: If no such comment exists
        """
        comment = await self.find_comment(comment_id)
        if comment is None:
            msg = "Comment not found"
            raise NotFoundError(msg)
        return comment

    async def get_visible_comment(self, comment_id: UUID) -> Comment:
        """Fetch a comment that is still active or flagged."""
        comment = await self.get_comment_entity(comment_id)
        if not is_visible(comment.status):
            msg = "Comment not found"
            raise NotFoundError(msg)
        return comment

    async def reply_depth(self, comment: Comment) -> int:
        """Depth of ``comment`` in its thread (top-level comments are 0)."""
        depth = 0
        parent_id = comment.parent_comment_id
        limit = max(self.settings.comment_max_reply_depth, 0) + 1
        while parent_id is not None and depth < limit:
            depth += 1
            parent_id = await self.session.scalar(
                select(Comment.parent_comment_id).where(Comment.id == parent_id)
            )
        return depth

    # ==========================================================================
    # Responses
    # ==========================================================================

    async def to_responses(
        self,
        comments: list[Comment],
        viewer: Actor | None = None,
        response_cls: type[CommentResponse] = CommentResponse,
    ) -> list[CommentResponse]:
        """Build responses with batched reply counts and reaction data."""
        ids = [comment.id for comment in comments]
        replies = await count_replies(self.session, ids)
        reactions = await reaction_counts(self.session, ids)
        mine = await viewer_reactions(self.session, viewer.id if viewer else None, ids)
        mask_hidden = viewer is None or not viewer.can(Capability.MODERATE_CONTENT)

        return [
            response_cls.from_comment(
                comment,
                reply_count=replies.get(comment.id, 0),
                reactions=reactions.get(comment.id),
                user_reaction=mine.get(comment.id),
                mask_hidden=mask_hidden,
            )
            for comment in comments
        ]

    async def to_response(
        self,
        comment: Comment,
        viewer: Actor | None = None,
    ) -> CommentResponse:
        [response] = await self.to_responses([comment], viewer)
        return response

    # ==========================================================================
    # Comment CRUD
    # ==========================================================================

    async def create_comment(
        self,
        actor: Actor,
        data: CreateCommentRequest,
    ) -> CommentResponse:
        """Create a comment or a reply.

        Performs:
        - Capability and rate limit checks
        - Commentable existence check (it must still be visible)
        - Parent checks: visible, same thread, within the depth limit
        - Content sanitization
        - Counter re-synchronisation
        """
        actor.require(Capability.COMMENT, "You are not allowed to comment")
        if len(data.content) > self.settings.comment_max_length:
            msg = f"Comment exceeds {self.settings.comment_max_length} characters"
            raise InvalidRequestError(msg)

        await self.rate_limiter.hit(
            "comments", actor.id, self.settings.rate_limit_comments_per_minute, 60
        )

        await require_open_commentable(
            self.session, data.commentable_type, data.commentable_id
        )

        if data.parent_comment_id is not None:
            parent = await self.get_visible_comment(data.parent_comment_id)
            if parent.thread_key != (data.commentable_type, data.commentable_id):
                msg = "Parent comment belongs to a different thread"
                raise InvalidRequestError(msg)

            max_depth = self.settings.comment_max_reply_depth
            if max_depth and await self.reply_depth(parent) + 1 > max_depth:
                msg = f"Replies cannot be nested more than {max_depth} levels deep"
                raise InvalidRequestError(msg)

        comment = Comment(
            content=sanitize_content(data.content),
            user_id=actor.id,
            commentable_type=data.commentable_type,
            commentable_id=data.commentable_id,
            parent_comment_id=data.parent_comment_id,
            status=EntityStatus.ACTIVE,
        )
        self.session.add(comment)
        await sync_comment_counters(self.session, comment)
        await self.session.commit()

        logger.info(
            "comment_created",
            comment_id=str(comment.id),
            commentable_type=comment.commentable_type.value,
            commentable_id=str(comment.commentable_id),
            parent_comment_id=str(comment.parent_comment_id)
            if comment.parent_comment_id
            else None,
        )

        await self.session.refresh(comment, ["author"])
        return await self.to_response(comment, actor)

    async def get_comment(
        self,
        comment_id: UUID,
        viewer: Actor | None = None,
    ) -> CommentResponse:
        """Resolve a comment by id in any status (hidden content is masked)."""
        comment = await self.get_comment_entity(comment_id)
        return await self.to_response(comment, viewer)

    async def list_comments(
        self,
        filters: CommentFilters,
        params: PageParams,
        viewer: Actor | None = None,
    ) -> Page[CommentResponse]:
        """List visible comments.

        Without ``parent_comment_id`` only top-level comments are returned;
        with one, its direct replies. Sortable by ``created_at``,
        ``updated_at`` or ``reply_count``.
        """
        stmt = select(Comment).where(Comment.status.in_(VISIBLE_STATUSES))

        if filters.commentable_type is not None:
            stmt = stmt.where(Comment.commentable_type == filters.commentable_type)
        if filters.commentable_id is not None:
            stmt = stmt.where(Comment.commentable_id == filters.commentable_id)
        if filters.parent_comment_id is not None:
            stmt = stmt.where(Comment.parent_comment_id == filters.parent_comment_id)
        else:
            stmt = stmt.where(Comment.parent_comment_id.is_(None))
        if filters.user_id is not None:
            stmt = stmt.where(Comment.user_id == filters.user_id)
        if filters.search:
            stmt = stmt.where(Comment.content.ilike(f"%{filters.search}%"))

        comments, total = await paginate(
            self.session,
            stmt,
            params,
            sort_columns={
                "created_at": Comment.created_at,
                "updated_at": Comment.updated_at,
                "reply_count": reply_count_expression(),
            },
            default_sort=self.DEFAULT_SORT,
            tiebreaker=Comment.id,
        )
        items = await self.to_responses(comments, viewer)
        return Page[CommentResponse].create(items, total, params)

    async def list_replies(
        self,
        comment_id: UUID,
        params: PageParams,
        viewer: Actor | None = None,
    ) -> Page[CommentResponse]:
        """Page through the direct replies of a comment.

        Raises:
            NotFoundError: If the parent comment does not exist
        """
        parent = await self.get_comment_entity(comment_id)
        filters = CommentFilters(
            commentable_type=parent.commentable_type,
            commentable_id=parent.commentable_id,
            parent_comment_id=parent.id,
        )
        return await self.list_comments(filters, params, viewer)

    async def get_thread(
        self,
        comment_id: UUID,
        depth: int | None = None,
        viewer: Actor | None = None,
    ) -> CommentThreadResponse:
        """Reconstruct the reply tree under a comment.

        Replies are loaded level by level (oldest first) down to ``depth``,
        which is capped by the configured maximum reply depth.
        """
        max_depth = self.settings.comment_max_reply_depth or depth or 1
        depth = max(1, min(depth or max_depth, max_depth))

        root = await self.get_comment_entity(comment_id)
        descendants: list[Comment] = []
        frontier = [root.id]
        for _ in range(depth):
            result = await self.session.execute(
                select(Comment)
                .where(
                    Comment.parent_comment_id.in_(frontier),
                    Comment.status.in_(VISIBLE_STATUSES),
                )
                .order_by(Comment.created_at.asc(), Comment.id)
            )
            level = list(result.scalars().unique().all())
            if not level:
                break
            descendants.extend(level)
            frontier = [comment.id for comment in level]

        nodes = await self.to_responses(
            [root, *descendants], viewer, response_cls=CommentThreadResponse
        )
        return build_comment_tree(nodes[0], nodes[1:], depth)

    async def update_comment(
        self,
        actor: Actor,
        comment_id: UUID,
        data: UpdateCommentRequest,
    ) -> CommentResponse:
        """Edit a comment's content (owner only, visible comments only)."""
        comment = await self.get_visible_comment(comment_id)
        if not actor.owns(comment.user_id):
            msg = "You can only edit your own comments"
            raise PermissionDeniedError(msg)
        actor.require(Capability.EDIT_OWN)
        if len(data.content) > self.settings.comment_max_length:
            msg = f"Comment exceeds {self.settings.comment_max_length} characters"
            raise InvalidRequestError(msg)

        comment.content = sanitize_content(data.content)
        await self.session.commit()

        logger.info("comment_updated", comment_id=str(comment.id))
        return await self.to_response(comment, actor)

    async def delete_comment(self, actor: Actor, comment_id: UUID) -> None:
        """Soft delete a comment (owner only).

        Deleting an already deleted comment is a no-op; moderators remove
        other people's comments through the moderation endpoints.
        """
        comment = await self.get_comment_entity(comment_id)
        if not actor.owns(comment.user_id):
            msg = "You can only delete your own comments"
            raise PermissionDeniedError(msg)
        actor.require(Capability.DELETE_OWN)

        if comment.status == EntityStatus.DELETED:
            return

        comment.status = ensure_transition(comment.status, EntityStatus.DELETED)
        await sync_comment_counters(self.session, comment)
        await self.session.commit()

        logger.info("comment_deleted", comment_id=str(comment.id))
