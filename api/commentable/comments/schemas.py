"""Pydantic schemas for comments.

Request/Response models for:
- Comment create and edit
- Comment listings with reaction summaries
- Nested reply threads
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from commentable.core.status import EntityStatus
from commentable.reactions.models import ReactionType
from commentable.reactions.schemas import ReactionSummary
from commentable.users.schemas import AuthorResponse

from .models import Comment, CommentableType


DELETED_PLACEHOLDER = "[deleted]"
REMOVED_PLACEHOLDER = "[removed by moderation]"


def _strip_content(v: str) -> str:
    v = v.strip()
    if not v:
        msg = "Content cannot be empty"
        raise ValueError(msg)
    return v


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateCommentRequest(BaseModel):
    """Request to comment on a video or post, or to reply to a comment."""

    content: str = Field(..., min_length=1)
    commentable_type: CommentableType
    commentable_id: UUID
    parent_comment_id: UUID | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _strip_content(v)


class UpdateCommentRequest(BaseModel):
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _strip_content(v)


class CommentFilters(BaseModel):
    """Listing filters; without ``parent_comment_id`` only top-level comments match."""

    commentable_type: CommentableType | None = None
    commentable_id: UUID | None = None
    parent_comment_id: UUID | None = None
    user_id: UUID | None = None
    search: str | None = Field(None, max_length=200)


# ==============================================================================
# Response Schemas
# ==============================================================================


class CommentResponse(BaseModel):
    """A comment with its author and recomputed counters."""

    id: UUID
    content: str
    user_id: UUID
    author: AuthorResponse
    commentable_type: CommentableType
    commentable_id: UUID
    parent_comment_id: UUID | None = None
    status: EntityStatus
    reply_count: int = 0
    reactions: ReactionSummary = Field(default_factory=ReactionSummary)
    user_reaction: ReactionType | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_comment(
        cls,
        comment: Comment,
        reply_count: int = 0,
        reactions: dict[ReactionType, int] | None = None,
        user_reaction: ReactionType | None = None,
        mask_hidden: bool = True,
    ) -> "CommentResponse":
        """Create response from a Comment row.

        Args:
            comment: Comment with its author loaded
            reply_count: Recomputed number of visible replies
            reactions: Reaction counts by type
            user_reaction: The viewer's own reaction
            mask_hidden: Replace the content of deleted/removed comments
        """
        content = comment.content
        if mask_hidden and comment.status == EntityStatus.DELETED:
            content = DELETED_PLACEHOLDER
        elif mask_hidden and comment.status == EntityStatus.REMOVED:
            content = REMOVED_PLACEHOLDER

        return cls(
            id=comment.id,
            content=content,
            user_id=comment.user_id,
            author=AuthorResponse.model_validate(comment.author),
            commentable_type=comment.commentable_type,
            commentable_id=comment.commentable_id,
            parent_comment_id=comment.parent_comment_id,
            status=comment.status,
            reply_count=reply_count,
            reactions=ReactionSummary.from_counts(reactions),
            user_reaction=user_reaction,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


class CommentThreadResponse(CommentResponse):
    """A comment with its replies nested up to the requested depth."""

    replies: list["CommentThreadResponse"] = Field(default_factory=list)
