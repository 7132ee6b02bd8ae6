"""Comment table.

A comment points at its commentable (video or post) through the
``commentable_type`` + ``commentable_id`` pair; the database cannot enforce
that reference, so the service checks it on create. Replies reference their
parent comment; removing a parent row never cascades to its replies.
"""

import uuid
from enum import Enum

from sqlalchemy import ForeignKey, Index, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commentable.core.database import TimestampedModel, enum_column
from commentable.core.status import EntityStatus
from commentable.users.models import User


class CommentableType(str, Enum):
    VIDEO = "video"
    POST = "post"


class Comment(TimestampedModel):
    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_commentable", "commentable_type", "commentable_id"),
        Index("ix_comments_created_at", "created_at"),
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    commentable_type: Mapped[CommentableType] = mapped_column(
        enum_column(CommentableType), nullable=False
    )
    commentable_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    parent_comment_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("comments.id", ondelete="SET NULL"), index=True
    )
    status: Mapped[EntityStatus] = mapped_column(
        enum_column(EntityStatus), default=EntityStatus.ACTIVE, nullable=False, index=True
    )
    reply_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reaction_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    author: Mapped[User] = relationship(lazy="joined", innerjoin=True)

    @property
    def thread_key(self) -> tuple[CommentableType, uuid.UUID]:
        """The commentable this comment (and all its replies) belongs to."""
        return self.commentable_type, self.commentable_id
