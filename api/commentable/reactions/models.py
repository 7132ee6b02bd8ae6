"""Reaction table: at most one reaction per user per comment."""

import uuid
from enum import Enum

from sqlalchemy import ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from commentable.core.database import TimestampedModel, enum_column


class ReactionType(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    LOVE = "love"
    CLAP = "clap"
    LAUGH = "laugh"
    SAD = "sad"


class Reaction(TimestampedModel):
    __tablename__ = "reactions"
    __table_args__ = (
        UniqueConstraint("user_id", "comment_id", name="uq_reactions_user_comment"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    comment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("comments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reaction_type: Mapped[ReactionType] = mapped_column(
        enum_column(ReactionType), nullable=False
    )
