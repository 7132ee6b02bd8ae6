"""Report table and moderation enums."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commentable.comments.models import Comment
from commentable.core.database import TimestampedModel, UTCDateTime, enum_column
from commentable.users.models import User


DESCRIPTION_MAX_LENGTH = 1000
REVIEW_NOTES_MAX_LENGTH = 2000


class ReportCategory(str, Enum):
    SPAM = "spam"
    HARASSMENT = "harassment"
    HATE_SPEECH = "hate_speech"
    VIOLENCE = "violence"
    SEXUAL_CONTENT = "sexual_content"
    MISINFORMATION = "misinformation"
    OTHER = "other"


class ReportStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


REVIEW_OUTCOMES = frozenset(
    {ReportStatus.REVIEWED, ReportStatus.RESOLVED, ReportStatus.DISMISSED}
)


class Report(TimestampedModel):
    __tablename__ = "reports"
    __table_args__ = (
        UniqueConstraint("user_id", "comment_id", name="uq_reports_user_comment"),
        Index("ix_reports_status_created", "status", "created_at"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    comment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("comments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category: Mapped[ReportCategory] = mapped_column(
        enum_column(ReportCategory), nullable=False, index=True
    )
    description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX_LENGTH))
    status: Mapped[ReportStatus] = mapped_column(
        enum_column(ReportStatus), default=ReportStatus.PENDING, nullable=False
    )
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL")
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(UTCDateTime)
    review_notes: Mapped[str | None] = mapped_column(String(REVIEW_NOTES_MAX_LENGTH))

    reporter: Mapped[User] = relationship(
        foreign_keys=[user_id], lazy="joined", innerjoin=True
    )
    reviewer: Mapped[User | None] = relationship(foreign_keys=[reviewed_by], lazy="joined")
    comment: Mapped[Comment] = relationship(lazy="joined", innerjoin=True)
