"""Pydantic schemas for reports and moderation."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from commentable.core.status import EntityStatus

from .models import (
    DESCRIPTION_MAX_LENGTH,
    REVIEW_NOTES_MAX_LENGTH,
    REVIEW_OUTCOMES,
    ReportCategory,
    ReportStatus,
)


class ModeratedEntity(str, Enum):
    """Entity kinds whose status moderators can change."""

    VIDEO = "video"
    POST = "post"
    COMMENT = "comment"
    USER = "user"


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateReportRequest(BaseModel):
    """Request to report a comment."""

    comment_id: UUID
    category: ReportCategory
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)


class ReviewReportRequest(BaseModel):
    """Moderator decision on a pending report."""

    status: ReportStatus
    notes: str | None = Field(None, max_length=REVIEW_NOTES_MAX_LENGTH)

    @field_validator("status")
    @classmethod
    def validate_outcome(cls, v: ReportStatus) -> ReportStatus:
        if v not in REVIEW_OUTCOMES:
            msg = "Status must be reviewed, resolved or dismissed"
            raise ValueError(msg)
        return v


class ChangeStatusRequest(BaseModel):
    status: EntityStatus
    reason: str | None = Field(None, max_length=500)


class ReportFilters(BaseModel):
    status: ReportStatus | None = None
    category: ReportCategory | None = None
    comment_id: UUID | None = None


# ==============================================================================
# Response Schemas
# ==============================================================================


class ReportResponse(BaseModel):
    """Response for a comment report."""

    id: UUID
    comment_id: UUID
    comment_content: str
    user_id: UUID
    reporter_username: str
    category: ReportCategory
    description: str | None = None
    status: ReportStatus
    reviewed_by: UUID | None = None
    reviewer_username: str | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_report(cls, report: Any) -> "ReportResponse":
        """Create response from a Report row with its relationships loaded."""
        return cls(
            id=report.id,
            comment_id=report.comment_id,
            comment_content=report.comment.content,
            user_id=report.user_id,
            reporter_username=report.reporter.username,
            category=report.category,
            description=report.description,
            status=report.status,
            reviewed_by=report.reviewed_by,
            reviewer_username=report.reviewer.username if report.reviewer else None,
            reviewed_at=report.reviewed_at,
            review_notes=report.review_notes,
            created_at=report.created_at,
            updated_at=report.updated_at,
        )


class StatusChangeResponse(BaseModel):
    entity_type: ModeratedEntity
    entity_id: UUID
    previous_status: EntityStatus
    status: EntityStatus
