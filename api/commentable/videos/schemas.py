"""Pydantic schemas for videos."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from commentable.core.status import EntityStatus
from commentable.users.schemas import AuthorResponse

from .models import Video


class CreateVideoRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=2000)
    video_url: str = Field(..., min_length=1, max_length=500)
    thumbnail_url: str | None = Field(None, max_length=500)
    duration: int = Field(0, ge=0, description="Length in seconds")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Title cannot be empty"
            raise ValueError(msg)
        return v


class UpdateVideoRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    video_url: str | None = Field(None, min_length=1, max_length=500)
    thumbnail_url: str | None = Field(None, max_length=500)
    duration: int | None = Field(None, ge=0)


class VideoResponse(BaseModel):
    id: UUID
    title: str
    description: str
    video_url: str
    thumbnail_url: str | None = None
    duration: int
    view_count: int
    comment_count: int
    status: EntityStatus
    user_id: UUID
    owner: AuthorResponse
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_video(cls, video: Video, comment_count: int = 0) -> "VideoResponse":
        return cls(
            id=video.id,
            title=video.title,
            description=video.description,
            video_url=video.video_url,
            thumbnail_url=video.thumbnail_url,
            duration=video.duration,
            view_count=video.view_count,
            comment_count=comment_count,
            status=video.status,
            user_id=video.user_id,
            owner=AuthorResponse.model_validate(video.owner),
            created_at=video.created_at,
            updated_at=video.updated_at,
        )
