"""Pydantic schemas for posts."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from commentable.core.status import EntityStatus
from commentable.users.schemas import AuthorResponse

from .models import Post


class CreatePostRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1, max_length=50000)
    featured_image_url: str | None = Field(None, max_length=500)
    publish: bool = Field(True, description="Set published_at on creation")

    @field_validator("title", "content")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Value cannot be empty"
            raise ValueError(msg)
        return v


class UpdatePostRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = Field(None, min_length=1, max_length=50000)
    featured_image_url: str | None = Field(None, max_length=500)


class PostResponse(BaseModel):
    id: UUID
    title: str
    content: str
    slug: str
    featured_image_url: str | None = None
    view_count: int
    comment_count: int
    status: EntityStatus
    published_at: datetime | None = None
    user_id: UUID
    owner: AuthorResponse
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_post(cls, post: Post, comment_count: int = 0) -> "PostResponse":
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            slug=post.slug,
            featured_image_url=post.featured_image_url,
            view_count=post.view_count,
            comment_count=comment_count,
            status=post.status,
            published_at=post.published_at,
            user_id=post.user_id,
            owner=AuthorResponse.model_validate(post.owner),
            created_at=post.created_at,
            updated_at=post.updated_at,
        )
