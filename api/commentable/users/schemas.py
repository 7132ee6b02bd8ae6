"""Pydantic schemas for users."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from commentable.auth.permissions import UserRole
from commentable.core.status import EntityStatus

from .models import BIO_MAX_LENGTH, DISPLAY_NAME_MAX_LENGTH


USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"


class CreateUserRequest(BaseModel):
    """Public sign-up."""

    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    display_name: str | None = Field(None, max_length=DISPLAY_NAME_MAX_LENGTH)

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class UpdateProfileRequest(BaseModel):
    display_name: str | None = Field(None, min_length=1, max_length=DISPLAY_NAME_MAX_LENGTH)
    avatar_url: str | None = Field(None, max_length=500)
    bio: str | None = Field(None, max_length=BIO_MAX_LENGTH)


class ChangeRoleRequest(BaseModel):
    role: UserRole


class AuthorResponse(BaseModel):
    """Compact user reference embedded in content responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    display_name: str
    avatar_url: str | None = None


class UserProfileResponse(AuthorResponse):
    """Public profile."""

    bio: str | None = None
    role: UserRole
    status: EntityStatus
    created_at: datetime


class UserResponse(UserProfileResponse):
    """Profile including private fields, returned to the account owner."""

    email: str
    updated_at: datetime
