"""User table."""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from commentable.auth.permissions import UserRole
from commentable.core.database import TimestampedModel, UTCDateTime, enum_column
from commentable.core.status import EntityStatus


USERNAME_MAX_LENGTH = 50
DISPLAY_NAME_MAX_LENGTH = 100
BIO_MAX_LENGTH = 500


class User(TimestampedModel):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(USERNAME_MAX_LENGTH), unique=True, nullable=False
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(
        String(DISPLAY_NAME_MAX_LENGTH), nullable=False
    )
    avatar_url: Mapped[str | None] = mapped_column(String(500))
    bio: Mapped[str | None] = mapped_column(String(BIO_MAX_LENGTH))
    role: Mapped[UserRole] = mapped_column(
        enum_column(UserRole), default=UserRole.USER, nullable=False
    )
    status: Mapped[EntityStatus] = mapped_column(
        enum_column(EntityStatus), default=EntityStatus.ACTIVE, nullable=False, index=True
    )
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime)

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role.value})>"
