"""Seed a development database with demo accounts and content.

Creates one account per role, a video and a post with a short comment
thread, a few reactions and a pending report. Access tokens for the demo
accounts are printed so the API can be exercised right away.

Usage:
    cd api && uv run python -m scripts.seed_demo_data
"""

import asyncio
import sys
from pathlib import Path


# Add api/ to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog
from sqlalchemy import select

from commentable.auth.permissions import UserRole
from commentable.auth.schemas import Actor
from commentable.comments.models import CommentableType
from commentable.comments.schemas import CreateCommentRequest
from commentable.comments.service import CommentService
from commentable.config import get_settings
from commentable.core.database import create_engine, create_session_factory, create_tables
from commentable.moderation.models import ReportCategory
from commentable.moderation.schemas import CreateReportRequest
from commentable.moderation.service import ModerationService
from commentable.posts.schemas import CreatePostRequest
from commentable.posts.service import PostService
from commentable.reactions.models import ReactionType
from commentable.reactions.service import ReactionService
from commentable.users.models import User
from commentable.users.schemas import CreateUserRequest
from commentable.users.service import UserService, issue_access_token
from commentable.videos.schemas import CreateVideoRequest
from commentable.videos.service import VideoService


logger = structlog.get_logger(__name__)

DEMO_PASSWORD = "demo-password-123"

DEMO_ACCOUNTS = [
    ("demo_admin", UserRole.ADMIN),
    ("demo_moderator", UserRole.MODERATOR),
    ("demo_alice", UserRole.USER),
    ("demo_bob", UserRole.USER),
]


def actor(user: User) -> Actor:
    return Actor(id=user.id, role=user.role, username=user.username)


async def seed(session) -> dict[str, User]:
    """Insert demo data; returns the demo accounts by username."""
    existing = await session.scalar(select(User.id).where(User.username == "demo_admin"))
    if existing is not None:
        logger.info("seed_skipped", reason="demo accounts already exist")
        users = (
            await session.scalars(
                select(User).where(User.username.in_([name for name, _ in DEMO_ACCOUNTS]))
            )
        ).all()
        return {user.username: user for user in users}

    users_service = UserService(session)
    users: dict[str, User] = {}
    for username, role in DEMO_ACCOUNTS:
        users[username] = await users_service.create_user(
            CreateUserRequest(
                username=username,
                email=f"{username}@example.com",
                password=DEMO_PASSWORD,
            ),
            role=role,
        )

    alice = actor(users["demo_alice"])
    bob = actor(users["demo_bob"])

    video = await VideoService(session).create_video(
        alice,
        CreateVideoRequest(
            title="Getting started",
            description="A short tour of the platform",
            video_url="https://cdn.example.com/videos/getting-started.mp4",
            duration=95,
        ),
    )
    post = await PostService(session).create_post(
        bob,
        CreatePostRequest(title="Release notes", content="Threads, reactions and reports."),
    )

    comments = CommentService(session)
    question = await comments.create_comment(
        bob,
        CreateCommentRequest(
            content="Is there a transcript?",
            commentable_type=CommentableType.VIDEO,
            commentable_id=video.id,
        ),
    )
    await comments.create_comment(
        alice,
        CreateCommentRequest(
            content="Coming <b>next week</b>.",
            commentable_type=CommentableType.VIDEO,
            commentable_id=video.id,
            parent_comment_id=question.id,
        ),
    )
    rude = await comments.create_comment(
        alice,
        CreateCommentRequest(
            content="First!!!",
            commentable_type=CommentableType.POST,
            commentable_id=post.id,
        ),
    )

    reactions = ReactionService(session)
    await reactions.upsert(alice, question.id, ReactionType.LIKE)
    await reactions.upsert(bob, rude.id, ReactionType.DISLIKE)

    await ModerationService(session).create_report(
        bob,
        CreateReportRequest(
            comment_id=rude.id, category=ReportCategory.SPAM, description="Low effort"
        ),
    )

    logger.info("seed_completed", video_id=str(video.id), post_id=str(post.id))
    return users


async def run_seed() -> None:
    settings = get_settings()
    logger.info("seed_starting", database_url=settings.database_url.split("@")[-1])

    engine = create_engine(settings.database_url)
    try:
        await create_tables(engine)
        async with create_session_factory(engine)() as session:
            users = await seed(session)
    finally:
        await engine.dispose()

    # Token fields are masked in logs, so print them for copy and paste
    for username, user in sorted(users.items()):
        print(f"{username} ({user.role.value}): {issue_access_token(user)}")


if __name__ == "__main__":
    asyncio.run(run_seed())
