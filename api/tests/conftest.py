"""Shared fixtures: in-memory SQLite database, users and an HTTP client."""

import os


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DATABASE_CREATE_TABLES", "true")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_REQUESTS", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker  # noqa: E402

from commentable.auth.permissions import UserRole  # noqa: E402
from commentable.auth.schemas import Actor  # noqa: E402
from commentable.core.database import (  # noqa: E402
    create_engine,
    create_session_factory,
    create_tables,
    get_db_session,
)
from commentable.core.status import EntityStatus  # noqa: E402
from commentable.posts.models import Post  # noqa: E402
from commentable.users.models import User  # noqa: E402
from commentable.users.service import issue_access_token  # noqa: E402
from commentable.videos.models import Video  # noqa: E402


MakeUser = Callable[..., Awaitable[User]]


@pytest.fixture
def client() -> TestClient:
    """Synchronous client for endpoints that do not touch the database."""
    from commentable.main import app

    return TestClient(app)


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_engine("sqlite+aiosqlite://")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def make_user(session: AsyncSession) -> MakeUser:
    """Factory inserting an active user with the given role."""

    async def _make(
        username: str,
        role: UserRole = UserRole.USER,
        status: EntityStatus = EntityStatus.ACTIVE,
    ) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
            display_name=username.capitalize(),
            role=role,
            status=status,
        )
        session.add(user)
        await session.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def make_video(session: AsyncSession) -> Callable[..., Awaitable[Video]]:
    async def _make(
        owner: User,
        title: str = "Demo clip",
        status: EntityStatus = EntityStatus.ACTIVE,
    ) -> Video:
        video = Video(
            title=title,
            description="",
            video_url="https://cdn.example.com/demo.mp4",
            user_id=owner.id,
            status=status,
        )
        session.add(video)
        await session.commit()
        await session.refresh(video, ["owner"])
        return video

    return _make


@pytest_asyncio.fixture
async def make_post(session: AsyncSession) -> Callable[..., Awaitable[Post]]:
    async def _make(
        owner: User,
        title: str = "Demo post",
        status: EntityStatus = EntityStatus.ACTIVE,
    ) -> Post:
        post = Post(
            title=title,
            content="Body",
            slug=f"post-{uuid4().hex}",
            user_id=owner.id,
            status=status,
        )
        session.add(post)
        await session.commit()
        await session.refresh(post, ["owner"])
        return post

    return _make


def _actor_for(user: User) -> Actor:
    return Actor(id=user.id, role=user.role, username=user.username)


def _auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_access_token(user)}"}


@pytest.fixture
def actor_for() -> Callable[[User], Actor]:
    """Build the actor a request by a given user would carry."""
    return _actor_for


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Bearer headers for a given user."""
    return _auth_headers


@pytest_asyncio.fixture
async def api_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, one database session per request."""
    from commentable.main import app

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
