"""Post service."""

import re
import unicodedata
import uuid
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from commentable.auth.permissions import Capability
from commentable.auth.schemas import Actor
from commentable.comments.aggregation import count_comments
from commentable.comments.models import CommentableType
from commentable.core.database import utcnow
from commentable.core.exceptions import NotFoundError, PermissionDeniedError
from commentable.core.logging import get_logger
from commentable.core.pagination import Page, PageParams, paginate
from commentable.core.status import (
    VISIBLE_STATUSES,
    EntityStatus,
    ensure_transition,
    is_visible,
)

from .models import SLUG_MAX_LENGTH, Post
from .schemas import CreatePostRequest, PostResponse, UpdatePostRequest


logger = get_logger(__name__)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """Build a URL slug from ``title`` with a short random suffix.

    >>> slugify("Hello, World!")[:12]
    'hello-world-'
    """
    ascii_title = (
        unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    )
    base = _NON_SLUG_CHARS.sub("-", ascii_title.lower()).strip("-") or "post"
    suffix = uuid.uuid4().hex[:8]
    return f"{base[: SLUG_MAX_LENGTH - len(suffix) - 1]}-{suffix}"


class PostService:
    """Service for blog posts."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_post_entity(self, post_id: UUID) -> Post:
        post = await self.session.get(Post, post_id)
        if post is None:
            msg = "Post not found"
            raise NotFoundError(msg)
        return post

    async def _to_response(self, post: Post) -> PostResponse:
        counts = await count_comments(self.session, CommentableType.POST, [post.id])
        return PostResponse.from_post(post, counts.get(post.id, 0))

    async def list_posts(
        self,
        params: PageParams,
        search: str | None = None,
        user_id: UUID | None = None,
    ) -> Page[PostResponse]:
        stmt = select(Post).where(Post.status.in_(VISIBLE_STATUSES))
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(Post.title.ilike(pattern), Post.content.ilike(pattern)))
        if user_id is not None:
            stmt = stmt.where(Post.user_id == user_id)

        posts, total = await paginate(
            self.session,
            stmt,
            params,
            sort_columns={
                "created_at": Post.created_at,
                "updated_at": Post.updated_at,
                "title": Post.title,
            },
            default_sort="created_at",
            tiebreaker=Post.id,
        )
        counts = await count_comments(
            self.session, CommentableType.POST, [post.id for post in posts]
        )
        items = [PostResponse.from_post(p, counts.get(p.id, 0)) for p in posts]
        return Page[PostResponse].create(items, total, params)

    async def get_post(self, post_id: UUID) -> PostResponse:
        return await self._to_response(await self.get_post_entity(post_id))

    async def get_post_by_slug(self, slug: str) -> PostResponse:
        """Resolve a visible post by slug."""
        result = await self.session.execute(
            select(Post).where(Post.slug == slug, Post.status.in_(VISIBLE_STATUSES))
        )
        post = result.scalar_one_or_none()
        if post is None:
            msg = "Post not found"
            raise NotFoundError(msg)
        return await self._to_response(post)

    async def create_post(self, actor: Actor, data: CreatePostRequest) -> PostResponse:
        actor.require(Capability.CREATE_CONTENT)
        post = Post(
            title=data.title,
            content=data.content,
            featured_image_url=data.featured_image_url,
            slug=slugify(data.title),
            published_at=utcnow() if data.publish else None,
            user_id=actor.id,
            status=EntityStatus.ACTIVE,
        )
        self.session.add(post)
        await self.session.commit()
        await self.session.refresh(post, ["owner"])

        logger.info("post_created", post_id=str(post.id), slug=post.slug)
        return await self._to_response(post)

    async def _get_owned_post(self, actor: Actor, post_id: UUID) -> Post:
        post = await self.get_post_entity(post_id)
        if not actor.owns(post.user_id):
            msg = "You can only change your own posts"
            raise PermissionDeniedError(msg)
        return post

    async def update_post(
        self,
        actor: Actor,
        post_id: UUID,
        data: UpdatePostRequest,
    ) -> PostResponse:
        """Update an owned post. The slug is kept stable across title edits."""
        post = await self._get_owned_post(actor, post_id)
        actor.require(Capability.EDIT_OWN)
        if not is_visible(post.status):
            msg = "Post not found"
            raise NotFoundError(msg)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(post, field, value)
        await self.session.commit()

        logger.info("post_updated", post_id=str(post.id))
        return await self._to_response(post)

    async def delete_post(self, actor: Actor, post_id: UUID) -> None:
        post = await self._get_owned_post(actor, post_id)
        actor.require(Capability.DELETE_OWN)
        if post.status == EntityStatus.DELETED:
            return

        post.status = ensure_transition(post.status, EntityStatus.DELETED)
        await self.session.commit()
        logger.info("post_deleted", post_id=str(post.id))

    async def record_view(self, post_id: UUID) -> int:
        post = await self.get_post_entity(post_id)
        if not is_visible(post.status):
            msg = "Post not found"
            raise NotFoundError(msg)

        await self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(view_count=Post.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        await self.session.refresh(post, ["view_count"])
        return post.view_count
