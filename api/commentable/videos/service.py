"""Video service: catalogue listing and owner-managed CRUD."""

from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from commentable.auth.permissions import Capability
from commentable.auth.schemas import Actor
from commentable.comments.aggregation import count_comments
from commentable.comments.models import CommentableType
from commentable.core.exceptions import NotFoundError, PermissionDeniedError
from commentable.core.logging import get_logger
from commentable.core.pagination import Page, PageParams, paginate
from commentable.core.status import (
    VISIBLE_STATUSES,
    EntityStatus,
    ensure_transition,
    is_visible,
)

from .models import Video
from .schemas import CreateVideoRequest, UpdateVideoRequest, VideoResponse


logger = get_logger(__name__)


class VideoService:
    """Service for videos."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_video_entity(self, video_id: UUID) -> Video:
        video = await self.session.get(Video, video_id)
        if video is None:
            msg = "Video not found"
            raise NotFoundError(msg)
        return video

    async def _to_response(self, video: Video) -> VideoResponse:
        counts = await count_comments(self.session, CommentableType.VIDEO, [video.id])
        return VideoResponse.from_video(video, counts.get(video.id, 0))

    async def list_videos(
        self,
        params: PageParams,
        search: str | None = None,
        user_id: UUID | None = None,
    ) -> Page[VideoResponse]:
        """List visible videos, optionally searching title and description."""
        stmt = select(Video).where(Video.status.in_(VISIBLE_STATUSES))
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(Video.title.ilike(pattern), Video.description.ilike(pattern))
            )
        if user_id is not None:
            stmt = stmt.where(Video.user_id == user_id)

        videos, total = await paginate(
            self.session,
            stmt,
            params,
            sort_columns={
                "created_at": Video.created_at,
                "updated_at": Video.updated_at,
                "title": Video.title,
                "view_count": Video.view_count,
            },
            default_sort="created_at",
            tiebreaker=Video.id,
        )
        counts = await count_comments(
            self.session, CommentableType.VIDEO, [video.id for video in videos]
        )
        items = [VideoResponse.from_video(v, counts.get(v.id, 0)) for v in videos]
        return Page[VideoResponse].create(items, total, params)

    async def get_video(self, video_id: UUID) -> VideoResponse:
        """Resolve a video by id in any status."""
        return await self._to_response(await self.get_video_entity(video_id))

    async def create_video(self, actor: Actor, data: CreateVideoRequest) -> VideoResponse:
        actor.require(Capability.CREATE_CONTENT)
        video = Video(**data.model_dump(), user_id=actor.id, status=EntityStatus.ACTIVE)
        self.session.add(video)
        await self.session.commit()
        await self.session.refresh(video, ["owner"])

        logger.info("video_created", video_id=str(video.id))
        return await self._to_response(video)

    async def _get_owned_video(self, actor: Actor, video_id: UUID) -> Video:
        video = await self.get_video_entity(video_id)
        if not actor.owns(video.user_id):
            msg = "You can only change your own videos"
            raise PermissionDeniedError(msg)
        return video

    async def update_video(
        self,
        actor: Actor,
        video_id: UUID,
        data: UpdateVideoRequest,
    ) -> VideoResponse:
        video = await self._get_owned_video(actor, video_id)
        actor.require(Capability.EDIT_OWN)
        if not is_visible(video.status):
            msg = "Video not found"
            raise NotFoundError(msg)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(video, field, value)
        await self.session.commit()

        logger.info("video_updated", video_id=str(video.id))
        return await self._to_response(video)

    async def delete_video(self, actor: Actor, video_id: UUID) -> None:
        """Soft delete (status ``deleted``); repeated deletes are no-ops."""
        video = await self._get_owned_video(actor, video_id)
        actor.require(Capability.DELETE_OWN)
        if video.status == EntityStatus.DELETED:
            return

        video.status = ensure_transition(video.status, EntityStatus.DELETED)
        await self.session.commit()
        logger.info("video_deleted", video_id=str(video.id))

    async def record_view(self, video_id: UUID) -> int:
        """Increment the view counter atomically and return the new value."""
        video = await self.get_video_entity(video_id)
        if not is_visible(video.status):
            msg = "Video not found"
            raise NotFoundError(msg)

        await self.session.execute(
            update(Video)
            .where(Video.id == video_id)
            .values(view_count=Video.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        await self.session.refresh(video, ["view_count"])
        return video.view_count
