"""Dashboard counters."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from commentable.auth.permissions import Capability
from commentable.auth.schemas import Actor
from commentable.comments.models import Comment
from commentable.core.status import VISIBLE_STATUSES, EntityStatus
from commentable.moderation.models import Report, ReportStatus
from commentable.posts.models import Post
from commentable.reactions.models import Reaction
from commentable.videos.models import Video

from .schemas import StatsResponse


class StatsService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _count(self, column, *criteria) -> int:
        return (await self.session.scalar(select(func.count(column)).where(*criteria))) or 0

    async def get_stats(self, viewer: Actor | None = None) -> StatsResponse:
        """Count visible content; personal and moderation counts depend on the viewer.

        Visible means active or flagged, the same rule comment counts use.
        """
        stats = StatsResponse(
            total_videos=await self._count(Video.id, Video.status.in_(VISIBLE_STATUSES)),
            total_posts=await self._count(Post.id, Post.status.in_(VISIBLE_STATUSES)),
            total_comments=await self._count(
                Comment.id, Comment.status.in_(VISIBLE_STATUSES)
            ),
            total_reactions=await self._count(Reaction.id),
        )

        if viewer is not None:
            stats.my_videos = await self._count(
                Video.id, Video.user_id == viewer.id, Video.status.in_(VISIBLE_STATUSES)
            )
            stats.my_posts = await self._count(
                Post.id, Post.user_id == viewer.id, Post.status.in_(VISIBLE_STATUSES)
            )
            stats.my_comments = await self._count(
                Comment.id,
                Comment.user_id == viewer.id,
                Comment.status.in_(VISIBLE_STATUSES),
            )

            if viewer.can(Capability.VIEW_REPORTS):
                stats.pending_reports = await self._count(
                    Report.id, Report.status == ReportStatus.PENDING
                )
                stats.flagged_comments = await self._count(
                    Comment.id, Comment.status == EntityStatus.FLAGGED
                )

        return stats
