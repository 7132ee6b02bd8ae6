"""Moderation service layer.

Business logic for:
- Filing reports against comments (one per user per comment)
- Escalating comments to ``flagged`` once enough reports are pending
- Reviewing reports and applying the outcome to the reported comment
- Moderator status changes on any moderated entity
- The queue of flagged comments
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from commentable.auth.permissions import Capability, get_role_level
from commentable.auth.schemas import Actor
from commentable.comments.aggregation import sync_comment_counters
from commentable.comments.models import Comment
from commentable.comments.schemas import CommentResponse
from commentable.comments.service import CommentService
from commentable.config import get_settings
from commentable.core.database import utcnow
from commentable.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from commentable.core.logging import get_logger
from commentable.core.pagination import Page, PageParams, paginate
from commentable.core.rate_limit import RateLimiter
from commentable.core.status import EntityStatus, ensure_transition, is_visible
from commentable.posts.models import Post
from commentable.users.models import User
from commentable.videos.models import Video

from .models import Report, ReportStatus
from .schemas import (
    CreateReportRequest,
    ModeratedEntity,
    ReportFilters,
    ReportResponse,
    ReviewReportRequest,
    StatusChangeResponse,
)


logger = get_logger(__name__)

MODERATED_MODELS: dict[ModeratedEntity, type[Video | Post | Comment | User]] = {
    ModeratedEntity.VIDEO: Video,
    ModeratedEntity.POST: Post,
    ModeratedEntity.COMMENT: Comment,
    ModeratedEntity.USER: User,
}

REPORT_SORT_COLUMNS = {
    "created_at": Report.created_at,
    "updated_at": Report.updated_at,
    "status": Report.status,
}


class ModerationService:
    """Service for reports and moderation actions."""

    def __init__(self, session: AsyncSession, rate_limiter: RateLimiter | None = None):
        self.session = session
        self.rate_limiter = rate_limiter or RateLimiter()
        self.settings = get_settings()

    async def count_pending_reports(
        self,
        comment_id: UUID,
        exclude_report_id: UUID | None = None,
    ) -> int:
        stmt = select(func.count(Report.id)).where(
            Report.comment_id == comment_id,
            Report.status == ReportStatus.PENDING,
        )
        if exclude_report_id is not None:
            stmt = stmt.where(Report.id != exclude_report_id)
        return (await self.session.scalar(stmt)) or 0

    # ==========================================================================
    # Reports
    # ==========================================================================

    async def create_report(
        self,
        actor: Actor,
        data: CreateReportRequest,
    ) -> ReportResponse:
        """Report a comment for moderation.

        Raises:
            NotFoundError: If the comment does not exist or is hidden
            ConflictError: If the actor already reported this comment
        """
        actor.require(Capability.REPORT, "You are not allowed to report content")
        await self.rate_limiter.hit(
            "reports", actor.id, self.settings.rate_limit_reports_per_hour, 3600
        )

        comment = await self.session.get(Comment, data.comment_id)
        if comment is None or not is_visible(comment.status):
            msg = "Comment not found"
            raise NotFoundError(msg)

        already_reported = await self.session.scalar(
            select(Report.id).where(
                Report.user_id == actor.id,
                Report.comment_id == comment.id,
            )
        )
        if already_reported is not None:
            msg = "You have already reported this comment"
            raise ConflictError(msg)

        report = Report(
            user_id=actor.id,
            comment_id=comment.id,
            category=data.category,
            description=data.description,
            status=ReportStatus.PENDING,
        )
        self.session.add(report)
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            msg = "You have already reported this comment"
            raise ConflictError(msg) from e

        pending = await self.count_pending_reports(comment.id)
        threshold = self.settings.moderation_flag_threshold
        if threshold and pending >= threshold and comment.status == EntityStatus.ACTIVE:
            comment.status = ensure_transition(comment.status, EntityStatus.FLAGGED)
            logger.warning(
                "comment_flagged",
                comment_id=str(comment.id),
                pending_reports=pending,
            )

        await self.session.commit()
        await self.session.refresh(report, ["reporter", "comment"])

        logger.info(
            "report_created",
            report_id=str(report.id),
            comment_id=str(comment.id),
            category=report.category.value,
        )
        return ReportResponse.from_report(report)

    async def get_report_entity(self, report_id: UUID) -> Report:
        report = await self.session.get(Report, report_id)
        if report is None:
            msg = "Report not found"
            raise NotFoundError(msg)
        return report

    async def get_report(self, actor: Actor, report_id: UUID) -> ReportResponse:
        """Moderators see any report, reporters see their own."""
        report = await self.get_report_entity(report_id)
        if not actor.owns(report.user_id) and not actor.can(Capability.VIEW_REPORTS):
            msg = "You can only view your own reports"
            raise PermissionDeniedError(msg)
        return ReportResponse.from_report(report)

    async def _page_reports(self, stmt, params: PageParams) -> Page[ReportResponse]:
        reports, total = await paginate(
            self.session,
            stmt,
            params,
            sort_columns=REPORT_SORT_COLUMNS,
            default_sort="created_at",
            tiebreaker=Report.id,
        )
        items = [ReportResponse.from_report(report) for report in reports]
        return Page[ReportResponse].create(items, total, params)

    async def list_reports(
        self,
        actor: Actor,
        filters: ReportFilters,
        params: PageParams,
    ) -> Page[ReportResponse]:
        actor.require(Capability.VIEW_REPORTS)
        stmt = select(Report)
        if filters.status is not None:
            stmt = stmt.where(Report.status == filters.status)
        if filters.category is not None:
            stmt = stmt.where(Report.category == filters.category)
        if filters.comment_id is not None:
            stmt = stmt.where(Report.comment_id == filters.comment_id)
        return await self._page_reports(stmt, params)

    async def list_my_reports(self, actor: Actor, params: PageParams) -> Page[ReportResponse]:
        return await self._page_reports(
            select(Report).where(Report.user_id == actor.id), params
        )

    async def review_report(
        self,
        actor: Actor,
        report_id: UUID,
        data: ReviewReportRequest,
    ) -> ReportResponse:
        """Close a pending report and apply the outcome to its comment.

        - resolved: the comment is removed (flagged first if still active)
        - dismissed: a flagged comment with no other pending reports is restored
        - reviewed: the comment is left as is

        Raises:
            PermissionDeniedError: If the actor cannot review reports
            NotFoundError: If the report does not exist
            ConflictError: If the report was already reviewed
        """
        actor.require(Capability.REVIEW_REPORTS, "Only moderators can review reports")
        report = await self.get_report_entity(report_id)
        if report.status != ReportStatus.PENDING:
            msg = f"Report already {report.status.value}"
            raise ConflictError(msg)

        report.status = data.status
        report.reviewed_by = actor.id
        report.reviewed_at = utcnow()
        report.review_notes = data.notes

        comment = report.comment
        previous = comment.status
        if data.status == ReportStatus.RESOLVED and is_visible(comment.status):
            if comment.status == EntityStatus.ACTIVE:
                comment.status = ensure_transition(comment.status, EntityStatus.FLAGGED)
            comment.status = ensure_transition(comment.status, EntityStatus.REMOVED)
            await sync_comment_counters(self.session, comment)
        elif (
            data.status == ReportStatus.DISMISSED
            and comment.status == EntityStatus.FLAGGED
            and await self.count_pending_reports(comment.id, exclude_report_id=report.id)
            == 0
        ):
            comment.status = ensure_transition(comment.status, EntityStatus.ACTIVE)

        await self.session.commit()
        await self.session.refresh(report, ["reviewer"])

        logger.info(
            "report_reviewed",
            report_id=str(report.id),
            outcome=data.status.value,
            comment_id=str(comment.id),
            comment_status=comment.status.value,
            previous_comment_status=previous.value,
        )
        return ReportResponse.from_report(report)

    # ==========================================================================
    # Moderation
    # ==========================================================================

    async def set_status(
        self,
        actor: Actor,
        entity_type: ModeratedEntity,
        entity_id: UUID,
        status: EntityStatus,
        reason: str | None = None,
    ) -> StatusChangeResponse:
        """Move an entity through the status state machine.

        Admins may force any transition; setting the current status again is
        a no-op.

        Raises:
            PermissionDeniedError: Without moderation rights, or when
                targeting a user at or above the actor's own role
            NotFoundError: If the entity does not exist
            ConflictError: If the transition is not allowed
        """
        actor.require(Capability.MODERATE_CONTENT, "Only moderators can change status")

        entity = await self.session.get(MODERATED_MODELS[entity_type], entity_id)
        if entity is None:
            msg = f"{entity_type.value.capitalize()} not found"
            raise NotFoundError(msg)

        if isinstance(entity, User) and (
            actor.owns(entity.id) or get_role_level(entity.role) >= get_role_level(actor.role)
        ):
            msg = "You cannot moderate this account"
            raise PermissionDeniedError(msg)

        previous = entity.status
        if previous != status:
            entity.status = ensure_transition(
                previous, status, force=actor.can(Capability.ADMINISTER_DATA)
            )
            if isinstance(entity, User):
                entity.deleted_at = utcnow() if status == EntityStatus.DELETED else None
            if isinstance(entity, Comment):
                await sync_comment_counters(self.session, entity)
            await self.session.commit()

            logger.info(
                "status_changed",
                entity_type=entity_type.value,
                entity_id=str(entity_id),
                previous=previous.value,
                status=status.value,
                reason=reason,
            )

        return StatusChangeResponse(
            entity_type=entity_type,
            entity_id=entity_id,
            previous_status=previous,
            status=entity.status,
        )

    async def moderation_queue(
        self,
        actor: Actor,
        params: PageParams,
    ) -> Page[CommentResponse]:
        """Flagged comments awaiting a decision."""
        actor.require(Capability.VIEW_REPORTS)
        comments = CommentService(self.session, self.rate_limiter)
        items, total = await paginate(
            self.session,
            select(Comment).where(Comment.status == EntityStatus.FLAGGED),
            params,
            sort_columns={
                "created_at": Comment.created_at,
                "updated_at": Comment.updated_at,
            },
            default_sort="created_at",
            tiebreaker=Comment.id,
        )
        responses = await comments.to_responses(items, actor)
        return Page[CommentResponse].create(responses, total, params)
