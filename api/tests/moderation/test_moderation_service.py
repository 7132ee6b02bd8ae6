"""Tests for reports, review linkage and moderator status changes."""

import pytest
import pytest_asyncio

from commentable.auth.permissions import UserRole
from commentable.comments.models import Comment, CommentableType
from commentable.comments.schemas import CreateCommentRequest
from commentable.comments.service import CommentService
from commentable.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from commentable.core.pagination import PageParams
from commentable.core.status import EntityStatus
from commentable.moderation.models import ReportCategory, ReportStatus
from commentable.moderation.schemas import (
    CreateReportRequest,
    ModeratedEntity,
    ReportFilters,
    ReviewReportRequest,
)
from commentable.moderation.service import ModerationService


@pytest.fixture
def service(session) -> ModerationService:
    return ModerationService(session)


@pytest_asyncio.fixture
async def comment(session, make_user, make_post, actor_for) -> Comment:
    author = await make_user("author")
    post = await make_post(author)
    response = await CommentService(session).create_comment(
        actor_for(author),
        CreateCommentRequest(
            content="Questionable take",
            commentable_type=CommentableType.POST,
            commentable_id=post.id,
        ),
    )
    return await session.get(Comment, response.id)


@pytest_asyncio.fixture
async def moderator(make_user):
    return await make_user("mod", UserRole.MODERATOR)


def harassment(comment: Comment) -> CreateReportRequest:
    return CreateReportRequest(
        comment_id=comment.id,
        category=ReportCategory.HARASSMENT,
        description="Rude",
    )


class TestCreateReport:
    """Tests for filing reports."""

    @pytest.mark.asyncio
    async def test_creates_pending_report(self, service, comment, make_user, actor_for) -> None:
        reporter = await make_user("reporter")

        report = await service.create_report(actor_for(reporter), harassment(comment))

        assert report.status == ReportStatus.PENDING
        assert report.category == ReportCategory.HARASSMENT
        assert report.reporter_username == "reporter"
        assert report.comment_content == "Questionable take"
        assert report.reviewed_by is None

    @pytest.mark.asyncio
    async def test_second_report_conflicts(self, service, comment, make_user, actor_for) -> None:
        """One report per user per comment."""
        reporter = actor_for(await make_user("reporter"))
        await service.create_report(reporter, harassment(comment))

        with pytest.raises(ConflictError):
            await service.create_report(
                reporter,
                CreateReportRequest(comment_id=comment.id, category=ReportCategory.SPAM),
            )

    @pytest.mark.asyncio
    async def test_hidden_comment_not_found(
        self, service, session, comment, make_user, actor_for
    ) -> None:
        comment.status = EntityStatus.DELETED
        await session.commit()

        with pytest.raises(NotFoundError):
            await service.create_report(
                actor_for(await make_user("reporter")), harassment(comment)
            )

    @pytest.mark.asyncio
    async def test_escalates_at_threshold(self, service, comment, make_user, actor_for) -> None:
        """Enough pending reports flag the comment."""
        threshold = service.settings.moderation_flag_threshold
        for i in range(threshold - 1):
            await service.create_report(
                actor_for(await make_user(f"reporter{i}")), harassment(comment)
            )
        assert comment.status == EntityStatus.ACTIVE

        await service.create_report(actor_for(await make_user("last")), harassment(comment))

        assert comment.status == EntityStatus.FLAGGED


class TestReviewReport:
    """Tests for review outcomes and their effect on the comment."""

    @pytest.mark.asyncio
    async def test_resolved_removes_comment(
        self, service, comment, moderator, make_user, actor_for
    ) -> None:
        reporter = actor_for(await make_user("reporter"))
        report = await service.create_report(reporter, harassment(comment))

        reviewed = await service.review_report(
            actor_for(moderator),
            report.id,
            ReviewReportRequest(status=ReportStatus.RESOLVED, notes="Confirmed"),
        )

        assert reviewed.status == ReportStatus.RESOLVED
        assert reviewed.reviewed_by == moderator.id
        assert reviewed.reviewer_username == "mod"
        assert reviewed.reviewed_at is not None
        assert reviewed.review_notes == "Confirmed"
        assert comment.status == EntityStatus.REMOVED

        with pytest.raises(NotFoundError):
            await service.create_report(reporter, harassment(comment))

    @pytest.mark.asyncio
    async def test_dismissed_restores_flagged_comment(
        self, service, session, comment, moderator, make_user, actor_for
    ) -> None:
        comment.status = EntityStatus.FLAGGED
        await session.commit()
        report = await service.create_report(
            actor_for(await make_user("reporter")), harassment(comment)
        )

        await service.review_report(
            actor_for(moderator), report.id, ReviewReportRequest(status=ReportStatus.DISMISSED)
        )

        assert comment.status == EntityStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_dismissed_keeps_flag_while_reports_pending(
        self, service, session, comment, moderator, make_user, actor_for
    ) -> None:
        comment.status = EntityStatus.FLAGGED
        await session.commit()
        first = await service.create_report(
            actor_for(await make_user("first")), harassment(comment)
        )
        await service.create_report(actor_for(await make_user("second")), harassment(comment))

        await service.review_report(
            actor_for(moderator), first.id, ReviewReportRequest(status=ReportStatus.DISMISSED)
        )

        assert comment.status == EntityStatus.FLAGGED

    @pytest.mark.asyncio
    async def test_reviewed_leaves_comment(
        self, service, comment, moderator, make_user, actor_for
    ) -> None:
        report = await service.create_report(
            actor_for(await make_user("reporter")), harassment(comment)
        )

        await service.review_report(
            actor_for(moderator), report.id, ReviewReportRequest(status=ReportStatus.REVIEWED)
        )

        assert comment.status == EntityStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_only_pending_reports(
        self, service, comment, moderator, make_user, actor_for
    ) -> None:
        report = await service.create_report(
            actor_for(await make_user("reporter")), harassment(comment)
        )
        decision = ReviewReportRequest(status=ReportStatus.REVIEWED)
        await service.review_report(actor_for(moderator), report.id, decision)

        with pytest.raises(ConflictError):
            await service.review_report(actor_for(moderator), report.id, decision)

    @pytest.mark.asyncio
    async def test_users_cannot_review(self, service, comment, make_user, actor_for) -> None:
        reporter = actor_for(await make_user("reporter"))
        report = await service.create_report(reporter, harassment(comment))

        with pytest.raises(PermissionDeniedError):
            await service.review_report(
                reporter, report.id, ReviewReportRequest(status=ReportStatus.DISMISSED)
            )

    def test_pending_is_not_an_outcome(self) -> None:
        with pytest.raises(ValueError):
            ReviewReportRequest(status=ReportStatus.PENDING)


class TestListReports:
    @pytest.mark.asyncio
    async def test_moderator_filters_by_status(
        self, service, comment, moderator, make_user, actor_for
    ) -> None:
        first = await service.create_report(
            actor_for(await make_user("first")), harassment(comment)
        )
        await service.create_report(actor_for(await make_user("second")), harassment(comment))
        await service.review_report(
            actor_for(moderator), first.id, ReviewReportRequest(status=ReportStatus.REVIEWED)
        )

        pending = await service.list_reports(
            actor_for(moderator), ReportFilters(status=ReportStatus.PENDING), PageParams.build()
        )

        assert pending.total_count == 1
        assert pending.items[0].reporter_username == "second"

    @pytest.mark.asyncio
    async def test_users_cannot_list(self, service, make_user, actor_for) -> None:
        with pytest.raises(PermissionDeniedError):
            await service.list_reports(
                actor_for(await make_user("nosy")), ReportFilters(), PageParams.build()
            )

    @pytest.mark.asyncio
    async def test_reporter_sees_own_reports(
        self, service, comment, make_user, actor_for
    ) -> None:
        reporter = actor_for(await make_user("reporter"))
        other = actor_for(await make_user("other"))
        report = await service.create_report(reporter, harassment(comment))

        mine = await service.list_my_reports(reporter, PageParams.build())

        assert [item.id for item in mine.items] == [report.id]
        assert (await service.get_report(reporter, report.id)).id == report.id
        with pytest.raises(PermissionDeniedError):
            await service.get_report(other, report.id)


class TestSetStatus:
    """Tests for moderator status changes."""

    @pytest.mark.asyncio
    async def test_flag_then_remove_post(
        self, service, make_user, make_post, moderator, actor_for
    ) -> None:
        post = await make_post(await make_user("writer"))
        actor = actor_for(moderator)

        await service.set_status(actor, ModeratedEntity.POST, post.id, EntityStatus.FLAGGED)
        result = await service.set_status(
            actor, ModeratedEntity.POST, post.id, EntityStatus.REMOVED
        )

        assert result.previous_status == EntityStatus.FLAGGED
        assert result.status == EntityStatus.REMOVED

    @pytest.mark.asyncio
    async def test_moderator_cannot_skip_states(
        self, service, make_user, make_video, moderator, actor_for
    ) -> None:
        video = await make_video(await make_user("creator"))

        with pytest.raises(ConflictError):
            await service.set_status(
                actor_for(moderator), ModeratedEntity.VIDEO, video.id, EntityStatus.REMOVED
            )

    @pytest.mark.asyncio
    async def test_admin_forces_terminal_state(
        self, service, session, comment, make_user, actor_for
    ) -> None:
        """Admins may revert a removed comment."""
        admin = await make_user("root", UserRole.ADMIN)
        comment.status = EntityStatus.REMOVED
        await session.commit()

        result = await service.set_status(
            actor_for(admin), ModeratedEntity.COMMENT, comment.id, EntityStatus.ACTIVE
        )

        assert result.status == EntityStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_moderator_cannot_touch_admin(
        self, service, make_user, moderator, actor_for
    ) -> None:
        admin = await make_user("root", UserRole.ADMIN)

        with pytest.raises(PermissionDeniedError):
            await service.set_status(
                actor_for(moderator), ModeratedEntity.USER, admin.id, EntityStatus.FLAGGED
            )

    @pytest.mark.asyncio
    async def test_users_cannot_moderate(self, service, comment, make_user, actor_for) -> None:
        with pytest.raises(PermissionDeniedError):
            await service.set_status(
                actor_for(await make_user("nosy")),
                ModeratedEntity.COMMENT,
                comment.id,
                EntityStatus.FLAGGED,
            )

    @pytest.mark.asyncio
    async def test_queue_lists_flagged_comments(
        self, service, comment, moderator, actor_for
    ) -> None:
        await service.set_status(
            actor_for(moderator), ModeratedEntity.COMMENT, comment.id, EntityStatus.FLAGGED
        )

        queue = await service.moderation_queue(actor_for(moderator), PageParams.build())

        assert [item.id for item in queue.items] == [comment.id]
