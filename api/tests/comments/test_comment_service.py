"""Tests for comment creation, listing, threads and soft deletion."""

from datetime import timedelta
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest
import pytest_asyncio

from commentable.auth.permissions import UserRole
from commentable.comments.models import Comment, CommentableType
from commentable.comments.schemas import (
    DELETED_PLACEHOLDER,
    CommentFilters,
    CreateCommentRequest,
    UpdateCommentRequest,
)
from commentable.comments.service import CommentService, sanitize_content
from commentable.core.exceptions import (
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
)
from commentable.core.pagination import PageParams
from commentable.core.rate_limit import RateLimiter
from commentable.core.status import EntityStatus


@pytest.fixture
def service(session) -> CommentService:
    return CommentService(session)


@pytest_asyncio.fixture
async def thread(make_user, make_post):
    """A post by alice plus two other users."""
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")
    post = await make_post(alice)
    return alice, bob, carol, post


def on_post(post, content: str = "Nice post", parent_id=None) -> CreateCommentRequest:
    return CreateCommentRequest(
        content=content,
        commentable_type=CommentableType.POST,
        commentable_id=post.id,
        parent_comment_id=parent_id,
    )


class TestSanitizeContent:
    def test_escapes_script(self) -> None:
        assert sanitize_content("<script>x</script>") == "&lt;script&gt;x&lt;/script&gt;"

    def test_keeps_basic_formatting(self) -> None:
        assert sanitize_content("<b>bold</b> & <i>it</i>") == "<b>bold</b> &amp; <i>it</i>"


class TestCreateComment:
    """Tests for create_comment."""

    @pytest.mark.asyncio
    async def test_top_level_comment(self, service, session, thread, actor_for) -> None:
        _, bob, _, post = thread

        response = await service.create_comment(actor_for(bob), on_post(post))

        assert response.author.username == "bob"
        assert response.parent_comment_id is None
        assert response.reply_count == 0
        assert response.reactions.total == 0
        await session.refresh(post)
        assert post.comment_count == 1

    @pytest.mark.asyncio
    async def test_length_limit_comes_from_settings(self, service, thread, actor_for) -> None:
        _, bob, _, post = thread
        long_text = "a" * 6000

        with pytest.raises(InvalidRequestError):
            await service.create_comment(actor_for(bob), on_post(post, long_text))

        service.settings = service.settings.model_copy(update={"comment_max_length": 8000})
        response = await service.create_comment(actor_for(bob), on_post(post, long_text))

        assert len(response.content) == 6000

    @pytest.mark.asyncio
    async def test_reply_updates_parent_count(self, service, session, thread, actor_for) -> None:
        _, bob, carol, post = thread
        parent = await service.create_comment(actor_for(bob), on_post(post))

        reply = await service.create_comment(
            actor_for(carol), on_post(post, "Agreed", parent.id)
        )

        assert reply.parent_comment_id == parent.id
        assert (await service.get_comment(parent.id)).reply_count == 1
        stored = await session.get(Comment, parent.id)
        assert stored.reply_count == 1

    @pytest.mark.asyncio
    async def test_reply_must_stay_in_thread(
        self, service, thread, make_post, actor_for
    ) -> None:
        """A parent on another post is rejected."""
        alice, bob, _, post = thread
        other_post = await make_post(alice, title="Other")
        parent = await service.create_comment(actor_for(bob), on_post(post))

        with pytest.raises(InvalidRequestError):
            await service.create_comment(
                actor_for(bob), on_post(other_post, "Wrong thread", parent.id)
            )

    @pytest.mark.asyncio
    async def test_deleted_commentable_not_found(
        self, service, make_user, make_post, actor_for
    ) -> None:
        alice = await make_user("alice")
        post = await make_post(alice, status=EntityStatus.DELETED)

        with pytest.raises(NotFoundError):
            await service.create_comment(actor_for(alice), on_post(post))

    @pytest.mark.asyncio
    async def test_video_comment(self, service, make_user, make_video, actor_for) -> None:
        alice = await make_user("alice")
        video = await make_video(alice)

        response = await service.create_comment(
            actor_for(alice),
            CreateCommentRequest(
                content="First!",
                commentable_type=CommentableType.VIDEO,
                commentable_id=video.id,
            ),
        )

        assert response.commentable_type == CommentableType.VIDEO

    @pytest.mark.asyncio
    async def test_reply_depth_limit(self, service, thread, actor_for) -> None:
        """Replies deeper than the configured maximum are rejected."""
        _, bob, _, post = thread
        actor = actor_for(bob)
        parent = await service.create_comment(actor, on_post(post))
        for level in range(service.settings.comment_max_reply_depth):
            parent = await service.create_comment(
                actor, on_post(post, f"Level {level + 1}", parent.id)
            )

        with pytest.raises(InvalidRequestError):
            await service.create_comment(actor, on_post(post, "Too deep", parent.id))

    @pytest.mark.asyncio
    async def test_guest_cannot_comment(self, service, thread, make_user, actor_for) -> None:
        _, _, _, post = thread
        guest = await make_user("guest", UserRole.GUEST)

        with pytest.raises(PermissionDeniedError):
            await service.create_comment(actor_for(guest), on_post(post))

    @pytest.mark.asyncio
    async def test_rate_limited(self, session, thread, actor_for) -> None:
        _, bob, _, post = thread
        redis_mock = Mock()
        mock_pipe = Mock()
        mock_pipe.execute = AsyncMock(return_value=[6, True])
        redis_mock.pipeline = Mock(return_value=mock_pipe)
        service = CommentService(session, RateLimiter(redis_mock))

        with pytest.raises(RateLimitExceededError):
            await service.create_comment(actor_for(bob), on_post(post))


class TestListComments:
    """Tests for listings and sorting."""

    @pytest.mark.asyncio
    async def test_top_level_and_replies(self, service, thread, actor_for) -> None:
        """Without a parent filter only top-level comments are listed."""
        _, bob, carol, post = thread
        c1 = await service.create_comment(actor_for(bob), on_post(post, "C1"))
        c2 = await service.create_comment(actor_for(carol), on_post(post, "C2", c1.id))

        top = await service.list_comments(
            CommentFilters(commentable_type=CommentableType.POST, commentable_id=post.id),
            PageParams.build(),
        )
        replies = await service.list_replies(c1.id, PageParams.build())

        assert [item.id for item in top.items] == [c1.id]
        assert top.items[0].reply_count == 1
        assert top.total_count == 1
        assert [item.id for item in replies.items] == [c2.id]

    @pytest.mark.asyncio
    async def test_sort_by_reply_count(self, service, session, thread, actor_for) -> None:
        _, bob, carol, post = thread
        quiet = await service.create_comment(actor_for(bob), on_post(post, "Quiet"))
        busy = await service.create_comment(actor_for(bob), on_post(post, "Busy"))
        for text in ("One", "Two"):
            await service.create_comment(actor_for(carol), on_post(post, text, busy.id))

        filters = CommentFilters(commentable_id=post.id)
        desc = await service.list_comments(
            filters, PageParams.build(sort_by="reply_count", sort_order="desc")
        )
        asc = await service.list_comments(
            filters, PageParams.build(sort_by="reply_count", sort_order="asc")
        )

        assert [item.id for item in desc.items] == [busy.id, quiet.id]
        assert [item.id for item in asc.items] == [quiet.id, busy.id]

    @pytest.mark.asyncio
    async def test_sort_by_created_at(self, service, session, thread, actor_for) -> None:
        _, bob, _, post = thread
        older = await service.create_comment(actor_for(bob), on_post(post, "Older"))
        newer = await service.create_comment(actor_for(bob), on_post(post, "Newer"))
        stored = await session.get(Comment, older.id)
        stored.created_at = stored.created_at - timedelta(hours=1)
        await session.commit()

        page = await service.list_comments(
            CommentFilters(commentable_id=post.id), PageParams.build(sort_order="desc")
        )

        assert [item.id for item in page.items] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_pagination_metadata(self, service, thread, actor_for) -> None:
        _, bob, _, post = thread
        for i in range(5):
            await service.create_comment(actor_for(bob), on_post(post, f"Comment {i}"))

        page = await service.list_comments(
            CommentFilters(commentable_id=post.id), PageParams.build(page=3, page_size=2)
        )

        assert len(page.items) == 1
        assert page.total_count == 5
        assert page.total_pages == 3
        assert page.has_next_page is False
        assert page.has_previous_page is True

    @pytest.mark.asyncio
    async def test_deleted_comments_hidden(self, service, thread, actor_for) -> None:
        _, bob, _, post = thread
        gone = await service.create_comment(actor_for(bob), on_post(post, "Oops"))
        await service.delete_comment(actor_for(bob), gone.id)

        page = await service.list_comments(
            CommentFilters(commentable_id=post.id), PageParams.build()
        )

        assert page.items == []

    @pytest.mark.asyncio
    async def test_unknown_parent_filter_is_empty(self, service, thread, actor_for) -> None:
        _, bob, _, post = thread
        await service.create_comment(actor_for(bob), on_post(post, "Top level"))

        page = await service.list_comments(
            CommentFilters(parent_comment_id=uuid4()), PageParams.build()
        )

        assert page.items == []
        assert page.total_count == 0
        assert page.total_pages == 0

    @pytest.mark.asyncio
    async def test_replies_of_unknown_comment_not_found(self, service) -> None:
        with pytest.raises(NotFoundError):
            await service.list_replies(uuid4(), PageParams.build())


class TestThread:
    """Tests for nested reply trees."""

    @pytest.mark.asyncio
    async def test_nested_replies(self, service, thread, actor_for) -> None:
        _, bob, carol, post = thread
        root = await service.create_comment(actor_for(bob), on_post(post, "Root"))
        child = await service.create_comment(actor_for(carol), on_post(post, "Child", root.id))
        grandchild = await service.create_comment(
            actor_for(bob), on_post(post, "Grandchild", child.id)
        )

        tree = await service.get_thread(root.id)

        assert tree.id == root.id
        assert [reply.id for reply in tree.replies] == [child.id]
        assert [reply.id for reply in tree.replies[0].replies] == [grandchild.id]

    @pytest.mark.asyncio
    async def test_depth_limits_levels(self, service, thread, actor_for) -> None:
        _, bob, carol, post = thread
        root = await service.create_comment(actor_for(bob), on_post(post, "Root"))
        child = await service.create_comment(actor_for(carol), on_post(post, "Child", root.id))
        await service.create_comment(actor_for(bob), on_post(post, "Grandchild", child.id))

        tree = await service.get_thread(root.id, depth=1)

        assert [reply.id for reply in tree.replies] == [child.id]
        assert tree.replies[0].replies == []


class TestUpdateAndDelete:
    """Tests for owner edits and soft deletion."""

    @pytest.mark.asyncio
    async def test_owner_edits(self, service, thread, actor_for) -> None:
        _, bob, _, post = thread
        comment = await service.create_comment(actor_for(bob), on_post(post))

        updated = await service.update_comment(
            actor_for(bob), comment.id, UpdateCommentRequest(content="<b>Edited</b>")
        )

        assert updated.content == "<b>Edited</b>"

    @pytest.mark.asyncio
    async def test_non_owner_cannot_edit(self, service, thread, actor_for) -> None:
        _, bob, carol, post = thread
        comment = await service.create_comment(actor_for(bob), on_post(post))

        with pytest.raises(PermissionDeniedError):
            await service.update_comment(
                actor_for(carol), comment.id, UpdateCommentRequest(content="Mine now")
            )

    @pytest.mark.asyncio
    async def test_delete_masks_content(self, service, thread, make_user, actor_for) -> None:
        """Deleted content is masked except for moderators."""
        _, bob, carol, post = thread
        moderator = await make_user("mod", UserRole.MODERATOR)
        comment = await service.create_comment(actor_for(bob), on_post(post, "Secret"))

        await service.delete_comment(actor_for(bob), comment.id)

        anonymous = await service.get_comment(comment.id)
        as_carol = await service.get_comment(comment.id, actor_for(carol))
        as_moderator = await service.get_comment(comment.id, actor_for(moderator))
        assert anonymous.status == EntityStatus.DELETED
        assert anonymous.content == DELETED_PLACEHOLDER
        assert as_carol.content == DELETED_PLACEHOLDER
        assert as_moderator.content == "Secret"

    @pytest.mark.asyncio
    async def test_delete_reply_updates_parent(self, service, thread, actor_for) -> None:
        _, bob, carol, post = thread
        parent = await service.create_comment(actor_for(bob), on_post(post))
        reply = await service.create_comment(actor_for(carol), on_post(post, "Reply", parent.id))

        await service.delete_comment(actor_for(carol), reply.id)

        assert (await service.get_comment(parent.id)).reply_count == 0

    @pytest.mark.asyncio
    async def test_delete_twice_is_noop(self, service, thread, actor_for) -> None:
        _, bob, _, post = thread
        comment = await service.create_comment(actor_for(bob), on_post(post))
        await service.delete_comment(actor_for(bob), comment.id)

        await service.delete_comment(actor_for(bob), comment.id)

        assert (await service.get_comment(comment.id)).status == EntityStatus.DELETED

    @pytest.mark.asyncio
    async def test_flagged_comment_cannot_be_deleted(
        self, service, session, thread, actor_for
    ) -> None:
        _, bob, _, post = thread
        comment = await service.create_comment(actor_for(bob), on_post(post))
        stored = await session.get(Comment, comment.id)
        stored.status = EntityStatus.FLAGGED
        await session.commit()

        with pytest.raises(ConflictError):
            await service.delete_comment(actor_for(bob), comment.id)

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(self, service, thread, actor_for) -> None:
        _, bob, carol, post = thread
        comment = await service.create_comment(actor_for(bob), on_post(post))

        with pytest.raises(PermissionDeniedError):
            await service.delete_comment(actor_for(carol), comment.id)
