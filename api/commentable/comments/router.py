"""Comment API endpoints.

Provides routes for:
- Listing comments on a video or post (top-level, or replies to a parent)
- Comment create, read, update and soft delete
- Reply pages and nested threads
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from commentable.auth.dependencies import ActiveActor, OptionalActor
from commentable.core.pagination import Page

from .dependencies import CommentPageParams, CommentServiceDep, ReplyPageParams
from .models import CommentableType
from .schemas import (
    CommentFilters,
    CommentResponse,
    CommentThreadResponse,
    CreateCommentRequest,
    UpdateCommentRequest,
)


router = APIRouter(prefix="/v1/comments", tags=["comments"])


@router.get("", response_model=Page[CommentResponse], summary="List comments")
async def list_comments(
    service: CommentServiceDep,
    params: CommentPageParams,
    viewer: OptionalActor,
    commentable_type: CommentableType | None = None,
    commentable_id: UUID | None = None,
    parent_comment_id: UUID | None = None,
    user_id: UUID | None = None,
    search: Annotated[str | None, Query(max_length=200)] = None,
) -> Page[CommentResponse]:
    """List visible comments.

    Top-level comments only, unless ``parent_comment_id`` selects the replies
    of one comment. Each item carries its reaction summary and, for signed-in
    viewers, their own reaction.
    """
    filters = CommentFilters(
        commentable_type=commentable_type,
        commentable_id=commentable_id,
        parent_comment_id=parent_comment_id,
        user_id=user_id,
        search=search,
    )
    return await service.list_comments(filters, params, viewer)


@router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
)
async def create_comment(
    data: CreateCommentRequest,
    actor: ActiveActor,
    service: CommentServiceDep,
) -> CommentResponse:
    """Comment on a video or post, or reply to a comment in the same thread.

    Rate limited per user. Content is HTML-escaped except for basic
    formatting tags.
    """
    return await service.create_comment(actor, data)


@router.get("/{comment_id}", response_model=CommentResponse, summary="Get comment")
async def get_comment(
    comment_id: UUID,
    service: CommentServiceDep,
    viewer: OptionalActor,
) -> CommentResponse:
    return await service.get_comment(comment_id, viewer)


@router.get(
    "/{comment_id}/replies",
    response_model=Page[CommentResponse],
    summary="List replies",
)
async def list_replies(
    comment_id: UUID,
    service: CommentServiceDep,
    params: ReplyPageParams,
    viewer: OptionalActor,
) -> Page[CommentResponse]:
    """Direct replies of a comment.

    Unlike the ``parent_comment_id`` filter on the listing, which yields an
    empty page for an unknown parent, this answers 404 when the comment
    does not exist.
    """
    return await service.list_replies(comment_id, params, viewer)


@router.get(
    "/{comment_id}/thread",
    response_model=CommentThreadResponse,
    summary="Get reply tree",
)
async def get_thread(
    comment_id: UUID,
    service: CommentServiceDep,
    viewer: OptionalActor,
    depth: Annotated[int | None, Query(ge=1)] = None,
) -> CommentThreadResponse:
    """Return the comment with replies nested up to ``depth`` levels."""
    return await service.get_thread(comment_id, depth, viewer)


@router.put("/{comment_id}", response_model=CommentResponse, summary="Edit comment")
async def update_comment(
    comment_id: UUID,
    data: UpdateCommentRequest,
    actor: ActiveActor,
    service: CommentServiceDep,
) -> CommentResponse:
    return await service.update_comment(actor, comment_id, data)


@router.delete(
    "/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete comment",
)
async def delete_comment(
    comment_id: UUID,
    actor: ActiveActor,
    service: CommentServiceDep,
) -> None:
    await service.delete_comment(actor, comment_id)
