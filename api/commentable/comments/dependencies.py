"""FastAPI dependencies for the comment system."""

from typing import Annotated

from fastapi import Depends, Query

from commentable.core.database import DbSession
from commentable.core.pagination import PageParams
from commentable.core.rate_limit import RateLimiterDep

from .service import CommentService


async def get_comment_service(
    session: DbSession,
    rate_limiter: RateLimiterDep,
) -> CommentService:
    return CommentService(session, rate_limiter)


def comment_page_params(
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int | None, Query(ge=1)] = None,
    sort_by: Annotated[
        str | None, Query(description="created_at, updated_at or reply_count")
    ] = None,
    sort_order: Annotated[str | None, Query(description="asc or desc")] = None,
) -> PageParams:
    return PageParams.build(page, page_size, sort_by, sort_order)


def reply_page_params(
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int | None, Query(ge=1)] = None,
    sort_by: Annotated[str | None, Query()] = None,
    sort_order: Annotated[str | None, Query()] = "asc",
) -> PageParams:
    """Replies read oldest first unless asked otherwise."""
    return PageParams.build(page, page_size, sort_by, sort_order)


CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]
CommentPageParams = Annotated[PageParams, Depends(comment_page_params)]
ReplyPageParams = Annotated[PageParams, Depends(reply_page_params)]
