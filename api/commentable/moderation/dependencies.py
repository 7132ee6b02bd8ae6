"""FastAPI dependencies for moderation."""

from typing import Annotated

from fastapi import Depends, Query

from commentable.core.database import DbSession
from commentable.core.pagination import PageParams
from commentable.core.rate_limit import RateLimiterDep

from .service import ModerationService


async def get_moderation_service(
    session: DbSession,
    rate_limiter: RateLimiterDep,
) -> ModerationService:
    return ModerationService(session, rate_limiter)


def report_page_params(
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int | None, Query(ge=1)] = None,
    sort_by: Annotated[
        str | None, Query(description="created_at, updated_at or status")
    ] = None,
    sort_order: Annotated[str | None, Query(description="asc or desc")] = None,
) -> PageParams:
    return PageParams.build(page, page_size, sort_by, sort_order)


ModerationServiceDep = Annotated[ModerationService, Depends(get_moderation_service)]
ReportPageParams = Annotated[PageParams, Depends(report_page_params)]
