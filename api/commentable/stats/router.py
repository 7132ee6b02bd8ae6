"""Stats endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from commentable.auth.dependencies import OptionalActor
from commentable.core.database import DbSession

from .schemas import StatsResponse
from .service import StatsService


router = APIRouter(prefix="/v1/stats", tags=["stats"])


async def get_stats_service(session: DbSession) -> StatsService:
    return StatsService(session)


@router.get("", response_model=StatsResponse, summary="Platform stats")
async def get_stats(
    viewer: OptionalActor,
    service: Annotated[StatsService, Depends(get_stats_service)],
) -> StatsResponse:
    return await service.get_stats(viewer)
