"""Video endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from commentable.auth.dependencies import ActiveActor
from commentable.config import get_settings
from commentable.core.pagination import Page, PageParams

from .dependencies import VideoServiceDep
from .schemas import CreateVideoRequest, UpdateVideoRequest, VideoResponse


router = APIRouter(prefix="/v1/videos", tags=["videos"])


@router.get("", response_model=Page[VideoResponse], summary="List videos")
async def list_videos(
    service: VideoServiceDep,
    search: Annotated[str | None, Query(max_length=200)] = None,
    user_id: UUID | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int | None, Query(ge=1)] = None,
    sort_by: Annotated[
        str | None, Query(description="created_at, updated_at, title or view_count")
    ] = None,
    sort_order: str | None = None,
) -> Page[VideoResponse]:
    params = PageParams.build(
        page,
        page_size,
        sort_by,
        sort_order,
        default_page_size=get_settings().videos_default_page_size,
    )
    return await service.list_videos(params, search=search, user_id=user_id)


@router.post(
    "",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Publish video",
)
async def create_video(
    data: CreateVideoRequest,
    actor: ActiveActor,
    service: VideoServiceDep,
) -> VideoResponse:
    return await service.create_video(actor, data)


@router.get("/{video_id}", response_model=VideoResponse, summary="Get video")
async def get_video(video_id: UUID, service: VideoServiceDep) -> VideoResponse:
    return await service.get_video(video_id)


@router.put("/{video_id}", response_model=VideoResponse, summary="Update video")
async def update_video(
    video_id: UUID,
    data: UpdateVideoRequest,
    actor: ActiveActor,
    service: VideoServiceDep,
) -> VideoResponse:
    return await service.update_video(actor, video_id, data)


@router.delete(
    "/{video_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete video",
)
async def delete_video(
    video_id: UUID,
    actor: ActiveActor,
    service: VideoServiceDep,
) -> None:
    await service.delete_video(actor, video_id)


@router.post("/{video_id}/views", summary="Record a view")
async def record_view(video_id: UUID, service: VideoServiceDep) -> dict[str, int]:
    return {"view_count": await service.record_view(video_id)}
