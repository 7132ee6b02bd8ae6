"""Post endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from commentable.auth.dependencies import ActiveActor
from commentable.config import get_settings
from commentable.core.pagination import Page, PageParams

from .dependencies import PostServiceDep
from .schemas import CreatePostRequest, PostResponse, UpdatePostRequest


router = APIRouter(prefix="/v1/posts", tags=["posts"])


@router.get("", response_model=Page[PostResponse], summary="List posts")
async def list_posts(
    service: PostServiceDep,
    search: Annotated[str | None, Query(max_length=200)] = None,
    user_id: UUID | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int | None, Query(ge=1)] = None,
    sort_by: Annotated[
        str | None, Query(description="created_at, updated_at or title")
    ] = None,
    sort_order: str | None = None,
) -> Page[PostResponse]:
    params = PageParams.build(
        page,
        page_size,
        sort_by,
        sort_order,
        default_page_size=get_settings().posts_default_page_size,
    )
    return await service.list_posts(params, search=search, user_id=user_id)


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Publish post",
)
async def create_post(
    data: CreatePostRequest,
    actor: ActiveActor,
    service: PostServiceDep,
) -> PostResponse:
    return await service.create_post(actor, data)


@router.get("/slug/{slug}", response_model=PostResponse, summary="Get post by slug")
async def get_post_by_slug(slug: str, service: PostServiceDep) -> PostResponse:
    return await service.get_post_by_slug(slug)


@router.get("/{post_id}", response_model=PostResponse, summary="Get post")
async def get_post(post_id: UUID, service: PostServiceDep) -> PostResponse:
    return await service.get_post(post_id)


@router.put("/{post_id}", response_model=PostResponse, summary="Update post")
async def update_post(
    post_id: UUID,
    data: UpdatePostRequest,
    actor: ActiveActor,
    service: PostServiceDep,
) -> PostResponse:
    return await service.update_post(actor, post_id, data)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete post",
)
async def delete_post(
    post_id: UUID,
    actor: ActiveActor,
    service: PostServiceDep,
) -> None:
    await service.delete_post(actor, post_id)


@router.post("/{post_id}/views", summary="Record a view")
async def record_view(post_id: UUID, service: PostServiceDep) -> dict[str, int]:
    return {"view_count": await service.record_view(post_id)}
