"""Reaction endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from commentable.auth.dependencies import ActiveActor
from commentable.core.pagination import Page, PageParams

from .dependencies import ReactionServiceDep
from .schemas import (
    ReactionResponse,
    ReactionSummary,
    UpsertReactionRequest,
    UpsertReactionResponse,
)


router = APIRouter(prefix="/v1/reactions", tags=["reactions"])


@router.post("/upsert", response_model=UpsertReactionResponse, summary="React")
async def upsert_reaction(
    data: UpsertReactionRequest,
    actor: ActiveActor,
    service: ReactionServiceDep,
) -> UpsertReactionResponse:
    """Add, change or toggle off the caller's reaction on a comment.

    Sending the same type twice removes the reaction (``reaction`` is null).
    """
    reaction = await service.upsert(actor, data.comment_id, data.reaction_type)
    return UpsertReactionResponse(
        reaction=ReactionResponse.model_validate(reaction) if reaction else None,
        summary=await service.summary(data.comment_id),
    )


@router.get("", response_model=Page[ReactionResponse], summary="List reactions")
async def list_reactions(
    service: ReactionServiceDep,
    comment_id: UUID | None = None,
    user_id: UUID | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int | None, Query(ge=1)] = None,
    sort_order: str | None = None,
) -> Page[ReactionResponse]:
    params = PageParams.build(page, page_size, sort_order=sort_order)
    return await service.list_reactions(params, comment_id=comment_id, user_id=user_id)


@router.get(
    "/summary/{comment_id}",
    response_model=ReactionSummary,
    summary="Reaction counts",
)
async def reaction_summary(comment_id: UUID, service: ReactionServiceDep) -> ReactionSummary:
    return await service.summary(comment_id)


@router.delete(
    "/{reaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove reaction",
)
async def delete_reaction(
    reaction_id: UUID,
    actor: ActiveActor,
    service: ReactionServiceDep,
) -> None:
    await service.delete_reaction(actor, reaction_id)
