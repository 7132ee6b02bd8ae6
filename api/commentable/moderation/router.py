"""Report and moderation endpoints.

Reports (/v1/reports):
- POST   /                  file a report
- GET    /                  list reports (moderators)
- GET    /mine              the caller's reports
- GET    /{id}              one report (moderators or the reporter)
- POST   /{id}/review       review a pending report (moderators)

Moderation (/v1/moderation):
- GET    /queue                          flagged comments
- PUT    /{entity_type}/{entity_id}/status  change an entity's status
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from commentable.auth.dependencies import ActiveActor
from commentable.comments.schemas import CommentResponse
from commentable.core.pagination import Page

from .dependencies import ModerationServiceDep, ReportPageParams
from .models import ReportCategory, ReportStatus
from .schemas import (
    ChangeStatusRequest,
    CreateReportRequest,
    ModeratedEntity,
    ReportFilters,
    ReportResponse,
    ReviewReportRequest,
    StatusChangeResponse,
)


reports_router = APIRouter(prefix="/v1/reports", tags=["reports"])
moderation_router = APIRouter(prefix="/v1/moderation", tags=["moderation"])


@reports_router.post(
    "",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report comment",
)
async def create_report(
    data: CreateReportRequest,
    actor: ActiveActor,
    service: ModerationServiceDep,
) -> ReportResponse:
    return await service.create_report(actor, data)


@reports_router.get("", response_model=Page[ReportResponse], summary="List reports")
async def list_reports(
    actor: ActiveActor,
    service: ModerationServiceDep,
    params: ReportPageParams,
    report_status: Annotated[ReportStatus | None, Query(alias="status")] = None,
    category: ReportCategory | None = None,
    comment_id: UUID | None = None,
) -> Page[ReportResponse]:
    """Reports for moderators, filterable by status, category and comment."""
    filters = ReportFilters(status=report_status, category=category, comment_id=comment_id)
    return await service.list_reports(actor, filters, params)


@reports_router.get("/mine", response_model=Page[ReportResponse], summary="My reports")
async def list_my_reports(
    actor: ActiveActor,
    service: ModerationServiceDep,
    params: ReportPageParams,
) -> Page[ReportResponse]:
    return await service.list_my_reports(actor, params)


@reports_router.get("/{report_id}", response_model=ReportResponse, summary="Get report")
async def get_report(
    report_id: UUID,
    actor: ActiveActor,
    service: ModerationServiceDep,
) -> ReportResponse:
    return await service.get_report(actor, report_id)


@reports_router.post(
    "/{report_id}/review",
    response_model=ReportResponse,
    summary="Review report",
)
async def review_report(
    report_id: UUID,
    data: ReviewReportRequest,
    actor: ActiveActor,
    service: ModerationServiceDep,
) -> ReportResponse:
    return await service.review_report(actor, report_id, data)


@moderation_router.get(
    "/queue",
    response_model=Page[CommentResponse],
    summary="Flagged comments",
)
async def moderation_queue(
    actor: ActiveActor,
    service: ModerationServiceDep,
    params: ReportPageParams,
) -> Page[CommentResponse]:
    return await service.moderation_queue(actor, params)


@moderation_router.put(
    "/{entity_type}/{entity_id}/status",
    response_model=StatusChangeResponse,
    summary="Change status",
)
async def change_status(
    entity_type: ModeratedEntity,
    entity_id: UUID,
    data: ChangeStatusRequest,
    actor: ActiveActor,
    service: ModerationServiceDep,
) -> StatusChangeResponse:
    return await service.set_status(actor, entity_type, entity_id, data.status, data.reason)
