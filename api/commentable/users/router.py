"""User account endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from commentable.auth.dependencies import ActiveActor

from .dependencies import UserServiceDep
from .schemas import (
    ChangeRoleRequest,
    CreateUserRequest,
    UpdateProfileRequest,
    UserProfileResponse,
    UserResponse,
)


router = APIRouter(prefix="/v1/users", tags=["users"])


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
)
async def create_user(data: CreateUserRequest, service: UserServiceDep) -> UserResponse:
    user = await service.create_user(data)
    return UserResponse.model_validate(user)


@router.get("/me", response_model=UserResponse, summary="Current account")
async def get_me(actor: ActiveActor, service: UserServiceDep) -> UserResponse:
    user = await service.get_user(actor.id)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserProfileResponse, summary="Public profile")
async def get_user(user_id: UUID, service: UserServiceDep) -> UserProfileResponse:
    user = await service.get_user(user_id)
    return UserProfileResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse, summary="Update profile")
async def update_profile(
    user_id: UUID,
    data: UpdateProfileRequest,
    actor: ActiveActor,
    service: UserServiceDep,
) -> UserResponse:
    user = await service.update_profile(actor, user_id, data)
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete account",
)
async def delete_account(
    user_id: UUID,
    actor: ActiveActor,
    service: UserServiceDep,
) -> None:
    """Soft delete: the account is kept with status ``deleted``."""
    await service.delete_account(actor, user_id)


@router.put("/{user_id}/role", response_model=UserProfileResponse, summary="Change role")
async def change_role(
    user_id: UUID,
    data: ChangeRoleRequest,
    actor: ActiveActor,
    service: UserServiceDep,
) -> UserProfileResponse:
    user = await service.change_role(actor, user_id, data.role)
    return UserProfileResponse.model_validate(user)
