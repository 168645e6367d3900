# File: api/routers/auth/profile.py

from typing import Annotated, Optional

from fastapi import APIRouter, status, Depends
from pydantic import Field

from civiclens.common.schemas.request_base import BaseRequestModel
from civiclens.common.schemas.standard_response import StandardResponse
from civiclens.common.security.access_guard import get_current_user
from civiclens.common.translations.messages import get_message
from civiclens.domain.auth.entities.token_entity import TokenPayload
from civiclens.domain.auth.services.account_service import (
    change_password_service,
    get_profile_service,
    update_profile_service,
)
from civiclens.domain.users.entities.user_entity import CommunicationPreferences
from civiclens.infrastructure.database.mongodb.mongo_client import get_users_repo
from civiclens.infrastructure.database.mongodb.repository import MongoRepository

router = APIRouter()


class UpdateProfileRequest(BaseRequestModel):
    full_name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    neighborhood: Optional[str] = Field(default=None, max_length=100)
    communication_preferences: Optional[CommunicationPreferences] = None


class ChangePasswordRequest(BaseRequestModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=8, max_length=128)


@router.get(
    "/auth/me",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Current account profile",
    tags=["Profile"]
)
async def get_me(
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    users_repo: Annotated[MongoRepository, Depends(get_users_repo)]
):
    profile = await get_profile_service(current_user.user_id, users_repo)
    return StandardResponse.success(data=profile, message=get_message("auth.profile.fetched"))


@router.patch(
    "/auth/profile",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Update name, neighborhood and communication preferences",
    tags=["Profile"]
)
async def update_profile(
    data: UpdateProfileRequest,
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    users_repo: Annotated[MongoRepository, Depends(get_users_repo)]
):
    profile = await update_profile_service(
        user_id=current_user.user_id,
        users_repo=users_repo,
        full_name=data.full_name,
        neighborhood=data.neighborhood,
        communication_preferences=data.communication_preferences,
        language=data.response_language
    )
    return StandardResponse.success(data=profile, message=get_message("auth.profile.updated", data.response_language))


@router.post(
    "/auth/change-password",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Change the account password",
    tags=["Profile"]
)
async def change_password(
    data: ChangePasswordRequest,
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    users_repo: Annotated[MongoRepository, Depends(get_users_repo)]
):
    await change_password_service(
        user_id=current_user.user_id,
        current_password=data.current_password,
        new_password=data.new_password,
        users_repo=users_repo,
        language=data.response_language
    )
    return StandardResponse.success(message=get_message("auth.password.changed", data.response_language))
