# File: api/routers/auth/register.py

from typing import Annotated, Optional

from fastapi import APIRouter, status, Depends
from pydantic import EmailStr, Field

from civiclens.common.logging.logger import log_info
from civiclens.common.schemas.request_base import BaseRequestModel
from civiclens.common.schemas.standard_response import StandardResponse
from civiclens.common.translations.messages import get_message
from civiclens.domain.auth.services.account_service import register_service
from civiclens.domain.users.entities.user_entity import UserRole
from civiclens.infrastructure.database.mongodb.mongo_client import get_users_repo
from civiclens.infrastructure.database.mongodb.repository import MongoRepository

router = APIRouter()


class RegisterRequest(BaseRequestModel):
    email: EmailStr = Field(..., description="Account email")
    password: str = Field(min_length=8, max_length=128, description="Account password")
    full_name: str = Field(min_length=3, max_length=100, description="Display name")
    role: UserRole = Field(default=UserRole.CITIZEN, description="citizen or authority")
    invite_code: Optional[str] = Field(default=None, max_length=100, description="Required for authority accounts")
    neighborhood: Optional[str] = Field(default=None, max_length=100)


@router.post(
    "/auth/register",
    status_code=status.HTTP_201_CREATED,
    response_model=StandardResponse,
    summary="Create a citizen or authority account",
    tags=["Authentication"],
    responses={
        201: {"description": "Account created, access token returned."},
        403: {"description": "Invalid authority invite code."},
        409: {"description": "Email already registered."}
    }
)
async def register(
    data: RegisterRequest,
    users_repo: Annotated[MongoRepository, Depends(get_users_repo)]
):
    result = await register_service(
        email=data.email,
        password=data.password,
        full_name=data.full_name,
        users_repo=users_repo,
        role=data.role,
        invite_code=data.invite_code,
        neighborhood=data.neighborhood,
        language=data.response_language
    )
    log_info("Registration completed", extra={"role": data.role.value, "request_id": data.request_id})
    return StandardResponse.success(
        data=result,
        message=get_message("auth.register.success", data.response_language),
        code=201
    )
