# File: api/routers/auth/login.py

from typing import Annotated

from fastapi import APIRouter, status, Depends, HTTPException
from pydantic import EmailStr, Field
from redis.asyncio import Redis

from civiclens.common.dependencies.ip_dep import get_client_ip
from civiclens.common.exceptions.base_exception import InternalServerErrorException
from civiclens.common.logging.logger import log_info, log_error
from civiclens.common.schemas.request_base import BaseRequestModel
from civiclens.common.schemas.standard_response import StandardResponse, Meta
from civiclens.common.translations.messages import get_message
from civiclens.domain.auth.services.login_service import login_service
from civiclens.infrastructure.database.mongodb.mongo_client import get_users_repo
from civiclens.infrastructure.database.mongodb.repository import MongoRepository
from civiclens.infrastructure.database.redis.redis_client import get_redis_client

router = APIRouter()


class LoginRequest(BaseRequestModel):
    """Login request body: email with password."""

    email: EmailStr = Field(..., description="Account email", examples=["citizen@example.com"])
    password: str = Field(min_length=8, max_length=128, description="Account password", examples=["P@ssword123"])


@router.post(
    "/auth/login",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Login for citizens and authorities",
    tags=["Authentication"],
    responses={
        200: {"description": "Login successful, access token returned."},
        400: {"description": "Invalid login request."},
        401: {"description": "Invalid credentials."},
        403: {"description": "Account not active."},
        429: {"description": "Too many login attempts."},
        500: {"description": "Internal server error."}
    }
)
async def login(
    data: LoginRequest,
    client_ip: Annotated[str, Depends(get_client_ip)],
    users_repo: Annotated[MongoRepository, Depends(get_users_repo)],
    redis: Annotated[Redis, Depends(get_redis_client)]
):
    try:
        result = await login_service(
            email=data.email,
            password=data.password,
            client_ip=client_ip,
            users_repo=users_repo,
            redis=redis,
            language=data.response_language
        )

        log_info("Login successful", extra={
            "ip": client_ip,
            "endpoint": "/auth/login",
            "request_id": data.request_id,
            "client_version": data.client_version
        })

        return StandardResponse(
            meta=Meta(
                message=get_message("auth.login.success", data.response_language),
                status="success",
                code=200
            ),
            data=result
        )

    except HTTPException as http_exc:
        log_error("Handled HTTPException in /auth/login", extra={
            "error": str(http_exc.detail),
            "ip": client_ip,
            "endpoint": "/auth/login",
            "request_id": data.request_id
        })
        raise http_exc

    except Exception as e:
        log_error("Unexpected login error", extra={
            "error": str(e),
            "ip": client_ip,
            "endpoint": "/auth/login",
            "request_id": data.request_id
        }, exc_info=True)
        raise InternalServerErrorException(detail=get_message("server.error", data.response_language))
