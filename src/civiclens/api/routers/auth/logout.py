# File: api/routers/auth/logout.py

from typing import Annotated

from fastapi import APIRouter, status, Depends
from redis.asyncio import Redis

from civiclens.common.schemas.standard_response import StandardResponse
from civiclens.common.security.access_guard import get_current_user
from civiclens.common.translations.messages import get_message
from civiclens.domain.auth.entities.token_entity import TokenPayload
from civiclens.domain.auth.services.login_service import logout_service
from civiclens.infrastructure.database.redis.redis_client import get_redis_client

router = APIRouter()


@router.post(
    "/auth/logout",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Revoke the current access token",
    tags=["Authentication"]
)
async def logout(
    current_user: Annotated[TokenPayload, Depends(get_current_user)],
    redis: Annotated[Redis, Depends(get_redis_client)]
):
    await logout_service(current_user, redis)
    return StandardResponse.success(message=get_message("auth.logout.success"))
