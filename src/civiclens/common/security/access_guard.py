# File: common/security/access_guard.py

from typing import Annotated, List

from fastapi import Depends, HTTPException, Request
from redis.asyncio import Redis

from civiclens.common.logging.logger import log_error, log_info
from civiclens.common.security.jwt.decode import decode_token
from civiclens.common.security.jwt.errors import JWTError
from civiclens.domain.auth.entities.token_entity import TokenPayload
from civiclens.domain.users.entities.user_entity import UserRole
from civiclens.infrastructure.database.redis.redis_client import get_redis_client


def get_token_from_header(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Authorization header missing or invalid")
    return auth_header.split(" ", 1)[1].strip()


async def get_current_user(
    request: Request,
    redis: Annotated[Redis, Depends(get_redis_client)],
) -> TokenPayload:
    """
    Extract and decode the JWT token payload from the request.

    Raises:
        HTTPException: If token is missing, invalid, revoked or has an invalid structure.
    """
    token = get_token_from_header(request)
    try:
        payload = await decode_token(token, redis=redis)
    except JWTError as e:
        log_error("Token payload extraction failed", extra={"error": e.message})
        raise HTTPException(status_code=e.status_code, detail=e.message)

    log_info("Token payload extracted", extra={"user_id": payload.sub, "role": payload.role.value})
    return payload


def require_role(allowed_roles: List[UserRole]):
    async def dependency(user: Annotated[TokenPayload, Depends(get_current_user)]) -> TokenPayload:
        if user.role not in allowed_roles:
            log_error("Role access denied", extra={
                "user_role": user.role.value,
                "allowed_roles": [r.value for r in allowed_roles]
            })
            raise HTTPException(status_code=403, detail=f"Role '{user.role.value}' not allowed")
        return user
    return dependency


require_citizen = require_role([UserRole.CITIZEN])
require_authority = require_role([UserRole.AUTHORITY])
