# File: domain/auth/services/login_service.py

from datetime import datetime, timezone
from typing import Dict

from redis.asyncio import Redis

from civiclens.common.config.settings import settings
from civiclens.common.exceptions.base_exception import (
    ForbiddenException,
    TooManyRequestsException,
    UnauthorizedException,
)
from civiclens.common.logging.logger import log_info, log_warning
from civiclens.common.security.jwt.decode import revoke_token
from civiclens.common.security.jwt.tokens import generate_access_token
from civiclens.common.security.password import verify_password
from civiclens.common.translations.messages import get_message
from civiclens.domain.auth.entities.token_entity import TokenPayload
from civiclens.domain.users.entities.user_entity import UserStatus, public_profile
from civiclens.infrastructure.database.mongodb.repository import MongoRepository


def login_attempt_key(client_ip: str, email: str) -> str:
    return f"login:attempt:{client_ip}:{email}"


def issue_token(user: dict) -> Dict:
    access_token = generate_access_token(
        user_id=str(user["_id"]),
        role=user.get("role"),
        email=user.get("email"),
        full_name=user.get("full_name"),
    )
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "user": public_profile(user),
    }


async def _record_failure(redis: Redis, login_key: str) -> None:
    await redis.incr(login_key)
    await redis.expire(login_key, settings.LOGIN_LOCKOUT_SECONDS)


async def login_service(
    email: str,
    password: str,
    client_ip: str,
    users_repo: MongoRepository,
    redis: Redis,
    language: str = "en"
) -> Dict:
    """
    Authenticate a citizen or authority by email and password.
    Failed attempts are counted per IP and email; too many lock the pair out.
    """
    email = email.strip().lower()
    login_key = login_attempt_key(client_ip, email)
    attempts = int(await redis.get(login_key) or 0)

    if attempts >= settings.MAX_LOGIN_ATTEMPTS:
        log_warning("Login locked out", extra={"ip": client_ip, "email": email, "attempts": attempts})
        raise TooManyRequestsException(detail=get_message("auth.login.too_many_attempts", language))

    user = await users_repo.find_one({"email": email})
    if not user or not user.get("password") or not verify_password(password, user["password"]):
        await _record_failure(redis, login_key)
        log_warning("Login failed", extra={"ip": client_ip, "email": email, "attempts": attempts + 1})
        raise UnauthorizedException(detail=get_message("auth.login.invalid", language))

    if user.get("status") != UserStatus.ACTIVE.value:
        raise ForbiddenException(detail=get_message("auth.login.not_active", language))

    await redis.delete(login_key)

    result = issue_token(user)
    log_info("Login successful", extra={
        "user_id": str(user["_id"]),
        "role": user.get("role"),
        "ip": client_ip,
        "endpoint": "login_service"
    })
    return result


async def logout_service(payload: TokenPayload, redis: Redis) -> None:
    """Revoke the presented access token until it would have expired anyway."""
    now_ts = int(datetime.now(timezone.utc).timestamp())
    await revoke_token(payload, redis, now_ts)
    log_info("User logged out", extra={"user_id": payload.user_id, "jti": payload.jti})
