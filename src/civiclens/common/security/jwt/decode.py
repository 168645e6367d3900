from jose import jwt, ExpiredSignatureError, JWTError as JoseJWTError
from pydantic import ValidationError
from redis.asyncio import Redis

from civiclens.common.config.settings import settings
from civiclens.common.logging.logger import log_error, log_info
from civiclens.domain.auth.entities.token_entity import TokenPayload
from .errors import JWTError, TokenRevokedError, TokenTypeMismatchError


def blacklist_key(jti: str) -> str:
    return f"blacklist:{jti}"


async def validate_token_blacklist(jti: str, redis: Redis) -> None:
    """Check if the token is blacklisted in Redis."""
    if await redis.get(blacklist_key(jti)):
        log_error("Token revoked", extra={"jti": jti})
        raise TokenRevokedError(jti)


async def decode_token(token: str, redis: Redis, token_type: str = "access") -> TokenPayload:
    """
    Decode and validate an access token, including its blacklist status.

    Raises:
        JWTError: If the token is invalid, expired, revoked or of the wrong type.
    """
    try:
        payload = jwt.decode(
            token,
            settings.ACCESS_SECRET,
            algorithms=[settings.ALGORITHM],
            audience=settings.TOKEN_AUDIENCE,
            issuer=settings.TOKEN_ISSUER,
        )
    except ExpiredSignatureError:
        log_error("Token expired", extra={"token_type": token_type})
        raise JWTError("Token expired")
    except JoseJWTError as e:
        log_error("Invalid token", extra={"token_type": token_type, "error": str(e)})
        raise JWTError(f"Invalid token: {str(e)}")

    actual_type = payload.get("token_type")
    if actual_type != token_type:
        raise TokenTypeMismatchError(expected=token_type, actual=actual_type)

    try:
        token_payload = TokenPayload(**payload)
    except ValidationError as ve:
        log_error("Invalid JWT payload structure", extra={"errors": str(ve.errors())})
        raise JWTError("Invalid token payload structure")

    await validate_token_blacklist(token_payload.jti, redis)

    log_info("Token decoded", extra={"jti": token_payload.jti, "type": token_type})
    return token_payload


async def revoke_token(payload: TokenPayload, redis: Redis, now_ts: int) -> None:
    """Blacklist a token until its own expiry."""
    ttl = max(payload.exp - now_ts, 1)
    await redis.setex(blacklist_key(payload.jti), ttl, "revoked")
    log_info("Token revoked", extra={"jti": payload.jti, "ttl": ttl})
