from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from jose import jwt

from civiclens.common.config.settings import settings
from civiclens.common.logging.logger import log_info


def generate_jti() -> str:
    """Generate a unique JWT identifier (jti)."""
    return str(uuid4())


def build_jwt_payload(
    *,
    subject_id: str,
    role: str,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    token_type: str = "access",
    expires_in: Optional[int] = None,
    jti: Optional[str] = None,
) -> dict:
    """Build a standardized JWT payload with the provided claims."""
    now = int(datetime.now(timezone.utc).timestamp())
    expires_in = expires_in if expires_in is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    payload = {
        "iss": settings.TOKEN_ISSUER,
        "aud": settings.TOKEN_AUDIENCE,
        "sub": subject_id,
        "jti": jti or generate_jti(),
        "role": role,
        "token_type": token_type,
        "iat": now,
        "exp": now + expires_in,
    }
    if email:
        payload["email"] = email
    if full_name:
        payload["full_name"] = full_name
    return payload


def generate_access_token(user_id: str, role: str, email: Optional[str] = None, full_name: Optional[str] = None) -> str:
    payload = build_jwt_payload(
        subject_id=user_id,
        role=role,
        email=email,
        full_name=full_name,
    )
    token = jwt.encode(payload, settings.ACCESS_SECRET, algorithm=settings.ALGORITHM)
    log_info("Access token generated", extra={"jti": payload["jti"], "user_id": user_id, "role": role})
    return token
