# File: domain/auth/entities/token_entity.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from civiclens.domain.users.entities.user_entity import UserRole


class TokenPayload(BaseModel):
    """JWT token payload structure."""

    sub: str = Field(..., description="Subject identifier (user ID)")
    role: UserRole = Field(..., description="User role (citizen or authority)")
    email: Optional[str] = Field(default=None, description="Account email")
    full_name: Optional[str] = Field(default=None, description="Display name at issue time")
    token_type: str = Field(default="access", description="Token type")
    jti: str = Field(..., description="JWT identifier")
    iat: Optional[int] = Field(default=None, description="Issued-at timestamp")
    exp: int = Field(..., description="Expiration timestamp")

    model_config = ConfigDict(extra="ignore")

    @property
    def user_id(self) -> str:
        return self.sub

    @property
    def is_authority(self) -> bool:
        return self.role == UserRole.AUTHORITY
