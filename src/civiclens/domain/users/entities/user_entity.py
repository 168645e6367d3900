from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime, UTC
from enum import Enum


class UserRole(str, Enum):
    CITIZEN = "citizen"
    AUTHORITY = "authority"


class UserStatus(str, Enum):
    ACTIVE = "active"
    BLOCKED = "blocked"


class CommunicationPreferences(BaseModel):
    email_updates: bool = True
    in_app_updates: bool = True


class User(BaseModel):
    id: Optional[str] = None
    email: EmailStr
    full_name: str = Field(..., min_length=3, max_length=100)
    password: Optional[str] = None  # hashed password
    role: UserRole = UserRole.CITIZEN
    status: UserStatus = UserStatus.ACTIVE

    neighborhood: Optional[str] = Field(default=None, max_length=100)
    communication_preferences: CommunicationPreferences = Field(default_factory=CommunicationPreferences)
    photo_url: Optional[str] = None

    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    updated_at: Optional[str] = None


def public_profile(user: dict) -> dict:
    """Strips secrets from a stored user document."""
    return {
        "id": str(user.get("_id") or user.get("id")),
        "email": user.get("email"),
        "full_name": user.get("full_name"),
        "role": user.get("role"),
        "status": user.get("status"),
        "neighborhood": user.get("neighborhood"),
        "communication_preferences": user.get("communication_preferences") or CommunicationPreferences().model_dump(),
        "photo_url": user.get("photo_url"),
        "created_at": user.get("created_at"),
    }
