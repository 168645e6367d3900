# File: domain/auth/services/account_service.py
from typing import Dict, Optional

from civiclens.common.config.settings import settings
from civiclens.common.exceptions.base_exception import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
)
from civiclens.common.logging.logger import log_info, log_warning
from civiclens.common.security.password import hash_password, verify_password
from civiclens.common.translations.messages import get_message
from civiclens.common.utils.date_utils import utc_now_iso
from civiclens.domain.auth.services.login_service import issue_token
from civiclens.domain.users.entities.user_entity import (
    CommunicationPreferences,
    User,
    UserRole,
    public_profile,
)
from civiclens.infrastructure.database.mongodb.repository import MongoRepository


async def register_service(
    email: str,
    password: str,
    full_name: str,
    users_repo: MongoRepository,
    role: UserRole = UserRole.CITIZEN,
    invite_code: Optional[str] = None,
    neighborhood: Optional[str] = None,
    language: str = "en"
) -> Dict:
    """
    Create an account and sign it in. Authorities need the configured invite code;
    with no code configured, authority self-registration is closed.
    """
    email = email.strip().lower()

    if role == UserRole.AUTHORITY:
        if not settings.AUTHORITY_INVITE_CODE or invite_code != settings.AUTHORITY_INVITE_CODE:
            log_warning("Authority registration rejected", extra={"email": email})
            raise ForbiddenException(detail=get_message("auth.register.invalid_invite", language))

    if await users_repo.find_one({"email": email}):
        raise ConflictException(detail=get_message("auth.register.email_taken", language))

    user = User(
        email=email,
        full_name=full_name,
        password=hash_password(password),
        role=role,
        neighborhood=neighborhood,
    )
    document = user.model_dump(exclude={"id"}, mode="json")
    user_id = await users_repo.insert_one(document)
    document["_id"] = user_id

    log_info("User registered", extra={"user_id": user_id, "role": role.value})
    return issue_token(document)


async def get_profile_service(user_id: str, users_repo: MongoRepository, language: str = "en") -> Dict:
    user = await users_repo.find_one({"_id": user_id})
    if not user:
        raise NotFoundException(detail=get_message("user.not_found", language))
    return public_profile(user)


async def update_profile_service(
    user_id: str,
    users_repo: MongoRepository,
    full_name: Optional[str] = None,
    neighborhood: Optional[str] = None,
    communication_preferences: Optional[CommunicationPreferences] = None,
    language: str = "en"
) -> Dict:
    user = await users_repo.find_one({"_id": user_id})
    if not user:
        raise NotFoundException(detail=get_message("user.not_found", language))

    update = {"updated_at": utc_now_iso()}
    if full_name is not None:
        update["full_name"] = full_name
    if neighborhood is not None:
        update["neighborhood"] = neighborhood
    if communication_preferences is not None:
        update["communication_preferences"] = communication_preferences.model_dump()

    await users_repo.update_one({"_id": user_id}, update)
    user.update(update)
    log_info("Profile updated", extra={"user_id": user_id, "fields": sorted(k for k in update if k != "updated_at")})
    return public_profile(user)


async def change_password_service(
    user_id: str,
    current_password: str,
    new_password: str,
    users_repo: MongoRepository,
    language: str = "en"
) -> None:
    user = await users_repo.find_one({"_id": user_id})
    if not user:
        raise NotFoundException(detail=get_message("user.not_found", language))
    if not verify_password(current_password, user.get("password") or ""):
        raise BadRequestException(detail=get_message("auth.password.invalid", language))

    await users_repo.update_one({"_id": user_id}, {"password": hash_password(new_password), "updated_at": utc_now_iso()})
    log_info("Password changed", extra={"user_id": user_id})
