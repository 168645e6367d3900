# infrastructure/setup/initial_setup.py
from pymongo import ASCENDING, DESCENDING

from civiclens.common.config.settings import settings
from civiclens.common.logging.logger import log_info, log_warning
from civiclens.common.security.password import hash_password
from civiclens.domain.users.entities.user_entity import User, UserRole
from civiclens.infrastructure.database.mongodb.repository import MongoRepository


async def ensure_indexes(reports_repo: MongoRepository, duplicates_repo: MongoRepository,
                         users_repo: MongoRepository, notifications_repo: MongoRepository):
    # Multikey index backing the any-of candidate query.
    await reports_repo.create_index([("fingerprint_keywords", ASCENDING)])
    await reports_repo.create_index([("created_at", DESCENDING)])
    await reports_repo.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    await reports_repo.create_index([("status", ASCENDING)])
    await reports_repo.create_index([("report_id", ASCENDING)], unique=True)
    await reports_repo.create_index([("submission_id", ASCENDING)], unique=True, sparse=True)

    await duplicates_repo.create_index([("original_report_id", ASCENDING)])
    await duplicates_repo.create_index([("submission_id", ASCENDING)], unique=True, sparse=True)

    await users_repo.create_index([("email", ASCENDING)], unique=True)
    await notifications_repo.create_index([("receiver_id", ASCENDING), ("created_at", DESCENDING)])


async def setup_authority(users_repo: MongoRepository):
    # Fetch authority credentials from settings
    email = settings.AUTHORITY_EMAIL.strip().lower()
    password = settings.AUTHORITY_PASSWORD

    if not email:
        log_info("No seed authority configured")
        return
    if not password or len(password) < 8:
        raise ValueError("AUTHORITY_PASSWORD must be set and at least 8 characters long")

    if await users_repo.find_one({"email": email}):
        return

    authority = User(
        email=email,
        full_name=settings.AUTHORITY_FULL_NAME,
        password=hash_password(password),
        role=UserRole.AUTHORITY,
    )
    authority_id = await users_repo.insert_one(authority.model_dump(exclude={"id"}, mode="json"))
    log_info("Authority user created", extra={"authority_id": str(authority_id)})

    if not settings.AUTHORITY_INVITE_CODE:
        log_warning("AUTHORITY_INVITE_CODE is empty; authority self-registration is closed")
