from typing import Callable

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from .connection import get_mongo_db
from .repository import MongoRepository

REPORTS_COLLECTION = "reports"
DUPLICATE_SUBMISSIONS_COLLECTION = "duplicate_submissions"
USERS_COLLECTION = "users"
NOTIFICATIONS_COLLECTION = "notifications"


def get_mongo_collection(collection_name: str) -> Callable[..., MongoRepository]:
    def _get_repo(db: AsyncIOMotorDatabase = Depends(get_mongo_db)) -> MongoRepository:
        return MongoRepository(db, collection_name)
    return _get_repo


get_reports_repo = get_mongo_collection(REPORTS_COLLECTION)
get_duplicates_repo = get_mongo_collection(DUPLICATE_SUBMISSIONS_COLLECTION)
get_users_repo = get_mongo_collection(USERS_COLLECTION)
get_notifications_repo = get_mongo_collection(NOTIFICATIONS_COLLECTION)
