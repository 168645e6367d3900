# File: infrastructure/database/redis/repositories/draft_repository.py
from typing import Optional

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from civiclens.common.config.settings import settings
from civiclens.common.exceptions.base_exception import ServiceUnavailableException
from civiclens.common.logging.logger import log_info, log_error
from civiclens.domain.submissions.entities.submission_entity import SubmissionDraft

LOCK_TTL_SECONDS = 30


class DraftRepository:
    """Pending submission drafts, one JSON value per key with a sliding TTL."""

    KEY_PREFIX = "submission:draft"

    def __init__(self, redis: Redis, ttl: Optional[int] = None):
        self.redis = redis
        self.ttl = ttl or settings.SUBMISSION_DRAFT_TTL

    def _key(self, draft_id: str) -> str:
        return f"{self.KEY_PREFIX}:{draft_id}"

    async def save(self, draft: SubmissionDraft) -> None:
        try:
            await self.redis.setex(self._key(draft.id), self.ttl, draft.model_dump_json())
            log_info("Draft saved", extra={"draft_id": draft.id, "state": draft.state.value, "ttl": self.ttl})
        except RedisError as e:
            log_error("Draft save failed", extra={"draft_id": draft.id, "error": str(e)})
            raise ServiceUnavailableException("Failed to store submission draft")

    async def get(self, draft_id: str) -> Optional[SubmissionDraft]:
        try:
            raw = await self.redis.get(self._key(draft_id))
        except RedisError as e:
            log_error("Draft get failed", extra={"draft_id": draft_id, "error": str(e)})
            raise ServiceUnavailableException("Failed to load submission draft")
        if raw is None:
            return None
        try:
            return SubmissionDraft.model_validate_json(raw)
        except ValidationError as e:
            log_error("Stored draft is corrupt", extra={"draft_id": draft_id, "error": str(e)})
            return None

    async def delete(self, draft_id: str) -> None:
        try:
            await self.redis.delete(self._key(draft_id))
            log_info("Draft deleted", extra={"draft_id": draft_id})
        except RedisError as e:
            log_error("Draft delete failed", extra={"draft_id": draft_id, "error": str(e)})
            raise ServiceUnavailableException("Failed to delete submission draft")

    async def acquire_lock(self, draft_id: str, ttl: int = LOCK_TTL_SECONDS) -> bool:
        """Single-writer guard for one draft; expires on its own if the holder dies."""
        try:
            acquired = await self.redis.set(f"{self._key(draft_id)}:lock", "1", nx=True, ex=ttl)
        except RedisError as e:
            log_error("Draft lock failed", extra={"draft_id": draft_id, "error": str(e)})
            raise ServiceUnavailableException("Failed to lock submission draft")
        return bool(acquired)

    async def release_lock(self, draft_id: str) -> None:
        try:
            await self.redis.delete(f"{self._key(draft_id)}:lock")
        except RedisError as e:
            log_error("Draft unlock failed", extra={"draft_id": draft_id, "error": str(e)})
