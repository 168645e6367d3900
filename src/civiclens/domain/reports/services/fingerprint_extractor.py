# File: domain/reports/services/fingerprint_extractor.py
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field, ValidationError

from civiclens.common.config.settings import settings
from civiclens.common.exceptions.workflow_errors import FingerprintExtractionError, LLMUnavailableError
from civiclens.common.logging.logger import log_info, log_warning
from civiclens.infrastructure.external.llm.llm_client import LLMClient, image_message

FINGERPRINT_PROMPT = """You are an AI assistant that creates a concise, descriptive 'fingerprint' for an image of a civic issue.

The fingerprint should consist of 3-5 keywords describing the main subject and its immediate, distinct context. It will be used to find similar images in a database.

Focus on the most permanent and objective features in the image: the kind of object, its material, and the structure around it. Never use colors, lighting, weather or other transient details.

Example fingerprints:
- ["pothole", "asphalt", "road", "crack"]
- ["graffiti", "brick wall", "alleyway"]
- ["overflowing trash can", "metal", "park"]
- ["broken streetlight", "metal pole", "sidewalk"]

Respond with JSON only, in exactly this shape: {"keywords": ["keyword", "..."]}"""


class FingerprintPayload(BaseModel):
    keywords: List[str] = Field(..., description="Descriptive keywords returned by the model")


class FingerprintResult(BaseModel):
    keywords: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.keywords


def normalize_keywords(raw: Iterable[str]) -> List[str]:
    """
    Trim, collapse whitespace, lowercase, drop empties and de-duplicate,
    keeping the first occurrence and the original order.
    """
    seen = set()
    keywords = []
    for item in raw or []:
        if not isinstance(item, str):
            continue
        keyword = " ".join(item.split()).lower()
        if keyword and keyword not in seen:
            seen.add(keyword)
            keywords.append(keyword)
    return keywords


def parse_fingerprint_payload(data: dict) -> List[str]:
    """
    Validate a decoded model reply and return its normalized keywords.

    Raises:
        FingerprintExtractionError: If the payload is malformed or has no usable keyword.
    """
    try:
        payload = FingerprintPayload.model_validate(data)
    except ValidationError as e:
        raise FingerprintExtractionError(f"Malformed fingerprint payload: {e.errors()[0].get('msg', 'invalid')}")
    keywords = normalize_keywords(payload.keywords)
    if not keywords:
        raise FingerprintExtractionError("Fingerprint payload contains no keywords")
    return keywords


class FingerprintExtractor:
    """
    Turns one photo into an ordered list of keywords for duplicate matching.

    The 3-5 keyword range is asked of the model but not enforced here: any
    non-empty list is accepted. Failures never propagate; they yield an empty
    fingerprint, which makes the caller skip duplicate checking.
    """

    def __init__(self, llm: LLMClient, max_attempts: Optional[int] = None):
        self.llm = llm
        self.max_attempts = max(1, max_attempts or settings.FINGERPRINT_MAX_ATTEMPTS)

    async def _extract_once(self, photo_data_uri: str) -> List[str]:
        try:
            data = await self.llm.complete_json(image_message(photo_data_uri, FINGERPRINT_PROMPT), max_tokens=256)
        except ValueError as e:
            raise FingerprintExtractionError(f"Unreadable fingerprint reply: {e}")
        return parse_fingerprint_payload(data)

    async def extract(self, photo_data_uri: str) -> FingerprintResult:
        last_error = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                keywords = await self._extract_once(photo_data_uri)
                log_info("Fingerprint extracted", extra={"keywords": keywords, "attempt": attempt})
                return FingerprintResult(keywords=keywords)
            except FingerprintExtractionError as e:
                last_error = e.message
                log_warning("Invalid fingerprint payload", extra={"attempt": attempt, "error": e.message})
            except LLMUnavailableError as e:
                # Provider outage; retrying immediately will not help.
                last_error = e.message
                break

        log_warning("Fingerprint extraction failed; duplicate check will be skipped", extra={"error": last_error})
        return FingerprintResult(keywords=[], error=last_error)
