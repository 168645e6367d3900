# File: domain/reports/services/candidate_matcher.py
from typing import Any, Dict, Iterable, List

from civiclens.common.logging.logger import log_info
from civiclens.common.utils.date_utils import parse_iso
from civiclens.domain.reports.services.fingerprint_extractor import normalize_keywords
from civiclens.infrastructure.database.mongodb.repository import MongoRepository

# Hard bound on the any-of query fan-in. Not a tunable.
MAX_MATCH_KEYWORDS = 10

FINGERPRINT_FIELD = "fingerprint_keywords"


def match_keys(keywords: Iterable[str]) -> List[str]:
    """Normalized keywords truncated to the first MAX_MATCH_KEYWORDS, in extraction order."""
    return normalize_keywords(keywords)[:MAX_MATCH_KEYWORDS]


def shares_keyword(keys: Iterable[str], report_keywords: Iterable[str]) -> bool:
    return bool(set(keys) & set(report_keywords or []))


def creation_sort_key(report: Dict[str, Any]):
    return parse_iso(report["created_at"]), str(report.get("_id", ""))


def oldest_first(reports: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(reports, key=creation_sort_key)


class CandidateMatcher:
    """
    Finds existing reports that share at least one fingerprint keyword with a new
    submission. Deliberately permissive: no weighting, no overlap ranking and no
    distance filter; a human settles false positives.
    """

    def __init__(self, reports_repo: MongoRepository):
        self.reports_repo = reports_repo

    async def find_candidates(self, keywords: Iterable[str]) -> List[Dict[str, Any]]:
        keys = match_keys(keywords)
        if not keys:
            log_info("Empty fingerprint; duplicate check skipped")
            return []

        documents = await self.reports_repo.find({FINGERPRINT_FIELD: {"$in": keys}})
        candidates = oldest_first([doc for doc in documents if shares_keyword(keys, doc.get(FINGERPRINT_FIELD))])
        log_info("Duplicate candidates found", extra={
            "keys": keys,
            "count": len(candidates),
            "candidate_ids": [c["_id"] for c in candidates]
        })
        return candidates

    async def load_candidates(self, candidate_ids: List[str]) -> List[Dict[str, Any]]:
        """Re-read candidates by id, oldest first; reports deleted meanwhile are simply absent."""
        if not candidate_ids:
            return []
        documents = await self.reports_repo.find({"_id": {"$in": list(candidate_ids)}})
        return oldest_first(documents)
