"""
Tests for candidate matching.

Covers:
  - Any-of rule: one shared keyword is enough, none is a miss
  - Only the first ten keywords take part in the query
  - Oldest-first ordering with a stable tie-break
  - Reloading candidates by id after deletions
"""

from civiclens.domain.reports.services.candidate_matcher import (
    MAX_MATCH_KEYWORDS,
    match_keys,
    oldest_first,
    shares_keyword,
)

from conftest import report_doc


class TestMatchRule:

    def test_single_shared_keyword_matches(self):
        assert shares_keyword(["pothole", "sidewalk"], ["graffiti", "sidewalk"])

    def test_disjoint_keywords_do_not_match(self):
        assert not shares_keyword(["pothole", "asphalt"], ["graffiti", "brick wall"])

    def test_report_without_keywords_never_matches(self):
        assert not shares_keyword(["pothole"], [])
        assert not shares_keyword(["pothole"], None)

    def test_match_keys_are_capped(self):
        keywords = [f"k{i}" for i in range(15)]
        assert match_keys(keywords) == keywords[:MAX_MATCH_KEYWORDS]

    def test_match_keys_normalize_before_capping(self):
        keywords = ["A", "a", " a "] + [f"k{i}" for i in range(12)]
        keys = match_keys(keywords)
        assert keys[0] == "a"
        assert len(keys) == 10
        assert keys[-1] == "k8"


class TestOrdering:

    def test_oldest_first(self):
        newer = {**report_doc(["x"], minutes=10), "_id": "b"}
        older = {**report_doc(["x"], minutes=1), "_id": "a"}
        assert [r["_id"] for r in oldest_first([newer, older])] == ["a", "b"]

    def test_equal_timestamps_tie_break_on_id(self):
        first = {**report_doc(["x"], minutes=5), "_id": "aaa"}
        second = {**report_doc(["x"], minutes=5), "_id": "bbb"}
        assert [r["_id"] for r in oldest_first([second, first])] == ["aaa", "bbb"]

    def test_mixed_offsets_compare_as_instants(self):
        utc = {**report_doc(["x"]), "_id": "utc", "created_at": "2024-05-01T12:00:00+00:00"}
        plus_two = {**report_doc(["x"]), "_id": "cest", "created_at": "2024-05-01T13:30:00+02:00"}
        assert [r["_id"] for r in oldest_first([utc, plus_two])] == ["cest", "utc"]


class TestCandidateMatcher:

    async def test_finds_reports_sharing_any_keyword(self, matcher, reports_repo):
        hit = reports_repo.seed(report_doc(["pothole", "asphalt"], minutes=1))
        other_hit = reports_repo.seed(report_doc(["road", "crack"], minutes=2))
        reports_repo.seed(report_doc(["graffiti", "wall"], minutes=3))

        candidates = await matcher.find_candidates(["asphalt", "crack"])

        assert [c["_id"] for c in candidates] == [hit, other_hit]

    async def test_no_overlap_no_candidates(self, matcher, reports_repo):
        reports_repo.seed(report_doc(["graffiti", "wall"]))
        assert await matcher.find_candidates(["pothole"]) == []

    async def test_empty_fingerprint_skips_query(self, matcher, reports_repo):
        reports_repo.seed(report_doc(["pothole"]))
        assert await matcher.find_candidates([]) == []
        assert reports_repo.queries == []

    async def test_only_first_ten_keywords_queried(self, matcher, reports_repo):
        keywords = [f"k{i}" for i in range(15)]
        reports_repo.seed(report_doc(["k12"], minutes=1))
        inside = reports_repo.seed(report_doc(["k9"], minutes=2))

        candidates = await matcher.find_candidates(keywords)

        assert [c["_id"] for c in candidates] == [inside]
        assert reports_repo.queries[-1] == {"fingerprint_keywords": {"$in": keywords[:10]}}

    async def test_candidates_come_back_oldest_first(self, matcher, reports_repo):
        newest = reports_repo.seed(report_doc(["pothole"], minutes=30))
        oldest = reports_repo.seed(report_doc(["pothole"], minutes=1))
        middle = reports_repo.seed(report_doc(["pothole"], minutes=15))

        candidates = await matcher.find_candidates(["Pothole"])

        assert [c["_id"] for c in candidates] == [oldest, middle, newest]

    async def test_load_candidates_skips_deleted(self, matcher, reports_repo):
        first = reports_repo.seed(report_doc(["pothole"], minutes=1))
        second = reports_repo.seed(report_doc(["pothole"], minutes=2))
        await reports_repo.delete_one({"_id": first})

        loaded = await matcher.load_candidates([second, first])

        assert [c["_id"] for c in loaded] == [second]

    async def test_load_candidates_without_ids(self, matcher, reports_repo):
        assert await matcher.load_candidates([]) == []
        assert reports_repo.queries == []
