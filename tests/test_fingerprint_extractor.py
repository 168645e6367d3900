"""
Tests for fingerprint extraction.

Covers:
  - Keyword normalization (case, whitespace, duplicates, order)
  - Payload validation
  - Retry on an invalid reply and soft failure after the last attempt
  - Provider outage yields an empty fingerprint without retrying
"""

import pytest

from civiclens.common.exceptions.workflow_errors import FingerprintExtractionError, LLMUnavailableError
from civiclens.domain.reports.services.fingerprint_extractor import (
    FingerprintExtractor,
    normalize_keywords,
    parse_fingerprint_payload,
)
from civiclens.infrastructure.external.llm.llm_client import parse_json_reply

from conftest import PHOTO, fingerprint_reply


# ============================================================
# Normalization
# ============================================================

class TestNormalizeKeywords:

    def test_lowercases_and_trims(self):
        assert normalize_keywords(["  Pothole ", "ASPHALT"]) == ["pothole", "asphalt"]

    def test_collapses_inner_whitespace(self):
        assert normalize_keywords(["brick    wall", "metal\tpole"]) == ["brick wall", "metal pole"]

    def test_drops_empty_and_non_string_items(self):
        assert normalize_keywords(["", "   ", None, 42, "road"]) == ["road"]

    def test_deduplicates_keeping_first_position(self):
        assert normalize_keywords(["road", "Crack", "ROAD", "crack", "curb"]) == ["road", "crack", "curb"]

    def test_none_gives_empty_list(self):
        assert normalize_keywords(None) == []


class TestParsePayload:

    def test_valid_payload(self):
        assert parse_fingerprint_payload({"keywords": ["Graffiti", "Brick Wall"]}) == ["graffiti", "brick wall"]

    def test_missing_keywords_field(self):
        with pytest.raises(FingerprintExtractionError):
            parse_fingerprint_payload({"tags": ["graffiti"]})

    def test_keywords_not_a_list(self):
        with pytest.raises(FingerprintExtractionError):
            parse_fingerprint_payload({"keywords": "graffiti"})

    def test_only_blank_keywords(self):
        with pytest.raises(FingerprintExtractionError):
            parse_fingerprint_payload({"keywords": ["  ", ""]})

    def test_more_than_five_keywords_accepted(self):
        keywords = parse_fingerprint_payload({"keywords": ["a", "b", "c", "d", "e", "f", "g"]})
        assert len(keywords) == 7


class TestParseJsonReply:

    def test_fenced_reply(self):
        assert parse_json_reply('```json\n{"keywords": ["x"]}\n```') == {"keywords": ["x"]}

    def test_array_reply_rejected(self):
        with pytest.raises(ValueError):
            parse_json_reply('["x"]')

    def test_empty_reply_rejected(self):
        with pytest.raises(ValueError):
            parse_json_reply("   ")


# ============================================================
# Extraction
# ============================================================

class TestFingerprintExtractor:

    async def test_returns_normalized_keywords(self, llm):
        llm.queue(fingerprint_reply("Pothole", "Asphalt", "road", "pothole"))
        result = await FingerprintExtractor(llm, max_attempts=2).extract(PHOTO)

        assert result.keywords == ["pothole", "asphalt", "road"]
        assert result.error is None
        assert not result.is_empty

    async def test_sends_photo_and_requests_json(self, llm):
        llm.queue(fingerprint_reply("graffiti"))
        await FingerprintExtractor(llm).extract(PHOTO)

        call = llm.calls[0]
        assert call["json_mode"] is True
        image_part = call["messages"][0]["content"][0]
        assert image_part["image_url"]["url"] == PHOTO

    async def test_retries_after_invalid_reply(self, llm):
        llm.queue("not json at all", fingerprint_reply("streetlight", "pole"))
        result = await FingerprintExtractor(llm, max_attempts=2).extract(PHOTO)

        assert result.keywords == ["streetlight", "pole"]
        assert len(llm.calls) == 2

    async def test_gives_up_with_empty_fingerprint(self, llm):
        llm.queue('{"keywords": []}', '{"wrong": true}')
        result = await FingerprintExtractor(llm, max_attempts=2).extract(PHOTO)

        assert result.is_empty
        assert result.error
        assert len(llm.calls) == 2

    async def test_provider_outage_is_not_retried(self, llm):
        llm.queue(LLMUnavailableError("all providers down"), fingerprint_reply("never used"))
        result = await FingerprintExtractor(llm, max_attempts=3).extract(PHOTO)

        assert result.is_empty
        assert "all providers down" in result.error
        assert len(llm.calls) == 1

    async def test_never_raises(self, llm):
        result = await FingerprintExtractor(llm).extract(PHOTO)
        assert result.keywords == []
