"""
Unit tests for the LLM extraction service with provider doubles.

Tests cover:
- parse_json_object() - parsing of raw model answers
- ExtractionService.extract() - provider order, fallback, timeouts, validation
"""
import asyncio

import pytest

from src.documents.types import DocumentType
from src.extraction.exceptions import ExtractionError
from src.extraction.normalization import validate_extraction
from src.extraction.service import ExtractionService, parse_json_object

VALID_INVOICE = {
    "client": {"name": "Acme Corp"},
    "items": [{"description": "Design", "quantity": "1", "unitPrice": "100"}],
    "document": {"issueDate": "2024-02-01", "dueDate": "2024-03-01"},
}


def invoice_validator(raw):
    return validate_extraction(raw, DocumentType.INVOICE)


class TestParseJsonObject:

    @pytest.mark.unit
    def test_plain_json(self):
        assert parse_json_object('{"a": 1}', "openai") == {"a": 1}

    @pytest.mark.unit
    def test_json_wrapped_in_prose(self):
        content = 'Here you go:\n```json\n{"client": {"name": "Acme"}}\n```'
        assert parse_json_object(content, "gemini") == {"client": {"name": "Acme"}}

    @pytest.mark.parametrize("content", [None, "", "   ", "no json here", "[1, 2]", "{broken"])
    @pytest.mark.unit
    def test_unusable_answers_raise(self, content):
        with pytest.raises(ExtractionError):
            parse_json_object(content, "openai")


class TestExtract:

    @pytest.mark.unit
    async def test_first_provider_wins(self, provider_factory):
        first = provider_factory("openai", result=VALID_INVOICE)
        second = provider_factory("gemini", result={"other": True})

        outcome = await ExtractionService([first, second]).extract("prompt", invoice_validator)

        assert outcome.is_ok
        assert outcome.value == VALID_INVOICE
        first.complete.assert_awaited_once_with("prompt")
        second.complete.assert_not_called()

    @pytest.mark.unit
    async def test_falls_back_to_second_provider_on_error(self, provider_factory):
        first = provider_factory("openai", side_effect=RuntimeError("rate limited"))
        second = provider_factory("gemini", result=VALID_INVOICE)

        outcome = await ExtractionService([first, second]).extract("prompt", invoice_validator)

        assert outcome.is_ok
        assert outcome.value == VALID_INVOICE
        first.complete.assert_awaited_once()

    @pytest.mark.unit
    async def test_timeout_counts_as_failure(self, provider_factory):
        async def slow(prompt):
            await asyncio.sleep(1)
            return VALID_INVOICE

        first = provider_factory("openai", side_effect=slow, timeout=0.01)
        second = provider_factory("gemini", result=VALID_INVOICE)

        outcome = await ExtractionService([first, second]).extract("prompt", invoice_validator)

        assert outcome.is_ok
        second.complete.assert_awaited_once()

    @pytest.mark.unit
    async def test_incomplete_answer_is_kept_when_nothing_better_comes(self, provider_factory):
        partial = {"client": {"name": "Acme Corp"}}
        first = provider_factory("openai", result=partial)
        second = provider_factory("gemini", side_effect=ExtractionError("gemini returned an empty response"))

        outcome = await ExtractionService([first, second]).extract("prompt", invoice_validator)

        assert outcome.is_degraded
        assert outcome.value == partial
        assert "openai incomplete" in outcome.reason
        assert "gemini failed" in outcome.reason

    @pytest.mark.unit
    async def test_all_failing_degrades_to_empty_object(self, provider_factory):
        providers = [
            provider_factory("openai", side_effect=RuntimeError("down")),
            provider_factory("gemini", side_effect=RuntimeError("down")),
        ]
        outcome = await ExtractionService(providers).extract("prompt")

        assert outcome.is_degraded
        assert outcome.value == {}

    @pytest.mark.unit
    async def test_no_providers(self):
        outcome = await ExtractionService([]).extract("prompt")
        assert outcome.is_degraded
        assert outcome.value == {}
        assert outcome.reason == "no extraction provider configured"

    @pytest.mark.unit
    async def test_without_validator_any_object_is_accepted(self, provider_factory):
        provider = provider_factory("openai", result={"name": "Acme"})
        outcome = await ExtractionService([provider]).extract("prompt")
        assert outcome.is_ok
        assert outcome.value == {"name": "Acme"}


class TestBlankText:

    @pytest.mark.unit
    async def test_parse_document_requires_text(self, provider_factory):
        provider = provider_factory("openai", result=VALID_INVOICE)
        with pytest.raises(ExtractionError):
            await ExtractionService([provider]).parse_document("  \n ", DocumentType.INVOICE, "user_1", document_service=None)
        provider.complete.assert_not_called()

    @pytest.mark.unit
    async def test_extract_client_requires_text(self, provider_factory):
        with pytest.raises(ExtractionError):
            await ExtractionService([provider_factory("openai")]).extract_client("", "user_1", client_service=None)
