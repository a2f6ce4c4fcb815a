"""
Unit tests for sequential document numbering.

Tests cover:
- increment_identifier() - suffix increment and padding
- resolve_next_identifier() - seed, increment and timestamp fallbacks
- next_document_identifier() - plain string variant
"""
import asyncio
import re

import pytest

from src.documents.numbering import (
    increment_identifier,
    next_document_identifier,
    resolve_next_identifier,
)
from src.documents.types import DocumentType

INVOICE_FALLBACK = re.compile(r"^INV-\d+$")


class TestIncrementIdentifier:

    @pytest.mark.parametrize(
        "latest,document_type,expected",
        [
            ("INV-0007", DocumentType.INVOICE, "INV-0008"),
            ("INV-0099", DocumentType.INVOICE, "INV-0100"),
            ("INV-9999", DocumentType.INVOICE, "INV-10000"),
            ("Q-00009", DocumentType.QUOTE, "Q-00010"),
            ("Q-1", DocumentType.QUOTE, "Q-00002"),
        ],
    )
    @pytest.mark.unit
    def test_increment(self, latest, document_type, expected):
        assert increment_identifier(latest, document_type) == expected

    @pytest.mark.parametrize("latest", ["INV0007", "INV-abc", "INV-", "garbage"])
    @pytest.mark.unit
    def test_malformed_identifier_raises(self, latest):
        with pytest.raises(ValueError):
            increment_identifier(latest, DocumentType.INVOICE)


class TestResolveNextIdentifier:

    @pytest.mark.unit
    async def test_increments_latest(self):
        outcome = await resolve_next_identifier("user_1", DocumentType.INVOICE, lambda: "INV-0007")
        assert outcome.is_ok
        assert outcome.value == "INV-0008"

    @pytest.mark.unit
    async def test_first_invoice_is_seeded(self):
        outcome = await resolve_next_identifier("user_1", DocumentType.INVOICE, lambda: None)
        assert outcome.is_ok
        assert outcome.value == "INV-0001"

    @pytest.mark.unit
    async def test_first_quote_is_seeded(self):
        assert await next_document_identifier("user_1", DocumentType.QUOTE, lambda: None) == "Q-00001"

    @pytest.mark.unit
    async def test_async_lookup(self):
        async def lookup():
            return "Q-00041"

        assert await next_document_identifier("user_1", DocumentType.QUOTE, lookup) == "Q-00042"

    @pytest.mark.unit
    async def test_malformed_latest_falls_back_to_timestamp(self):
        outcome = await resolve_next_identifier("user_1", DocumentType.INVOICE, lambda: "not-a-number")
        assert outcome.is_degraded
        assert INVOICE_FALLBACK.match(outcome.value)

    @pytest.mark.unit
    async def test_failing_lookup_falls_back_to_timestamp(self):
        def lookup():
            raise ConnectionError("database is down")

        outcome = await resolve_next_identifier("user_1", DocumentType.INVOICE, lookup)
        assert outcome.is_degraded
        assert "database is down" in outcome.reason
        assert INVOICE_FALLBACK.match(outcome.value)

    @pytest.mark.unit
    async def test_slow_lookup_times_out(self):
        async def lookup():
            await asyncio.sleep(1)
            return "INV-0001"

        outcome = await resolve_next_identifier("user_1", DocumentType.QUOTE, lookup, timeout=0.01)
        assert outcome.is_degraded
        assert outcome.reason == "lookup timed out"
        assert re.match(r"^Q-\d+$", outcome.value)
