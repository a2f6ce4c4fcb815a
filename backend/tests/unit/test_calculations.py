"""
Unit tests for monetary arithmetic.

Tests cover:
- parse_decimal() - lenient parsing with Ok/Degraded outcomes
- format_amount() - two-place formatting
- compute_line_item_totals() - per item subtotal, tax and total
- compute_document_totals() - aggregation and discount
"""
from decimal import Decimal

import pytest

from src.documents.calculations import (
    MAX_AMOUNT,
    compute_document_totals,
    compute_line_item_totals,
    format_amount,
    parse_decimal,
    round2,
)


class TestParseDecimal:
    """Tests for parse_decimal() function."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("12.50", Decimal("12.50")),
            ("  7 ", Decimal("7")),
            (3, Decimal("3")),
            (0.1, Decimal("0.1")),
            (Decimal("2.345"), Decimal("2.345")),
            ("-4", Decimal("-4")),
        ],
    )
    @pytest.mark.unit
    def test_parse_valid_values(self, value, expected):
        outcome = parse_decimal(value)
        assert outcome.is_ok
        assert outcome.value == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "1,5", "NaN", "Infinity", True, [1]])
    @pytest.mark.unit
    def test_parse_invalid_values_degrade_to_zero(self, value):
        outcome = parse_decimal(value)
        assert outcome.is_degraded
        assert outcome.value == Decimal("0")
        assert outcome.reason

    @pytest.mark.parametrize("value", ["1e30", "9" * 29, "-1e10", Decimal("1000000000.01")])
    @pytest.mark.unit
    def test_out_of_range_values_degrade_to_zero(self, value):
        outcome = parse_decimal(value)
        assert outcome.is_degraded
        assert outcome.value == Decimal("0")
        assert "out of range" in outcome.reason

    @pytest.mark.unit
    def test_bound_is_inclusive_and_adjustable(self):
        assert parse_decimal(str(MAX_AMOUNT)).is_ok
        assert parse_decimal("1e20", limit=Decimal("1e27")).is_ok


class TestFormatAmount:

    @pytest.mark.parametrize(
        "value,expected",
        [
            (Decimal("1.005"), "1.01"),
            (Decimal("2.675"), "2.68"),
            (Decimal("-1.005"), "-1.01"),
            (Decimal("10"), "10.00"),
            (Decimal("-0.001"), "0.00"),
        ],
    )
    @pytest.mark.unit
    def test_rounds_half_up_to_cents(self, value, expected):
        assert format_amount(value) == expected

    @pytest.mark.unit
    def test_round2(self):
        assert round2(Decimal("0.125")) == Decimal("0.13")


class TestComputeLineItemTotals:
    """Tests for compute_line_item_totals() function."""

    @pytest.mark.unit
    def test_quantity_price_and_tax(self):
        totals = compute_line_item_totals("5", "100", "8")
        assert totals.subtotal == "500.00"
        assert totals.tax_amount == "40.00"
        assert totals.total == "540.00"

    @pytest.mark.unit
    def test_tax_is_computed_on_the_rounded_subtotal(self):
        totals = compute_line_item_totals("3", "0.335", "10")
        assert totals.subtotal == "1.01"
        assert totals.tax_amount == "0.10"
        assert totals.total == "1.11"

    @pytest.mark.unit
    def test_unparsable_values_count_as_zero(self):
        totals = compute_line_item_totals("two", "100", None)
        assert totals.subtotal == "0.00"
        assert totals.tax_amount == "0.00"
        assert totals.total == "0.00"

        totals = compute_line_item_totals("2", "100", "abc")
        assert totals.subtotal == "200.00"
        assert totals.tax_amount == "0.00"

    @pytest.mark.unit
    def test_recomputing_from_the_implied_price_gives_the_same_totals(self):
        first = compute_line_item_totals("3", "19.99", "23")
        again = compute_line_item_totals("1", first.subtotal, "23")
        assert first == again
        assert first.total == "73.76"

    @pytest.mark.unit
    def test_same_input_same_output(self):
        assert compute_line_item_totals(2, 12.5, 5) == compute_line_item_totals("2", "12.50", "5")

    @pytest.mark.unit
    def test_largest_accepted_amounts(self):
        totals = compute_line_item_totals(MAX_AMOUNT, MAX_AMOUNT, MAX_AMOUNT)
        assert totals.subtotal == "1000000000000000000.00"
        assert totals.tax_amount == "10000000000000000000000000.00"
        assert totals.total == "10000001000000000000000000.00"

    @pytest.mark.parametrize("quantity", ["1e30", "9" * 29])
    @pytest.mark.unit
    def test_oversized_values_count_as_zero(self, quantity):
        totals = compute_line_item_totals(quantity, "1", "0")
        assert (totals.subtotal, totals.tax_amount, totals.total) == ("0.00", "0.00", "0.00")


class TestComputeDocumentTotals:
    """Tests for compute_document_totals() function."""

    @pytest.mark.unit
    def test_single_item_without_discount(self):
        item = compute_line_item_totals("5", "100", "8")
        totals = compute_document_totals([item], "0")
        assert (totals.subtotal, totals.tax_amount, totals.total) == ("500.00", "40.00", "540.00")

    @pytest.mark.unit
    def test_two_items_with_discount(self):
        items = [
            compute_line_item_totals("2", "100", "0"),
            compute_line_item_totals("1", "50", "10"),
        ]
        totals = compute_document_totals(items, "50")
        item_totals = sum(Decimal(item.total) for item in items)
        assert totals.subtotal == "250.00"
        assert totals.tax_amount == "5.00"
        assert totals.total == "205.00"
        assert Decimal(totals.total) == item_totals - Decimal("50")

    @pytest.mark.unit
    def test_accepts_mappings_in_either_key_style(self):
        items = [
            {"subtotal": "10.00", "tax_amount": "1.00"},
            {"subtotal": "20.00", "taxAmount": "2.00"},
            {"subtotal": "5.00"},
        ]
        totals = compute_document_totals(items)
        assert totals.subtotal == "35.00"
        assert totals.tax_amount == "3.00"
        assert totals.total == "38.00"

    @pytest.mark.unit
    def test_discount_larger_than_items_is_not_clamped(self):
        totals = compute_document_totals([{"subtotal": "10", "tax_amount": "0"}], "15")
        assert totals.total == "-5.00"

    @pytest.mark.unit
    def test_no_items(self):
        totals = compute_document_totals([])
        assert (totals.subtotal, totals.tax_amount, totals.total) == ("0.00", "0.00", "0.00")

    @pytest.mark.unit
    def test_invalid_discount_is_ignored(self):
        totals = compute_document_totals([{"subtotal": "10", "tax_amount": "2"}], "ten")
        assert totals.total == "12.00"

    @pytest.mark.unit
    def test_oversized_discount_is_ignored(self):
        totals = compute_document_totals([{"subtotal": "1.00"}], "1e30")
        assert totals.total == "1.00"

    @pytest.mark.unit
    def test_line_amounts_above_the_input_bound_are_summed(self):
        item = compute_line_item_totals(MAX_AMOUNT, "1000", "10")
        totals = compute_document_totals([item, item])
        assert totals.subtotal == "2000000000000.00"
        assert totals.tax_amount == "200000000000.00"
        assert totals.total == "2200000000000.00"
