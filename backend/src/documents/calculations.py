"""
Monetary arithmetic for invoices and quotes.

All amounts travel as decimal strings ("12.50") and are computed with
``decimal.Decimal``; floats are never persisted. Results are rounded to two
places with standard (half-up) rounding.

Parsing is lenient: anything that is not a finite number within
``MAX_AMOUNT`` counts as zero. That decision lives in one place,
``parse_decimal``, which reports the repair as a degraded ``Outcome`` so
callers can surface it.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict

from src.common.fields import read_field
from src.common.outcome import Outcome

ZERO = Decimal("0")
CENT = Decimal("0.01")
# Largest accepted input amount
MAX_AMOUNT = Decimal("1000000000")
# Largest line amount read back by the document totals; fits String(32) with cents
MAX_LINE_AMOUNT = Decimal("1e27")
# Enough digits for products and sums of bounded amounts
PRECISION = 60


class LineItemTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    subtotal: str
    tax_amount: str
    total: str


class DocumentTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    subtotal: str
    tax_amount: str
    total: str


def parse_decimal(value: Any, limit: Decimal = MAX_AMOUNT) -> Outcome[Decimal]:
    """
    Parse a monetary/numeric input into a Decimal.

    Accepts str, int, Decimal and float (floats go through ``str`` so that
    0.1 stays 0.1). Thousands separators are not supported.

    Args:
        value: Raw input value
        limit: Largest accepted magnitude

    Returns:
        Ok(Decimal) on success, Degraded(Decimal("0"), reason) when the input
        is missing, blank, unparsable, not finite or larger than ``limit``
    """
    if value is None:
        return Outcome.degraded(ZERO, "missing value")

    if isinstance(value, bool):
        return Outcome.degraded(ZERO, f"not a number: {value!r}")

    if isinstance(value, Decimal):
        candidate = value
    elif isinstance(value, (int, float)):
        try:
            candidate = Decimal(str(value))
        except InvalidOperation:
            return Outcome.degraded(ZERO, f"not a number: {value!r}")
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return Outcome.degraded(ZERO, "blank value")
        try:
            candidate = Decimal(text)
        except InvalidOperation:
            return Outcome.degraded(ZERO, f"not a number: {value!r}")
    else:
        return Outcome.degraded(ZERO, f"unsupported type: {type(value).__name__}")

    if not candidate.is_finite():
        return Outcome.degraded(ZERO, f"not a finite number: {value!r}")

    if abs(candidate) > limit:
        return Outcome.degraded(ZERO, f"out of range (max {limit}): {value!r}")

    return Outcome.ok(candidate)


def to_decimal(value: Any) -> Decimal:
    """Lenient parse: unparsable input becomes zero."""
    return parse_decimal(value).value


def round2(value: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    """Fixed two-place string. Negative zero is printed as ``0.00``."""
    rounded = round2(value)
    if rounded == ZERO:
        rounded = abs(rounded)
    return f"{rounded:.2f}"


def compute_line_item_totals(quantity: Any, unit_price: Any, tax_rate: Any) -> LineItemTotals:
    """
    Derive subtotal, tax and total for a single line item.

    Args:
        quantity: Item quantity
        unit_price: Net price per unit
        tax_rate: Tax rate in percent (8 means 8%)

    Returns:
        LineItemTotals with two-place decimal strings
    """
    with localcontext() as ctx:
        ctx.prec = PRECISION
        subtotal = round2(to_decimal(quantity) * to_decimal(unit_price))
        tax_amount = round2(subtotal * to_decimal(tax_rate) / Decimal(100))
        total = round2(subtotal + tax_amount)

    return LineItemTotals(
        subtotal=format_amount(subtotal),
        tax_amount=format_amount(tax_amount),
        total=format_amount(total),
    )


def compute_document_totals(items: Iterable[Any], discount: Optional[Any] = None) -> DocumentTotals:
    """
    Aggregate line items into document totals.

    ``total = subtotal + tax_amount - discount``; a discount larger than the
    items produces a negative total, it is not clamped.

    Args:
        items: Line items as objects or mappings carrying ``subtotal`` and an
            optional ``tax_amount`` (``taxAmount`` is accepted as well)
        discount: Optional discount amount

    Returns:
        DocumentTotals with two-place decimal strings
    """
    subtotal = ZERO
    tax_amount = ZERO
    with localcontext() as ctx:
        ctx.prec = PRECISION
        for item in items:
            subtotal += parse_decimal(read_field(item, "subtotal"), MAX_LINE_AMOUNT).value
            item_tax = read_field(item, "tax_amount", "taxAmount")
            tax_amount += parse_decimal(item_tax if item_tax is not None else "0", MAX_LINE_AMOUNT).value

        subtotal = round2(subtotal)
        tax_amount = round2(tax_amount)
        total = round2(subtotal + tax_amount - to_decimal(discount if discount is not None else "0"))

    return DocumentTotals(
        subtotal=format_amount(subtotal),
        tax_amount=format_amount(tax_amount),
        total=format_amount(total),
    )
