"""
Validation and repair of LLM extraction output.

The extractor is asked for a fixed JSON shape (client, items, document,
clarification flags) but may return anything. ``normalize_extraction``
turns whatever came back into a structurally valid ``ExtractionResult``:
every missing or malformed piece is replaced with a safe default and
recorded as a ``NormalizationIssue`` carrying a question for the user.

Keys are accepted in camelCase (the extractor's contract) and snake_case.
The function never raises.
"""
import logging
from collections.abc import Mapping
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

from src.common.fields import read_field
from src.documents.calculations import parse_decimal
from src.documents.types import DocumentType
from src.extraction.schemas import (
    ExtractedClient,
    ExtractedDocument,
    ExtractedItem,
    ExtractionResult,
    IssueCode,
    NormalizationIssue,
    NormalizationResult,
)
from src.matching.schemas import Confidence

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT_NAME = "Unknown Client"
PLACEHOLDER_DESCRIPTION = "Services as described"
DEFAULT_TERM_DAYS = 30
FALLBACK_NOTES = "Generated from incomplete information. Please review and edit."

CLIENT_DETAILS_QUESTION = "Could you provide more details about the client?"
ITEMS_QUESTION = "What specific products or services should be included?"
QUANTITIES_QUESTION = "What are the quantities and prices for each item?"
REVIEW_QUESTION = "Please review the extracted details before finalizing the document."

_DEADLINE_KEYS = {
    DocumentType.INVOICE: ("due_date", "dueDate"),
    DocumentType.QUOTE: ("valid_until", "validUntil"),
}


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _record_id(value: Any) -> Optional[int]:
    """Record ids are positive integers; anything else means "not resolved"."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    text = _text(value)
    if text and text.isdigit() and int(text) > 0:
        return int(text)
    return None


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = _text(value)
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _amount_text(value: Decimal) -> str:
    return format(value.normalize(), "f") if value != 0 else "0"


def _parse_amount(value: Any) -> Optional[str]:
    """Non-negative decimal string, or None when missing/unparsable/negative."""
    outcome = parse_decimal(value)
    if outcome.is_degraded or outcome.value < 0:
        return None
    return _amount_text(outcome.value)


def _issue(code: IssueCode, message: str, question: str, field: Optional[str] = None) -> NormalizationIssue:
    return NormalizationIssue(code=code, message=message, question=question, field=field)


def _normalize_client(raw_client: Any, issues: list[NormalizationIssue]) -> ExtractedClient:
    if not isinstance(raw_client, Mapping) or not _text(raw_client.get("name")):
        issues.append(_issue(
            IssueCode.MISSING_CLIENT,
            "Client name is missing",
            CLIENT_DETAILS_QUESTION,
            "client",
        ))
        return ExtractedClient(name=UNKNOWN_CLIENT_NAME, confidence=Confidence.LOW)

    name = _text(raw_client.get("name"))
    raw_confidence = _text(raw_client.get("confidence"))
    try:
        confidence = Confidence(raw_confidence.lower()) if raw_confidence else Confidence.LOW
    except ValueError:
        confidence = Confidence.LOW

    client_id = _record_id(raw_client.get("id"))
    if client_id is None:
        issues.append(unresolved_client_issue(name))

    return ExtractedClient(
        id=client_id,
        name=name,
        email=_text(raw_client.get("email")),
        phone=_text(raw_client.get("phone")),
        address=_text(raw_client.get("address")),
        tax_number=_text(read_field(raw_client, "tax_number", "taxNumber")),
        confidence=confidence,
    )


def normalize_extracted_client(raw_client: Any) -> tuple[ExtractedClient, list[NormalizationIssue]]:
    """Repair a standalone client extraction; same rules as the ``client`` part of a document."""
    issues: list[NormalizationIssue] = []
    try:
        client = _normalize_client(raw_client, issues)
    except Exception as e:
        logger.error(f"Unexpected error while normalizing client: {e}", exc_info=True)
        issues = [_issue(IssueCode.UNEXPECTED_ERROR, f"Normalization failed: {e}", CLIENT_DETAILS_QUESTION, "client")]
        client = ExtractedClient(name=UNKNOWN_CLIENT_NAME, confidence=Confidence.LOW)
    return client, issues


def unresolved_client_issue(name: str) -> NormalizationIssue:
    return _issue(
        IssueCode.UNRESOLVED_CLIENT,
        f"Client '{name}' does not match a saved client",
        f"Is '{name}' an existing client or a new one?",
        "client.id",
    )


def _placeholder_item() -> ExtractedItem:
    return ExtractedItem(description=PLACEHOLDER_DESCRIPTION, quantity="1", unit_price="0", tax_rate="0")


def _normalize_item(raw_item: Mapping, position: int, issues: list[NormalizationIssue]) -> ExtractedItem:
    prefix = f"items[{position - 1}]"

    description = _text(raw_item.get("description")) or _text(raw_item.get("name"))
    if not description:
        description = f"Item {position}"
        issues.append(_issue(
            IssueCode.MISSING_DESCRIPTION,
            f"Item {position} has no description",
            f"What is the description of item {position}?",
            f"{prefix}.description",
        ))

    quantity = _parse_amount(raw_item.get("quantity"))
    if quantity is None:
        quantity = "1"
        issues.append(_issue(
            IssueCode.INVALID_QUANTITY,
            f"Quantity of '{description}' is missing or invalid",
            f"What is the quantity for '{description}'?",
            f"{prefix}.quantity",
        ))

    unit_price = _parse_amount(read_field(raw_item, "unit_price", "unitPrice"))
    if unit_price is None:
        unit_price = "0"
        issues.append(_issue(
            IssueCode.INVALID_UNIT_PRICE,
            f"Unit price of '{description}' is missing or invalid",
            f"What is the unit price for '{description}'?",
            f"{prefix}.unit_price",
        ))

    raw_tax_rate = read_field(raw_item, "tax_rate", "taxRate")
    if raw_tax_rate is None or _text(raw_tax_rate) is None:
        tax_rate = "0"
    else:
        tax_rate = _parse_amount(raw_tax_rate)
        if tax_rate is None:
            tax_rate = "0"
            issues.append(_issue(
                IssueCode.INVALID_TAX_RATE,
                f"Tax rate of '{description}' is invalid",
                f"What tax rate applies to '{description}'?",
                f"{prefix}.tax_rate",
            ))

    return ExtractedItem(
        product_id=_record_id(read_field(raw_item, "product_id", "productId")),
        description=description,
        quantity=quantity,
        unit_price=unit_price,
        tax_rate=tax_rate,
    )


def _normalize_items(raw_items: Any, issues: list[NormalizationIssue]) -> list[ExtractedItem]:
    items: list[ExtractedItem] = []

    if isinstance(raw_items, list):
        for position, raw_item in enumerate(raw_items, start=1):
            if not isinstance(raw_item, Mapping):
                issues.append(_issue(
                    IssueCode.INVALID_ITEM,
                    f"Item {position} is not an object and was dropped",
                    ITEMS_QUESTION,
                    f"items[{position - 1}]",
                ))
                continue
            items.append(_normalize_item(raw_item, position, issues))

    if not items:
        issues.append(_issue(
            IssueCode.MISSING_ITEMS,
            "No line items were found",
            ITEMS_QUESTION,
            "items",
        ))
        issues.append(_issue(
            IssueCode.MISSING_ITEMS,
            "Placeholder item added",
            QUANTITIES_QUESTION,
            "items",
        ))
        items.append(_placeholder_item())

    return items


def _normalize_document(
    raw_document: Any,
    document_type: DocumentType,
    today: date,
    issues: list[NormalizationIssue],
) -> ExtractedDocument:
    raw_document = raw_document if isinstance(raw_document, Mapping) else {}
    kind = document_type.value

    issue_date = _parse_date(read_field(raw_document, "issue_date", "issueDate"))
    if issue_date is None:
        issue_date = today
        issues.append(_issue(
            IssueCode.INVALID_ISSUE_DATE,
            "Issue date is missing or invalid, using today",
            f"What is the issue date of this {kind}?",
            "document.issue_date",
        ))

    deadline_field = document_type.deadline_field
    deadline = _parse_date(read_field(raw_document, *_DEADLINE_KEYS[document_type]))
    if deadline is None:
        deadline = issue_date + timedelta(days=DEFAULT_TERM_DAYS)
        question = (
            "When is this invoice due?"
            if document_type is DocumentType.INVOICE
            else "Until when is this quote valid?"
        )
        issues.append(_issue(
            IssueCode.INVALID_DEADLINE,
            f"{deadline_field} is missing or invalid, using issue date + {DEFAULT_TERM_DAYS} days",
            question,
            f"document.{deadline_field}",
        ))

    raw_discount = raw_document.get("discount")
    discount = "0"
    if raw_discount is not None and _text(raw_discount) is not None:
        parsed_discount = _parse_amount(raw_discount)
        if parsed_discount is None:
            issues.append(_issue(
                IssueCode.INVALID_DISCOUNT,
                "Discount is invalid, using 0",
                "What discount should be applied?",
                "document.discount",
            ))
        else:
            discount = parsed_discount

    return ExtractedDocument(
        issue_date=issue_date,
        notes=_text(raw_document.get("notes")),
        terms_and_conditions=_text(read_field(raw_document, "terms_and_conditions", "termsAndConditions")),
        discount=discount,
        **{deadline_field: deadline},
    )


def _extractor_questions(raw: Mapping) -> list[NormalizationIssue]:
    flagged = read_field(raw, "needs_clarification", "needsClarification") is True
    raw_questions = read_field(raw, "clarification_questions", "clarificationQuestions")
    questions = [
        text for text in (_text(q) for q in raw_questions) if text
    ] if isinstance(raw_questions, list) else []

    issues = [
        _issue(IssueCode.EXTRACTOR_QUESTION, "Raised by the extractor", question)
        for question in questions
    ]
    if flagged and not issues:
        issues.append(_issue(IssueCode.EXTRACTOR_QUESTION, "Extractor asked for a review", REVIEW_QUESTION))
    return issues


def build_fallback_result(document_type: DocumentType, today: Optional[date] = None) -> NormalizationResult:
    """Fully defaulted result used when nothing usable could be extracted."""
    today = today or date.today()
    deadline = today + timedelta(days=DEFAULT_TERM_DAYS)

    result = ExtractionResult(
        client=ExtractedClient(name=UNKNOWN_CLIENT_NAME, confidence=Confidence.LOW),
        items=[_placeholder_item()],
        document=ExtractedDocument(
            issue_date=today,
            notes=FALLBACK_NOTES,
            **{document_type.deadline_field: deadline},
        ),
    )
    issues = [
        _issue(IssueCode.MISSING_CLIENT, "Client could not be extracted", CLIENT_DETAILS_QUESTION, "client"),
        _issue(IssueCode.MISSING_ITEMS, "Items could not be extracted", ITEMS_QUESTION, "items"),
        _issue(IssueCode.MISSING_ITEMS, "Placeholder item added", QUANTITIES_QUESTION, "items"),
    ]
    return NormalizationResult.from_issues(result, issues)


def normalize_extraction(
    raw: Any,
    document_type: DocumentType,
    today: Optional[date] = None,
) -> NormalizationResult:
    """
    Validate and repair an extraction payload.

    Args:
        raw: Object returned by the extractor (anything; non-mappings count as {})
        document_type: Invoice or quote, selects the deadline field
        today: Reference date for default dates (defaults to date.today())

    Returns:
        NormalizationResult with a structurally valid result. Any repair, an
        unresolved client or a question from the extractor sets
        ``needs_clarification``.
    """
    today = today or date.today()
    try:
        document_type = DocumentType(document_type)
    except ValueError:
        logger.warning(f"Unknown document type {document_type!r}, normalizing as invoice")
        document_type = DocumentType.INVOICE

    try:
        issues: list[NormalizationIssue] = []

        if not isinstance(raw, Mapping):
            issues.append(_issue(
                IssueCode.INVALID_PAYLOAD,
                f"Extraction payload is {type(raw).__name__}, not an object",
                REVIEW_QUESTION,
            ))
            raw = {}

        extractor_issues = _extractor_questions(raw)
        client = _normalize_client(raw.get("client"), issues)
        items = _normalize_items(raw.get("items"), issues)
        document = _normalize_document(raw.get("document"), document_type, today, issues)

        result = ExtractionResult(client=client, items=items, document=document)
        normalized = NormalizationResult.from_issues(result, extractor_issues + issues)

        if normalized.needs_clarification:
            logger.info(
                f"Extracted {document_type.value} needs clarification: "
                f"{', '.join(issue.code.value for issue in normalized.issues)}"
            )
        return normalized

    except Exception as e:
        logger.error(f"Unexpected error while normalizing extraction: {e}", exc_info=True)
        fallback = build_fallback_result(document_type, today)
        issues = fallback.issues + [
            _issue(IssueCode.UNEXPECTED_ERROR, f"Normalization failed: {e}", REVIEW_QUESTION)
        ]
        return NormalizationResult.from_issues(fallback.result, issues)


def validate_extraction(raw: Any, document_type: DocumentType) -> list[str]:
    """
    List structural problems of a raw extraction without repairing anything.

    Used to decide whether a provider answer is good enough or the next
    provider should be tried.
    """
    if not isinstance(raw, Mapping):
        return ["Response is not a valid object"]

    errors: list[str] = []

    client = raw.get("client")
    if not isinstance(client, Mapping):
        errors.append("Missing client information")
    elif not _text(client.get("name")):
        errors.append("Missing client name")

    items = raw.get("items")
    if not isinstance(items, list) or not items:
        errors.append("Missing or empty items array")
    elif not isinstance(items[0], Mapping):
        errors.append("Items are not objects")
    else:
        first = items[0]
        if not _text(first.get("description")):
            errors.append("Missing item description")
        if first.get("quantity") is None:
            errors.append("Missing item quantity")
        if read_field(first, "unit_price", "unitPrice") is None:
            errors.append("Missing item unit price")

    document = raw.get("document")
    if not isinstance(document, Mapping):
        errors.append("Missing or invalid document information")
    elif read_field(document, *_DEADLINE_KEYS[DocumentType(document_type)]) is None:
        errors.append(f"Missing {DocumentType(document_type).deadline_field} for {DocumentType(document_type).value}")

    return errors
