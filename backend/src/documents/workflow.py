"""
Document workflow: from a draft or an extraction to a priced, numbered document.

Steps run in a fixed order, without going back:

    normalize (extractions only) -> match client -> match products
        -> line item totals -> document totals -> number (new documents only)

The workflow never persists anything. It either returns a ``PreparedDocument``
in state ``ready`` or ``needs_clarification``, or raises ``EmptyDocumentError``
when there is nothing to price. Everything else (unparsable amounts, a
failing number lookup) is repaired, logged and listed in ``degradations``.
"""
import logging
from datetime import date, timedelta
from typing import Any, Optional, Sequence

from src.common.fields import read_field
from src.documents.calculations import compute_document_totals, compute_line_item_totals, parse_decimal
from src.documents.exceptions import EmptyDocumentError
from src.documents.numbering import DEFAULT_LOOKUP_TIMEOUT, LookupLatest, resolve_next_identifier
from src.documents.schemas import DocumentDraft, MatchSummary, PreparedDocument, PreparedItem
from src.documents.types import DocumentType, WorkflowState
from src.extraction.normalization import (
    DEFAULT_TERM_DAYS,
    UNKNOWN_CLIENT_NAME,
    normalize_extraction,
    unresolved_client_issue,
)
from src.extraction.schemas import IssueCode, NormalizationIssue, unique_questions
from src.matching.schemas import Confidence, EntityKind, MatchResult
from src.matching.service import match_entities

logger = logging.getLogger(__name__)


def _no_previous_number() -> None:
    return None


def _summary(match: MatchResult) -> MatchSummary:
    return MatchSummary(
        confidence=match.confidence,
        candidate_ids=[read_field(candidate, "id") for candidate in match.matches],
        scores=list(match.scores),
    )


class DocumentWorkflow:
    """
    Prepares one invoice or quote per ``run`` call.

    Args:
        document_type: Invoice or quote
        clients: The user's saved clients (matching candidates)
        products: The user's saved products (matching candidates)
        lookup_latest: Sync or async callable returning the user's latest
            number of this type; None means there is no previous document
        numbering_timeout: Seconds to wait for ``lookup_latest``
        today: Reference date for default dates

    Usage:
        workflow = DocumentWorkflow(DocumentType.INVOICE, clients, products, lookup)
        prepared = await workflow.run(user_id="user_1", extraction=raw_llm_json)
    """

    def __init__(
        self,
        document_type: DocumentType,
        clients: Sequence[Any] = (),
        products: Sequence[Any] = (),
        lookup_latest: Optional[LookupLatest] = None,
        numbering_timeout: float = DEFAULT_LOOKUP_TIMEOUT,
        today: Optional[date] = None,
    ):
        self.document_type = DocumentType(document_type)
        self.clients = list(clients)
        self.products = list(products)
        self.lookup_latest = lookup_latest or _no_previous_number
        self.numbering_timeout = numbering_timeout
        self.today = today

    async def run(
        self,
        *,
        user_id: str,
        draft: Optional[DocumentDraft] = None,
        extraction: Any = None,
        creating: bool = True,
    ) -> PreparedDocument:
        today = self.today or date.today()
        issues: list[NormalizationIssue] = []
        degradations: list[str] = []
        validate_ids = False

        # 1. Normalize
        if extraction is not None:
            normalized = normalize_extraction(extraction, self.document_type, today)
            result = normalized.result
            issues.extend(normalized.issues)
            client = result.client
            client_id = client.id
            client_known = not any(issue.code == IssueCode.MISSING_CLIENT for issue in issues)
            items = [item.model_dump() for item in result.items]
            document = result.document.model_dump()
            number = None
            validate_ids = True
        else:
            draft = draft or DocumentDraft()
            client = draft.client
            client_id = draft.client_id
            client_known = bool(client and client.name)
            items = [item.model_dump() for item in draft.items]
            document = draft.model_dump(exclude={"items", "client", "client_id", "number"})
            number = draft.number
            if client_id is None and client_known:
                issues.append(unresolved_client_issue(client.name))

        if not items:
            raise EmptyDocumentError(self.document_type.value)

        # Ids proposed by the extractor must belong to the user's records
        if validate_ids and client_id is not None and client_id not in self._ids(self.clients):
            logger.warning(f"Extracted client id {client_id} is not a saved client of user {user_id}")
            client_id = None
            issues.append(unresolved_client_issue(client.name))

        # 2. Match client
        client_match: Optional[MatchSummary] = None
        client_name = read_field(client, "name")
        if client_id is None and client_known and client_name and client_name != UNKNOWN_CLIENT_NAME:
            match = match_entities(client, self.clients, EntityKind.CLIENT)
            client_match = _summary(match)
            if match.confidence == Confidence.HIGH and read_field(match.best, "id") is not None:
                client_id = read_field(match.best, "id")
                issues = [issue for issue in issues if issue.code != IssueCode.UNRESOLVED_CLIENT]
                logger.info(f"Resolved client '{client_name}' to saved client {client_id}")

        # 3. Match products
        product_ids = self._ids(self.products)
        prepared_items: list[PreparedItem] = []
        for position, item in enumerate(items, start=1):
            product_id = item.get("product_id")
            match_confidence = None

            if validate_ids and product_id is not None and product_id not in product_ids:
                logger.warning(f"Extracted product id {product_id} is not a saved product of user {user_id}")
                product_id = None

            if product_id is None and self.products:
                match = match_entities({"description": item["description"]}, self.products, EntityKind.PRODUCT)
                match_confidence = match.confidence
                if match.confidence == Confidence.HIGH:
                    product_id = read_field(match.best, "id")

            # 4. Line item totals
            for field in ("quantity", "unit_price", "tax_rate"):
                parsed = parse_decimal(item.get(field))
                if parsed.is_degraded:
                    degradations.append(f"items[{position - 1}].{field}: {parsed.reason}, using 0")

            totals = compute_line_item_totals(item.get("quantity"), item.get("unit_price"), item.get("tax_rate"))
            prepared_items.append(PreparedItem(
                description=item["description"],
                quantity=str(item.get("quantity")),
                unit_price=str(item.get("unit_price")),
                tax_rate=str(item.get("tax_rate") if item.get("tax_rate") is not None else "0"),
                product_id=product_id,
                subtotal=totals.subtotal,
                tax_amount=totals.tax_amount,
                total=totals.total,
                match_confidence=match_confidence,
            ))

        # 5. Document totals
        discount = document.get("discount") or "0"
        parsed_discount = parse_decimal(discount)
        if parsed_discount.is_degraded:
            degradations.append(f"discount: {parsed_discount.reason}, using 0")
        totals = compute_document_totals(prepared_items, discount)

        issue_date = document.get("issue_date") or today
        deadline_field = self.document_type.deadline_field
        deadline = document.get(deadline_field) or issue_date + timedelta(days=DEFAULT_TERM_DAYS)

        # 6. Number
        if creating and not number:
            outcome = await resolve_next_identifier(
                user_id, self.document_type, self.lookup_latest, self.numbering_timeout
            )
            if outcome.is_degraded:
                degradations.append(f"number: {outcome.reason}, using {outcome.value}")
            number = outcome.value

        for degradation in degradations:
            logger.warning(f"{self.document_type.value} for user {user_id}: {degradation}")

        state = WorkflowState.NEEDS_CLARIFICATION if issues else WorkflowState.READY

        return PreparedDocument(
            state=state,
            document_type=self.document_type,
            number=number,
            client_id=client_id,
            client_name=client_name,
            client_match=client_match,
            items=prepared_items,
            discount=str(discount),
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total=totals.total,
            issue_date=issue_date,
            notes=document.get("notes"),
            terms_and_conditions=document.get("terms_and_conditions"),
            needs_clarification=bool(issues),
            clarification_questions=unique_questions(issues),
            issues=issues,
            degradations=degradations,
            **{deadline_field: deadline},
        )

    @staticmethod
    def _ids(records: Sequence[Any]) -> set[Any]:
        return {read_field(record, "id") for record in records}
