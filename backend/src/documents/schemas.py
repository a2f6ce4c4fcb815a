from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from src.common.schemas import AppBaseModel, PaginatedResponse
from src.documents.calculations import MAX_AMOUNT, parse_decimal
from src.documents.types import DocumentType, InvoiceStatus, QuoteStatus, WorkflowState
from src.extraction.schemas import NormalizationIssue
from src.matching.schemas import Confidence


class AmountValidationMixin:

    @field_validator('quantity', 'unit_price', 'tax_rate', 'discount', check_fields=False)
    @classmethod
    def validate_amount(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            parsed = parse_decimal(v)
            if parsed.is_degraded:
                raise ValueError(f"Amount must be a decimal number up to {MAX_AMOUNT} ({parsed.reason})")
            if parsed.value < 0:
                raise ValueError("Amount cannot be negative")
        return v


# --- INPUT ---
class LineItemInput(AppBaseModel, AmountValidationMixin):

    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What is being sold"
    )

    quantity: str = Field(
        ...,
        max_length=32,
        description="Quantity as a decimal string"
    )

    unit_price: str = Field(
        ...,
        max_length=32,
        description="Net unit price as a decimal string"
    )

    tax_rate: str = Field(
        "0",
        max_length=32,
        description="Tax rate in percent as a decimal string"
    )

    product_id: Optional[int] = Field(
        None,
        gt=0,
        description="Saved product this line refers to (optional)"
    )


class ClientReference(AppBaseModel):
    """Client details to look up when no client_id is given."""
    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    tax_number: Optional[str] = Field(None, max_length=50)


class DocumentDraft(AppBaseModel, AmountValidationMixin):

    number: Optional[str] = Field(
        None,
        max_length=50,
        description="Document number; assigned automatically when omitted"
    )

    client_id: Optional[int] = Field(
        None,
        gt=0,
        description="Saved client (optional)"
    )

    client: Optional[ClientReference] = Field(
        None,
        description="Client details used for matching when client_id is omitted"
    )

    items: list[LineItemInput] = Field(
        default_factory=list,
        description="Ordered line items"
    )

    discount: str = Field(
        "0",
        max_length=32,
        description="Discount amount as a decimal string"
    )

    issue_date: Optional[date] = Field(None, strict=False, description="Defaults to today")
    due_date: Optional[date] = Field(None, strict=False, description="Invoices only; defaults to issue date + 30 days")
    valid_until: Optional[date] = Field(None, strict=False, description="Quotes only; defaults to issue date + 30 days")
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None


class InvoiceCreate(DocumentDraft):
    status: InvoiceStatus = Field(InvoiceStatus.DRAFT, strict=False)


class QuoteCreate(DocumentDraft):
    status: QuoteStatus = Field(QuoteStatus.DRAFT, strict=False)


class StatusUpdate(AppBaseModel):
    status: str = Field(..., min_length=1, max_length=20, description="New status, e.g. \"sent\"")


# --- WORKFLOW OUTPUT ---
class PreparedItem(AppBaseModel):
    description: str
    quantity: str
    unit_price: str
    tax_rate: str
    product_id: Optional[int] = None
    subtotal: str
    tax_amount: str
    total: str
    match_confidence: Optional[Confidence] = None


class MatchSummary(AppBaseModel):
    confidence: Confidence
    candidate_ids: list[Optional[int]] = Field(default_factory=list)
    scores: list[float] = Field(default_factory=list)


class PreparedDocument(AppBaseModel):
    """Result of the document workflow, ready to be persisted or shown for review."""
    state: WorkflowState
    document_type: DocumentType
    number: Optional[str] = None
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    client_match: Optional[MatchSummary] = None
    items: list[PreparedItem]
    discount: str
    subtotal: str
    tax_amount: str
    total: str
    issue_date: date
    due_date: Optional[date] = None
    valid_until: Optional[date] = None
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    needs_clarification: bool = False
    clarification_questions: list[str] = Field(default_factory=list)
    issues: list[NormalizationIssue] = Field(default_factory=list)
    degradations: list[str] = Field(default_factory=list)


# --- RESPONSES ---
class LineItemResponse(AppBaseModel):
    id: int = Field(..., gt=0)
    position: int
    description: str
    quantity: str
    unit_price: str
    tax_rate: str
    tax_amount: str
    subtotal: str
    total: str
    product_id: Optional[int] = None


class DocumentResponseBase(AppBaseModel):
    id: int = Field(..., gt=0)
    number: str
    client_id: Optional[int] = None
    issue_date: date
    discount: str
    subtotal: str
    tax_amount: str
    total: str
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    items: list[LineItemResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class InvoiceResponse(DocumentResponseBase):
    status: InvoiceStatus
    due_date: date


class QuoteResponse(DocumentResponseBase):
    status: QuoteStatus
    valid_until: date


class InvoiceListResponse(PaginatedResponse[InvoiceResponse]):
    pass


class QuoteListResponse(PaginatedResponse[QuoteResponse]):
    pass

