import enum
from datetime import date
from typing import Optional

from pydantic import Field

from src.clients.schemas import ClientResponse
from src.common.schemas import AppBaseModel
from src.documents.types import DocumentType
from src.matching.schemas import Confidence


class IssueCode(str, enum.Enum):
    INVALID_PAYLOAD = "invalid_payload"
    MISSING_CLIENT = "missing_client"
    UNRESOLVED_CLIENT = "unresolved_client"
    MISSING_ITEMS = "missing_items"
    INVALID_ITEM = "invalid_item"
    MISSING_DESCRIPTION = "missing_description"
    INVALID_QUANTITY = "invalid_quantity"
    INVALID_UNIT_PRICE = "invalid_unit_price"
    INVALID_TAX_RATE = "invalid_tax_rate"
    INVALID_ISSUE_DATE = "invalid_issue_date"
    INVALID_DEADLINE = "invalid_deadline"
    INVALID_DISCOUNT = "invalid_discount"
    EXTRACTOR_QUESTION = "extractor_question"
    UNEXPECTED_ERROR = "unexpected_error"


class NormalizationIssue(AppBaseModel):
    """A single repair applied to extracted data, with the question to ask the user."""
    code: IssueCode
    message: str
    question: str
    field: Optional[str] = None


# --- EXTRACTED SHAPES ---
class ExtractedClient(AppBaseModel):
    id: Optional[int] = Field(None, description="Existing client id, set only when resolved")
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    tax_number: Optional[str] = None
    confidence: Confidence = Confidence.LOW


class ExtractedItem(AppBaseModel):
    product_id: Optional[int] = None
    description: str = Field(..., min_length=1)
    quantity: str
    unit_price: str
    tax_rate: str


class ExtractedDocument(AppBaseModel):
    issue_date: date
    due_date: Optional[date] = None
    valid_until: Optional[date] = None
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    discount: str = "0"


class ExtractionResult(AppBaseModel):
    client: ExtractedClient
    items: list[ExtractedItem] = Field(..., min_length=1)
    document: ExtractedDocument


class NormalizationResult(AppBaseModel):
    """
    Structurally valid extraction plus everything that had to be repaired.

    ``needs_clarification`` is set whenever at least one issue was recorded;
    ``clarification_questions`` are the issues' questions, deduplicated in
    order of appearance.
    """
    result: ExtractionResult
    needs_clarification: bool
    clarification_questions: list[str] = Field(default_factory=list)
    issues: list[NormalizationIssue] = Field(default_factory=list)

    @classmethod
    def from_issues(cls, result: ExtractionResult, issues: list[NormalizationIssue]) -> "NormalizationResult":
        return cls(
            result=result,
            needs_clarification=bool(issues),
            clarification_questions=unique_questions(issues),
            issues=issues,
        )


def unique_questions(issues: list[NormalizationIssue]) -> list[str]:
    seen: set[str] = set()
    questions: list[str] = []
    for issue in issues:
        if issue.question not in seen:
            seen.add(issue.question)
            questions.append(issue.question)
    return questions


# --- API ---
class ExtractionRequest(AppBaseModel):
    text: str = Field(..., min_length=1, max_length=10000, description="Free-form description of the document")
    document_type: DocumentType = Field(..., strict=False, description="invoice or quote")


class ClientExtractionRequest(AppBaseModel):
    text: str = Field(..., min_length=1, max_length=10000, description="Free-form client details")


class ClientExtractionResponse(AppBaseModel):
    """Client details extracted from text, with the saved clients they may refer to."""
    client: ExtractedClient
    matches: list[ClientResponse] = Field(default_factory=list)
    confidence: Confidence
    scores: list[float] = Field(default_factory=list)
    needs_clarification: bool = False
    clarification_questions: list[str] = Field(default_factory=list)
    issues: list[NormalizationIssue] = Field(default_factory=list)
    degradations: list[str] = Field(default_factory=list)
