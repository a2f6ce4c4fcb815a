from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator
from src.common.schemas import AppBaseModel, PaginatedResponse
from src.matching.schemas import Confidence


class ClientValidationMixin:

    @field_validator('email', check_fields=False)
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v:
            if "@" not in v:
                raise ValueError("Email address must contain '@'")
            return v.lower()
        return None

    @field_validator('phone', 'address', 'tax_number', 'notes', check_fields=False)
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

# --- BASE MODEL ---
class ClientBase(AppBaseModel, ClientValidationMixin):

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Client or company name (required, 1-255 characters)"
    )

    email: Optional[str] = Field(
        None,
        max_length=255,
        description="Contact email (optional)"
    )

    phone: Optional[str] = Field(
        None,
        max_length=50,
        description="Contact phone (optional)"
    )

    address: Optional[str] = Field(
        None,
        description="Postal address (optional)"
    )

    tax_number: Optional[str] = Field(
        None,
        max_length=50,
        description="Tax / VAT number (optional)"
    )

    notes: Optional[str] = Field(
        None,
        description="Free-form notes (optional)"
    )

class ClientCreate(ClientBase):
    pass

class ClientUpdate(AppBaseModel, ClientValidationMixin):

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    tax_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None

# --- RESPONSES ---
class ClientResponse(ClientBase):
    id: int = Field(..., gt=0)
    created_at: datetime
    updated_at: datetime

class ClientListResponse(PaginatedResponse[ClientResponse]):
    pass

# --- MATCHING ---
class ClientMatchRequest(AppBaseModel):
    """Partially known client, e.g. extracted from free text."""
    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    tax_number: Optional[str] = Field(None, max_length=50)

class ClientMatchResponse(AppBaseModel):
    matches: list[ClientResponse]
    confidence: Confidence
    scores: list[float]
