from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator
from src.common.schemas import AppBaseModel, PaginatedResponse
from src.documents.calculations import MAX_AMOUNT, parse_decimal
from src.matching.schemas import Confidence


class ProductValidationMixin:

    @field_validator('unit_price', 'tax_rate', check_fields=False)
    @classmethod
    def validate_amount(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            parsed = parse_decimal(v)
            if parsed.is_degraded:
                raise ValueError(f"Amount must be a decimal number up to {MAX_AMOUNT} ({parsed.reason})")
            if parsed.value < 0:
                raise ValueError("Amount cannot be negative")
        return v

# --- BASE MODEL ---
class ProductBase(AppBaseModel, ProductValidationMixin):

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Product or service name (required)"
    )

    description: Optional[str] = Field(
        None,
        description="Longer description used on documents and for matching (optional)"
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

    is_active: bool = Field(True, description="Inactive products are kept but not offered")

class ProductCreate(ProductBase):
    pass

class ProductUpdate(AppBaseModel, ProductValidationMixin):

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    unit_price: Optional[str] = Field(None, max_length=32)
    tax_rate: Optional[str] = Field(None, max_length=32)
    is_active: Optional[bool] = None

# --- RESPONSES ---
class ProductResponse(ProductBase):
    id: int = Field(..., gt=0)
    created_at: datetime
    updated_at: datetime

class ProductListResponse(PaginatedResponse[ProductResponse]):
    pass

# --- MATCHING ---
class ProductMatchRequest(AppBaseModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None

class ProductMatchResponse(AppBaseModel):
    matches: list[ProductResponse]
    confidence: Confidence
    scores: list[float]
