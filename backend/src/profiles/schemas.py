from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator
from src.common.schemas import AppBaseModel
from src.documents.calculations import MAX_AMOUNT, parse_decimal


class ProfileValidationMixin:

    @field_validator('business_email', check_fields=False)
    @classmethod
    def validate_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("Email address must contain '@'")
        return v.lower()

    @field_validator('default_tax_rate', check_fields=False)
    @classmethod
    def validate_tax_rate(cls, v: str) -> str:
        parsed = parse_decimal(v)
        if parsed.is_degraded:
            raise ValueError(f"Tax rate must be a decimal number up to {MAX_AMOUNT} ({parsed.reason})")
        if parsed.value < 0:
            raise ValueError("Tax rate cannot be negative")
        return v

    @field_validator('business_phone', 'business_address', 'vat_number', 'payment_instructions', 'terms_and_conditions', check_fields=False)
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

# --- INPUT ---
class ProfileUpdate(AppBaseModel, ProfileValidationMixin):
    """Full replacement of the profile; PUT creates it on first use."""

    business_name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Business name (required)"
    )

    business_email: str = Field(
        ...,
        min_length=3,
        max_length=255,
        description="Business contact email (required)"
    )

    business_phone: Optional[str] = Field(None, max_length=50)
    business_address: Optional[str] = None
    vat_number: Optional[str] = Field(None, max_length=50)

    default_tax_rate: str = Field(
        "0",
        max_length=32,
        description="Tax rate in percent assumed when a line item names none"
    )

    payment_instructions: Optional[str] = None
    terms_and_conditions: Optional[str] = None

# --- RESPONSES ---
class ProfileResponse(ProfileUpdate):
    user_id: str
    created_at: datetime
    updated_at: datetime
