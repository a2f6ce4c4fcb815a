from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.db.main import Base


class Profile(Base):
    """
    Business profile of a user, one row per user.

    Attributes:
        user_id: Primary key (subject of the identity provider token)
        business_name: Name printed on documents and given to the extractor
        business_email: Contact email of the business
        business_phone: Contact phone (nullable)
        business_address: Postal address (nullable)
        vat_number: Tax / VAT identifier of the business (nullable)
        default_tax_rate: Percent assumed when a line item names no rate
        payment_instructions: Bank details etc. (nullable)
        terms_and_conditions: Default terms for new documents (nullable)
        created_at: Timestamp of creation (server default now())
        updated_at: Timestamp of last update (server default now(), onupdate=now())
    """
    __tablename__ = 'profiles'

    __table_args__ = (
        {'comment': 'Business details of a user, used in documents and extraction prompts'},
    )

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    business_email: Mapped[str] = mapped_column(String(255), nullable=False)
    business_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    business_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    vat_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    default_tax_rate: Mapped[str] = mapped_column(String(32), nullable=False, server_default="0")
    payment_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    terms_and_conditions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
