from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Integer, String, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func, expression

from src.db.main import Base


class Product(Base):
    """
    Product or service a user sells.

    Prices and tax rates are kept as decimal strings, the same representation
    line items use, so they can be copied onto documents without conversion.
    """
    __tablename__ = 'products'

    __table_args__ = (
        Index('idx_products_user_id', 'user_id'),
        {'comment': 'Products and services owned by a user'}
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit_price: Mapped[str] = mapped_column(String(32), nullable=False)
    tax_rate: Mapped[str] = mapped_column(String(32), nullable=False, server_default="0")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=expression.true())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
