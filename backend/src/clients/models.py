from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.db.main import Base


class Client(Base):
    """
    Client model representing a customer invoices and quotes are issued to.

    Attributes:
        id: Primary key (auto-incremented)
        user_id: Owner (subject of the identity provider token)
        name: Client or company name (not nullable)
        email: Contact email (nullable)
        phone: Contact phone, stored as typed (nullable)
        address: Postal address (nullable)
        tax_number: Tax / VAT identifier (nullable)
        notes: Free-form notes (nullable)
        created_at: Timestamp of creation (server default now())
        updated_at: Timestamp of last update (server default now(), onupdate=now())
    """
    __tablename__ = 'clients'

    __table_args__ = (
        Index('idx_clients_user_id', 'user_id'),
        {'comment': 'Clients owned by a user, used as matching candidates for extracted documents'}
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tax_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
