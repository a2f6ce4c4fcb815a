from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import (
    Integer, String, Date, DateTime, Text,
    ForeignKey, Index, Enum as SAEnum
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.db.main import Base
from src.documents.types import InvoiceStatus, QuoteStatus


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class DocumentColumnsMixin:
    """
    Columns shared by invoices and quotes.

    All monetary values are decimal strings with two places. ``number`` is not
    unique: two concurrent creations may get the same one.
    """
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    number: Mapped[str] = mapped_column(String(50), nullable=False)
    client_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey('clients.id', ondelete='SET NULL'), nullable=True)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    discount: Mapped[str] = mapped_column(String(32), nullable=False, default="0")
    subtotal: Mapped[str] = mapped_column(String(32), nullable=False)
    tax_amount: Mapped[str] = mapped_column(String(32), nullable=False)
    total: Mapped[str] = mapped_column(String(32), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    terms_and_conditions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class LineItemColumnsMixin:
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[str] = mapped_column(String(32), nullable=False)
    unit_price: Mapped[str] = mapped_column(String(32), nullable=False)
    tax_rate: Mapped[str] = mapped_column(String(32), nullable=False, default="0")
    tax_amount: Mapped[str] = mapped_column(String(32), nullable=False)
    subtotal: Mapped[str] = mapped_column(String(32), nullable=False)
    total: Mapped[str] = mapped_column(String(32), nullable=False)
    product_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey('products.id', ondelete='SET NULL'), nullable=True)


class Invoice(DocumentColumnsMixin, Base):
    __tablename__ = 'invoices'

    __table_args__ = (
        Index('idx_invoices_user_id_created_at', 'user_id', 'created_at'),
        Index('idx_invoices_client_id', 'client_id'),
        {'comment': 'Invoices with totals derived from their line items'}
    )

    status: Mapped[InvoiceStatus] = mapped_column(
        SAEnum(InvoiceStatus, name='invoice_status', values_callable=_enum_values),
        nullable=False,
        default=InvoiceStatus.DRAFT,
        server_default=InvoiceStatus.DRAFT.value,
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    items: Mapped[List['InvoiceItem']] = relationship(
        'InvoiceItem',
        back_populates='invoice',
        cascade='all, delete-orphan',
        order_by='InvoiceItem.position',
        lazy='selectin',
    )


class InvoiceItem(LineItemColumnsMixin, Base):
    __tablename__ = 'invoice_items'

    __table_args__ = (
        Index('idx_invoice_items_invoice_id', 'invoice_id'),
    )

    invoice_id: Mapped[int] = mapped_column(Integer, ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False)
    invoice: Mapped['Invoice'] = relationship('Invoice', back_populates='items')


class Quote(DocumentColumnsMixin, Base):
    __tablename__ = 'quotes'

    __table_args__ = (
        Index('idx_quotes_user_id_created_at', 'user_id', 'created_at'),
        Index('idx_quotes_client_id', 'client_id'),
        {'comment': 'Quotes with totals derived from their line items'}
    )

    status: Mapped[QuoteStatus] = mapped_column(
        SAEnum(QuoteStatus, name='quote_status', values_callable=_enum_values),
        nullable=False,
        default=QuoteStatus.DRAFT,
        server_default=QuoteStatus.DRAFT.value,
    )
    valid_until: Mapped[date] = mapped_column(Date, nullable=False)
    items: Mapped[List['QuoteItem']] = relationship(
        'QuoteItem',
        back_populates='quote',
        cascade='all, delete-orphan',
        order_by='QuoteItem.position',
        lazy='selectin',
    )


class QuoteItem(LineItemColumnsMixin, Base):
    __tablename__ = 'quote_items'

    __table_args__ = (
        Index('idx_quote_items_quote_id', 'quote_id'),
    )

    quote_id: Mapped[int] = mapped_column(Integer, ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False)
    quote: Mapped['Quote'] = relationship('Quote', back_populates='items')
