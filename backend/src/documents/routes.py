from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from src.db.main import get_session
from src.deps import CurrentUserId
from src.documents.schemas import (
    InvoiceCreate,
    InvoiceListResponse,
    InvoiceResponse,
    PreparedDocument,
    QuoteCreate,
    QuoteListResponse,
    QuoteResponse,
    StatusUpdate,
)
from src.documents.services import InvoiceService, QuoteService

invoices_router = APIRouter()
quotes_router = APIRouter()

async def get_invoice_service(session: Annotated[AsyncSession, Depends(get_session)]) -> InvoiceService:
    return InvoiceService(session)

async def get_quote_service(session: Annotated[AsyncSession, Depends(get_session)]) -> QuoteService:
    return QuoteService(session)

InvoiceServiceDependency = Annotated[InvoiceService, Depends(get_invoice_service)]
QuoteServiceDependency = Annotated[QuoteService, Depends(get_quote_service)]


# --- INVOICES ---
@invoices_router.post("/calculate", response_model=PreparedDocument, status_code=status.HTTP_200_OK, summary="Calculate an invoice without saving it")
async def calculate_invoice(data: InvoiceCreate, user_id: CurrentUserId, service: InvoiceServiceDependency):
    """
    Compute line item and document totals, resolve the client and products,
    and preview the next invoice number. Nothing is saved.
    """
    return await service.prepare(user_id, draft=data, creating=True)

@invoices_router.get("/", response_model=InvoiceListResponse, status_code=status.HTTP_200_OK, summary="List invoices")
async def get_invoices(
    user_id: CurrentUserId,
    service: InvoiceServiceDependency,
    client_id: Optional[int] = Query(None, gt=0, description="Only invoices of this client"),
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(100, ge=1, le=100, description="Max number of items to return"),
):
    """
    List the current user's invoices, newest first.
    Requires authentication.
    """
    return await service.get_all(user_id, skip=skip, limit=limit, client_id=client_id)

@invoices_router.get("/{invoice_id}", response_model=InvoiceResponse, status_code=status.HTTP_200_OK, summary="Get invoice by ID")
async def get_invoice(invoice_id: int, user_id: CurrentUserId, service: InvoiceServiceDependency):
    return await service.get_by_id(invoice_id, user_id)

@invoices_router.post("/", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED, summary="Create an invoice")
async def create_invoice(data: InvoiceCreate, user_id: CurrentUserId, service: InvoiceServiceDependency):
    """
    Create an invoice. Totals are computed from the items and a number is
    assigned when none is given.
    """
    return await service.create(data, user_id)

@invoices_router.put("/{invoice_id}", response_model=InvoiceResponse, status_code=status.HTTP_200_OK, summary="Replace an invoice")
async def update_invoice(invoice_id: int, data: InvoiceCreate, user_id: CurrentUserId, service: InvoiceServiceDependency):
    """
    Replace the invoice's items and details; totals are recomputed.
    """
    return await service.update(invoice_id, data, user_id)

@invoices_router.patch("/{invoice_id}/status", response_model=InvoiceResponse, status_code=status.HTTP_200_OK, summary="Change invoice status")
async def update_invoice_status(invoice_id: int, data: StatusUpdate, user_id: CurrentUserId, service: InvoiceServiceDependency):
    return await service.update_status(invoice_id, data.status, user_id)

@invoices_router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete an invoice")
async def delete_invoice(invoice_id: int, user_id: CurrentUserId, service: InvoiceServiceDependency):
    await service.delete(invoice_id, user_id)
    return None


# --- QUOTES ---
@quotes_router.post("/calculate", response_model=PreparedDocument, status_code=status.HTTP_200_OK, summary="Calculate a quote without saving it")
async def calculate_quote(data: QuoteCreate, user_id: CurrentUserId, service: QuoteServiceDependency):
    """
    Compute line item and document totals, resolve the client and products,
    and preview the next quote number. Nothing is saved.
    """
    return await service.prepare(user_id, draft=data, creating=True)

@quotes_router.get("/", response_model=QuoteListResponse, status_code=status.HTTP_200_OK, summary="List quotes")
async def get_quotes(
    user_id: CurrentUserId,
    service: QuoteServiceDependency,
    client_id: Optional[int] = Query(None, gt=0, description="Only quotes of this client"),
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(100, ge=1, le=100, description="Max number of items to return"),
):
    return await service.get_all(user_id, skip=skip, limit=limit, client_id=client_id)

@quotes_router.get("/{quote_id}", response_model=QuoteResponse, status_code=status.HTTP_200_OK, summary="Get quote by ID")
async def get_quote(quote_id: int, user_id: CurrentUserId, service: QuoteServiceDependency):
    return await service.get_by_id(quote_id, user_id)

@quotes_router.post("/", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED, summary="Create a quote")
async def create_quote(data: QuoteCreate, user_id: CurrentUserId, service: QuoteServiceDependency):
    return await service.create(data, user_id)

@quotes_router.put("/{quote_id}", response_model=QuoteResponse, status_code=status.HTTP_200_OK, summary="Replace a quote")
async def update_quote(quote_id: int, data: QuoteCreate, user_id: CurrentUserId, service: QuoteServiceDependency):
    return await service.update(quote_id, data, user_id)

@quotes_router.patch("/{quote_id}/status", response_model=QuoteResponse, status_code=status.HTTP_200_OK, summary="Change quote status")
async def update_quote_status(quote_id: int, data: StatusUpdate, user_id: CurrentUserId, service: QuoteServiceDependency):
    return await service.update_status(quote_id, data.status, user_id)

@quotes_router.delete("/{quote_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a quote")
async def delete_quote(quote_id: int, user_id: CurrentUserId, service: QuoteServiceDependency):
    await service.delete(quote_id, user_id)
    return None
