from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.clients.services import ClientService
from src.config import settings
from src.db.main import get_session
from src.deps import CurrentUserId
from src.documents.schemas import PreparedDocument
from src.documents.services import InvoiceService, QuoteService
from src.documents.types import DocumentType
from src.extraction.schemas import ClientExtractionRequest, ClientExtractionResponse, ExtractionRequest
from src.extraction.service import ExtractionService, build_default_providers
from src.profiles.services import ProfileService

router = APIRouter()

def get_extraction_service() -> ExtractionService:
    return ExtractionService(
        build_default_providers(),
        business_name=settings.BUSINESS_NAME,
        default_tax_rate=settings.DEFAULT_TAX_RATE,
    )

ExtractionServiceDependency = Annotated[ExtractionService, Depends(get_extraction_service)]
SessionDependency = Annotated[AsyncSession, Depends(get_session)]

@router.post("/parse", response_model=PreparedDocument, status_code=status.HTTP_200_OK, summary="Extract an invoice or quote from text")
async def parse_document(data: ExtractionRequest, user_id: CurrentUserId, session: SessionDependency, service: ExtractionServiceDependency):
    """
    Extract a document from free-form text and price it.
    The business profile, when set, supplies the business name and default tax rate.
    Nothing is saved: review the result, then create it via /api/invoices or /api/quotes.
    Requires authentication.
    """
    if data.document_type is DocumentType.INVOICE:
        document_service = InvoiceService(session)
    else:
        document_service = QuoteService(session)
    return await service.parse_document(
        data.text, data.document_type, user_id, document_service, ProfileService(session)
    )

@router.post("/client", response_model=ClientExtractionResponse, status_code=status.HTTP_200_OK, summary="Extract client details from text")
async def extract_client(data: ClientExtractionRequest, user_id: CurrentUserId, session: SessionDependency, service: ExtractionServiceDependency):
    """
    Extract client details from free-form text and rank saved clients against them.
    Requires authentication.
    """
    return await service.extract_client(data.text, user_id, ClientService(session))
