import logging
from typing import Any, Optional, Type

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.clients.services import ClientService
from src.common.services import AppService
from src.config import settings
from src.documents.models import Invoice, InvoiceItem, Quote, QuoteItem
from src.documents.schemas import DocumentDraft, PreparedDocument
from src.documents.exceptions import InvalidStatusError
from src.documents.types import DocumentType, InvoiceStatus, QuoteStatus
from src.documents.workflow import DocumentWorkflow
from src.products.services import ProductService

logger = logging.getLogger(__name__)


class DocumentService(AppService):
    """
    Persistence for one document type (invoices or quotes).

    Creating or updating a document always goes through ``DocumentWorkflow``:
    the stored totals are recomputed from the submitted items, never taken
    from the client.
    """
    document_type: DocumentType
    item_model: Type[Any]
    status_enum: Type[Any]

    def __init__(self, model: Type[Any], session: AsyncSession):
        super().__init__(model=model, session=session)
        self.client_service = ClientService(session)
        self.product_service = ProductService(session)

    async def latest_number(self, user_id: str) -> Optional[str]:
        """Number of the user's most recently created document of this type."""
        stmt = (
            select(self.model.number)
            .where(self.model.user_id == user_id)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def build_workflow(self, user_id: str) -> DocumentWorkflow:
        clients = await self.client_service.list_for_user(user_id)
        products = await self.product_service.list_active_for_user(user_id)
        return DocumentWorkflow(
            document_type=self.document_type,
            clients=clients,
            products=products,
            lookup_latest=lambda: self.latest_number(user_id),
            numbering_timeout=settings.NUMBERING_LOOKUP_TIMEOUT,
        )

    async def prepare(
        self,
        user_id: str,
        draft: Optional[DocumentDraft] = None,
        extraction: Any = None,
        creating: bool = True,
    ) -> PreparedDocument:
        """
        Run the document workflow without persisting anything.

        Raises:
            EmptyDocumentError: If there are no line items
            ResourceNotFoundError: If a referenced client or product doesn't exist
            ResourceAccessDeniedError: If a referenced client or product belongs to another user
        """
        if draft is not None:
            await self._ensure_references(draft, user_id)
        workflow = await self.build_workflow(user_id)
        return await workflow.run(user_id=user_id, draft=draft, extraction=extraction, creating=creating)

    async def _ensure_references(self, draft: DocumentDraft, user_id: str) -> None:
        if draft.client_id is not None:
            await self.client_service.get_by_id(draft.client_id, user_id)
        for product_id in {item.product_id for item in draft.items if item.product_id is not None}:
            await self.product_service.get_by_id(product_id, user_id)

    def _apply(self, document: Any, prepared: PreparedDocument) -> None:
        document.number = prepared.number
        document.client_id = prepared.client_id
        document.issue_date = prepared.issue_date
        setattr(document, self.document_type.deadline_field, getattr(prepared, self.document_type.deadline_field))
        document.discount = prepared.discount
        document.subtotal = prepared.subtotal
        document.tax_amount = prepared.tax_amount
        document.total = prepared.total
        document.notes = prepared.notes
        document.terms_and_conditions = prepared.terms_and_conditions
        document.items = [
            self.item_model(
                position=position,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_rate=item.tax_rate,
                tax_amount=item.tax_amount,
                subtotal=item.subtotal,
                total=item.total,
                product_id=item.product_id,
            )
            for position, item in enumerate(prepared.items)
        ]

    async def _commit(self, document: Any) -> Any:
        try:
            await self.session.commit()
            await self.session.refresh(document)
        except IntegrityError as e:
            await self.session.rollback()
            raise e
        return document

    async def create(self, data: DocumentDraft, user_id: str) -> Any:
        prepared = await self.prepare(user_id, draft=data, creating=True)

        document = self.model(user_id=user_id, status=data.status)
        self._apply(document, prepared)
        self.session.add(document)
        await self._commit(document)

        logger.info(f"Created {self.document_type.value} {document.number} (id {document.id}) for user {user_id}, total {document.total}")
        return document

    async def update(self, id: int, data: DocumentDraft, user_id: str) -> Any:
        """
        Replace the document's items and recompute its totals.

        The number is kept unless a new one is submitted.
        """
        document = await self.get_by_id(id, user_id)

        prepared = await self.prepare(user_id, draft=data, creating=False)
        if not prepared.number:
            prepared = prepared.model_copy(update={"number": document.number})

        self._apply(document, prepared)
        document.status = data.status
        await self._commit(document)

        logger.info(f"Updated {self.document_type.value} {document.number} (id {document.id}) for user {user_id}")
        return document

    async def update_status(self, id: int, status: str, user_id: str) -> Any:
        """
        Set the document status.

        Raises:
            InvalidStatusError: If the status does not exist for this document type
        """
        try:
            new_status = self.status_enum(status.lower())
        except ValueError as e:
            raise InvalidStatusError(self.document_type.value, status) from e

        document = await self.get_by_id(id, user_id)
        document.status = new_status
        await self._commit(document)
        logger.info(f"{self.document_type.value} {document.id} status changed to {new_status.value}")
        return document

    async def get_all(self, user_id: str, skip: int = 0, limit: int = 100, client_id: Optional[int] = None) -> dict[str, Any]:
        filters = [self.model.user_id == user_id]
        if client_id is not None:
            filters.append(self.model.client_id == client_id)

        count_stmt = select(func.count()).select_from(self.model).where(*filters)
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar() or 0

        stmt = (
            select(self.model)
            .where(*filters)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return {"items": result.scalars().all(), "total": total, "skip": skip, "limit": limit}


class InvoiceService(DocumentService):
    document_type = DocumentType.INVOICE
    item_model = InvoiceItem
    status_enum = InvoiceStatus

    def __init__(self, session: AsyncSession):
        super().__init__(model=Invoice, session=session)


class QuoteService(DocumentService):
    document_type = DocumentType.QUOTE
    item_model = QuoteItem
    status_enum = QuoteStatus

    def __init__(self, session: AsyncSession):
        super().__init__(model=Quote, session=session)
