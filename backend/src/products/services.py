import logging
from typing import Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from src.common.services import AppService
from src.products.models import Product
from src.products.schemas import ProductCreate, ProductUpdate, ProductMatchRequest
from src.matching.schemas import EntityKind, MatchResult
from src.matching.service import match_entities

logger = logging.getLogger(__name__)


class ProductService(AppService[Product, ProductCreate, ProductUpdate]):
    def __init__(self, session: AsyncSession):
        super().__init__(model=Product, session=session)

    async def list_active_for_user(self, user_id: str) -> Sequence[Product]:
        """Active products only; inactive ones are never offered as matches."""
        stmt = (
            select(Product)
            .where(Product.user_id == user_id, Product.is_active.is_(True))
            .order_by(Product.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def match(self, partial: ProductMatchRequest, user_id: str) -> MatchResult:
        candidates = await self.list_active_for_user(user_id)
        result = match_entities(partial, candidates, EntityKind.PRODUCT)
        logger.info(f"Product match for user {user_id}: {len(result.matches)} matches, confidence {result.confidence.value}")
        return result
