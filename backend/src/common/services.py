from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase
from src.common.exceptions import ResourceAccessDeniedError, ResourceNotFoundError
from src.common.schemas import AppBaseModel
from typing import Any, TypeVar, Generic, Type, Sequence


ModelType = TypeVar("ModelType", bound=DeclarativeBase)
CreateSchemaType = TypeVar("CreateSchemaType", bound=AppBaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=AppBaseModel)

class AppService(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Base service class for user-owned resources.

    Every record carries a ``user_id`` (the identity provider's subject).
    All reads and writes go through an ownership check, so one user can
    never see or modify another user's clients, products or documents.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get_by_id(self, id: int, user_id: str) -> ModelType:
        """
        Get a record by ID and verify it belongs to ``user_id``.

        Raises:
            ResourceNotFoundError: If the record doesn't exist
            ResourceAccessDeniedError: If the record belongs to another user
        """
        stmt = select(self.model).where(self.model.id == id)
        result = await self.session.execute(stmt)
        obj = result.scalar_one_or_none()

        if not obj:
            raise ResourceNotFoundError(self.model.__name__, id)

        if obj.user_id != user_id:
            raise ResourceAccessDeniedError(self.model.__name__, id)

        return obj

    async def get_all(self, user_id: str, skip: int = 0, limit: int = 100) -> dict[str, Any]:
        count_stmt = select(func.count()).select_from(self.model).where(self.model.user_id == user_id)
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar() or 0
        stmt = (
            select(self.model)
            .where(self.model.user_id == user_id)
            .offset(skip)
            .limit(limit)
            .order_by(self.model.id)
        )
        result = await self.session.execute(stmt)
        return {"items": result.scalars().all(), "total": total, "skip": skip, "limit": limit}

    async def list_for_user(self, user_id: str) -> Sequence[ModelType]:
        """All records of a user, in creation order (used as matching candidates)."""
        stmt = select(self.model).where(self.model.user_id == user_id).order_by(self.model.id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def create(self, data: CreateSchemaType, user_id: str) -> ModelType:
        obj_in_data = data.model_dump()
        db_obj = self.model(**obj_in_data, user_id=user_id)

        self.session.add(db_obj)
        try:
            await self.session.commit()
            await self.session.refresh(db_obj)
        except IntegrityError as e:
            await self.session.rollback()
            raise e

        return db_obj

    async def update(self, id: int, data: UpdateSchemaType, user_id: str) -> ModelType:
        db_obj = await self.get_by_id(id, user_id)

        update_data = data.model_dump(exclude_unset=True)

        if not update_data:
            return db_obj

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        self.session.add(db_obj)
        try:
            await self.session.commit()
            await self.session.refresh(db_obj)
        except IntegrityError as e:
            await self.session.rollback()
            raise e

        return db_obj

    async def delete(self, id: int, user_id: str) -> None:
        db_obj = await self.get_by_id(id, user_id)

        await self.session.delete(db_obj)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise e
