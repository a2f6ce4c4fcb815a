import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from src.common.exceptions import ResourceNotFoundError
from src.profiles.models import Profile
from src.profiles.schemas import ProfileUpdate

logger = logging.getLogger(__name__)


class ProfileService:
    """Business profile of the current user, keyed by ``user_id``."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, user_id: str) -> Optional[Profile]:
        stmt = select(Profile).where(Profile.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, user_id: str) -> Profile:
        """
        Raises:
            ResourceNotFoundError: If the user has not set up a profile yet
        """
        profile = await self.find(user_id)
        if not profile:
            raise ResourceNotFoundError("Profile", user_id)
        return profile

    async def save(self, data: ProfileUpdate, user_id: str) -> Profile:
        """Create the profile or replace all of its fields."""
        profile = await self.find(user_id)
        if profile is None:
            profile = Profile(user_id=user_id, **data.model_dump())
            logger.info(f"Creating profile for user {user_id}")
        else:
            for field, value in data.model_dump().items():
                setattr(profile, field, value)

        self.session.add(profile)
        try:
            await self.session.commit()
            await self.session.refresh(profile)
        except IntegrityError as e:
            await self.session.rollback()
            raise e

        return profile
