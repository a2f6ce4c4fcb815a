from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.db.main import get_session
from src.deps import CurrentUserId
from src.profiles.schemas import ProfileResponse, ProfileUpdate
from src.profiles.services import ProfileService

router = APIRouter()

async def get_profile_service(session: Annotated[AsyncSession, Depends(get_session)]) -> ProfileService:
    return ProfileService(session)

ServiceDependency = Annotated[ProfileService, Depends(get_profile_service)]

@router.get("", response_model=ProfileResponse, status_code=status.HTTP_200_OK, summary="Get the business profile")
async def get_profile(user_id: CurrentUserId, service: ServiceDependency):
    """
    Get the current user's business profile.
    Requires authentication.
    """
    return await service.get(user_id)

@router.put("", response_model=ProfileResponse, status_code=status.HTTP_200_OK, summary="Create or replace the business profile")
async def save_profile(data: ProfileUpdate, user_id: CurrentUserId, service: ServiceDependency):
    """
    Create or replace the current user's business profile.
    Its business name and default tax rate are used by the extraction endpoints.
    Requires authentication.
    """
    return await service.save(data, user_id)
