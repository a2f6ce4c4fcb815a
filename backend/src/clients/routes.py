from typing import Annotated

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from src.db.main import get_session
from src.deps import CurrentUserId
from src.clients.schemas import (
    ClientCreate,
    ClientUpdate,
    ClientResponse,
    ClientListResponse,
    ClientMatchRequest,
    ClientMatchResponse,
)
from src.clients.services import ClientService

router = APIRouter()

async def get_client_service(session: Annotated[AsyncSession, Depends(get_session)]) -> ClientService:
    return ClientService(session)

ServiceDependency = Annotated[ClientService, Depends(get_client_service)]

@router.get("/", response_model=ClientListResponse, status_code=status.HTTP_200_OK, summary="List clients")
async def get_clients(user_id: CurrentUserId, service: ServiceDependency, skip: int = Query(0, ge=0, description="Number of items to skip"), limit: int = Query(100, ge=1, le=100, description="Max number of items to return")):
    """
    List the current user's clients.
    Requires authentication.
    """
    return await service.get_all(user_id, skip=skip, limit=limit)

@router.post("/match", response_model=ClientMatchResponse, status_code=status.HTTP_200_OK, summary="Find saved clients matching partial details")
async def match_clients(data: ClientMatchRequest, user_id: CurrentUserId, service: ServiceDependency):
    """
    Rank saved clients against partially known details (up to three matches).
    Requires authentication.
    """
    result = await service.match(data, user_id)
    return ClientMatchResponse(
        matches=[ClientResponse.model_validate(client) for client in result.matches],
        confidence=result.confidence,
        scores=result.scores,
    )

@router.get("/{client_id}", response_model=ClientResponse, status_code=status.HTTP_200_OK, summary="Get client by ID")
async def get_client(client_id: int, user_id: CurrentUserId, service: ServiceDependency):
    """
    Get client by ID.
    Requires authentication and ownership.
    """
    return await service.get_by_id(client_id, user_id)

@router.post("/", response_model=ClientResponse, status_code=status.HTTP_201_CREATED, summary="Create a new client")
async def create_client(data: ClientCreate, user_id: CurrentUserId, service: ServiceDependency):
    """
    Create a new client.
    Requires authentication.
    """
    return await service.create(data, user_id)

@router.patch("/{client_id}", response_model=ClientResponse, status_code=status.HTTP_200_OK, summary="Update a client")
async def update_client(client_id: int, data: ClientUpdate, user_id: CurrentUserId, service: ServiceDependency):
    """
    Update a client.
    Requires authentication and ownership.
    """
    return await service.update(client_id, data, user_id)

@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a client")
async def delete_client(client_id: int, user_id: CurrentUserId, service: ServiceDependency):
    """
    Delete a client. Documents issued to it keep their data and lose the link.
    Requires authentication and ownership.
    """
    await service.delete(client_id, user_id)
    return None
