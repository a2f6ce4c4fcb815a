from typing import Annotated

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from src.db.main import get_session
from src.deps import CurrentUserId
from src.products.schemas import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    ProductMatchRequest,
    ProductMatchResponse,
)
from src.products.services import ProductService

router = APIRouter()

async def get_product_service(session: Annotated[AsyncSession, Depends(get_session)]) -> ProductService:
    return ProductService(session)

ServiceDependency = Annotated[ProductService, Depends(get_product_service)]

@router.get("/", response_model=ProductListResponse, status_code=status.HTTP_200_OK, summary="List products")
async def get_products(user_id: CurrentUserId, service: ServiceDependency, skip: int = Query(0, ge=0, description="Number of items to skip"), limit: int = Query(100, ge=1, le=100, description="Max number of items to return")):
    """
    List the current user's products.
    Requires authentication.
    """
    return await service.get_all(user_id, skip=skip, limit=limit)

@router.post("/match", response_model=ProductMatchResponse, status_code=status.HTTP_200_OK, summary="Find saved products matching a name or description")
async def match_products(data: ProductMatchRequest, user_id: CurrentUserId, service: ServiceDependency):
    """
    Rank active saved products against a name or description (up to three matches).
    Requires authentication.
    """
    result = await service.match(data, user_id)
    return ProductMatchResponse(
        matches=[ProductResponse.model_validate(product) for product in result.matches],
        confidence=result.confidence,
        scores=result.scores,
    )

@router.get("/{product_id}", response_model=ProductResponse, status_code=status.HTTP_200_OK, summary="Get product by ID")
async def get_product(product_id: int, user_id: CurrentUserId, service: ServiceDependency):
    """
    Get product by ID.
    Requires authentication and ownership.
    """
    return await service.get_by_id(product_id, user_id)

@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED, summary="Create a new product")
async def create_product(data: ProductCreate, user_id: CurrentUserId, service: ServiceDependency):
    """
    Create a new product.
    Requires authentication.
    """
    return await service.create(data, user_id)

@router.patch("/{product_id}", response_model=ProductResponse, status_code=status.HTTP_200_OK, summary="Update a product")
async def update_product(product_id: int, data: ProductUpdate, user_id: CurrentUserId, service: ServiceDependency):
    """
    Update a product.
    Requires authentication and ownership.
    """
    return await service.update(product_id, data, user_id)

@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a product")
async def delete_product(product_id: int, user_id: CurrentUserId, service: ServiceDependency):
    """
    Delete a product. Line items referring to it keep their data and lose the link.
    Requires authentication and ownership.
    """
    await service.delete(product_id, user_id)
    return None
