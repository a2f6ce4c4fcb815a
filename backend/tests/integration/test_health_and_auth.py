"""
Integration tests for health checks and bearer token verification.
"""
import pytest
from httpx import AsyncClient
from jose import jwt

from src.config import settings


@pytest.mark.integration
async def test_health_check(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "invoicing-api"}


@pytest.mark.integration
async def test_health_check_db(client: AsyncClient):
    response = await client.get("/health/db")
    assert response.status_code == 200
    assert response.json()["database"] == "connected"


@pytest.mark.integration
async def test_missing_token_is_rejected(client: AsyncClient):
    response = await client.get("/api/clients/")
    assert response.status_code == 401


@pytest.mark.integration
async def test_token_with_wrong_signature_is_rejected(client: AsyncClient):
    token = jwt.encode({"sub": "user_1"}, "another-secret", algorithm=settings.JWT_ALGORITHM)
    response = await client.get("/api/clients/", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token is invalid."


@pytest.mark.integration
async def test_token_without_subject_is_rejected(client: AsyncClient):
    token = jwt.encode({"role": "authenticated"}, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    response = await client.get("/api/clients/", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
