"""
Integration tests for the business profile endpoints.
"""
import pytest
from httpx import AsyncClient

STUDIO = {
    "business_name": "Nowak Design Studio",
    "business_email": "Hello@NowakDesign.pl",
    "vat_number": "PL5250001009",
    "default_tax_rate": "23",
}


@pytest.mark.integration
async def test_profile_is_missing_until_saved(client: AsyncClient, auth_headers):
    response = await client.get("/api/profile", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.integration
async def test_save_and_replace_profile(client: AsyncClient, auth_headers):
    created = await client.put("/api/profile", json=STUDIO, headers=auth_headers)
    assert created.status_code == 200
    body = created.json()
    assert body["user_id"] == "user_1"
    assert body["business_email"] == "hello@nowakdesign.pl"
    assert body["default_tax_rate"] == "23"

    replaced = await client.put(
        "/api/profile",
        json={"business_name": "Nowak Studio", "business_email": "hello@nowakdesign.pl", "business_phone": ""},
        headers=auth_headers,
    )
    assert replaced.status_code == 200
    assert replaced.json()["business_name"] == "Nowak Studio"
    assert replaced.json()["vat_number"] is None
    assert replaced.json()["business_phone"] is None
    assert replaced.json()["default_tax_rate"] == "0"

    fetched = await client.get("/api/profile", headers=auth_headers)
    assert fetched.json()["business_name"] == "Nowak Studio"


@pytest.mark.integration
async def test_profiles_are_per_user(client: AsyncClient, auth_headers, other_auth_headers):
    await client.put("/api/profile", json=STUDIO, headers=auth_headers)
    response = await client.get("/api/profile", headers=other_auth_headers)
    assert response.status_code == 404


@pytest.mark.integration
@pytest.mark.parametrize(
    "fields",
    [
        {"business_email": "nope"},
        {"default_tax_rate": "-5"},
        {"default_tax_rate": "1e30"},
        {"business_name": ""},
    ],
)
async def test_invalid_profile_is_rejected(client: AsyncClient, auth_headers, fields):
    response = await client.put("/api/profile", json={**STUDIO, **fields}, headers=auth_headers)
    assert response.status_code == 422


@pytest.mark.integration
async def test_profile_requires_authentication(client: AsyncClient):
    response = await client.get("/api/profile")
    assert response.status_code == 401
