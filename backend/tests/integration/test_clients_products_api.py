"""
Integration tests for the client and product endpoints.
"""
import pytest
from httpx import AsyncClient

ACME = {"name": "Acme Corp", "email": "Billing@Acme.com", "phone": "+48 600 100 200", "tax_number": "PL123"}


@pytest.mark.integration
async def test_client_crud(client: AsyncClient, auth_headers):
    created = await client.post("/api/clients/", json=ACME, headers=auth_headers)
    assert created.status_code == 201
    body = created.json()
    assert body["email"] == "billing@acme.com"
    client_id = body["id"]

    fetched = await client.get(f"/api/clients/{client_id}", headers=auth_headers)
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Acme Corp"

    updated = await client.patch(f"/api/clients/{client_id}", json={"address": "Market Sq 5"}, headers=auth_headers)
    assert updated.status_code == 200
    assert updated.json()["address"] == "Market Sq 5"
    assert updated.json()["name"] == "Acme Corp"

    listed = await client.get("/api/clients/", headers=auth_headers)
    assert listed.json()["total"] == 1

    deleted = await client.delete(f"/api/clients/{client_id}", headers=auth_headers)
    assert deleted.status_code == 204

    missing = await client.get(f"/api/clients/{client_id}", headers=auth_headers)
    assert missing.status_code == 404


@pytest.mark.integration
async def test_client_invalid_email(client: AsyncClient, auth_headers):
    response = await client.post("/api/clients/", json={"name": "Acme", "email": "nope"}, headers=auth_headers)
    assert response.status_code == 422


@pytest.mark.integration
async def test_clients_are_scoped_to_their_owner(client: AsyncClient, auth_headers, other_auth_headers):
    created = await client.post("/api/clients/", json=ACME, headers=auth_headers)
    client_id = created.json()["id"]

    response = await client.get(f"/api/clients/{client_id}", headers=other_auth_headers)
    assert response.status_code == 403

    listed = await client.get("/api/clients/", headers=other_auth_headers)
    assert listed.json()["total"] == 0


@pytest.mark.integration
async def test_client_match(client: AsyncClient, auth_headers):
    await client.post("/api/clients/", json={"name": "Beta Logistics", "email": "office@beta.com"}, headers=auth_headers)
    await client.post("/api/clients/", json=ACME, headers=auth_headers)

    response = await client.post(
        "/api/clients/match",
        json={"name": "ACME corp", "email": "billing@acme.com", "phone": "+48 (600) 100-200"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["matches"][0]["name"] == "Acme Corp"
    assert body["confidence"] == "high"
    assert len(body["scores"]) == 2


@pytest.mark.integration
async def test_client_match_without_clients(client: AsyncClient, auth_headers):
    response = await client.post("/api/clients/match", json={"name": "Acme"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"matches": [], "confidence": "low", "scores": []}


@pytest.mark.integration
async def test_product_crud_and_match(client: AsyncClient, auth_headers):
    created = await client.post(
        "/api/products/",
        json={"name": "Website design", "description": "Website design", "unit_price": "1000", "tax_rate": "23"},
        headers=auth_headers,
    )
    assert created.status_code == 201
    product_id = created.json()["id"]

    matched = await client.post("/api/products/match", json={"description": "website design"}, headers=auth_headers)
    assert matched.status_code == 200
    assert matched.json()["matches"][0]["id"] == product_id
    assert matched.json()["confidence"] == "high"

    updated = await client.patch(f"/api/products/{product_id}", json={"unit_price": "1200"}, headers=auth_headers)
    assert updated.json()["unit_price"] == "1200"

    deleted = await client.delete(f"/api/products/{product_id}", headers=auth_headers)
    assert deleted.status_code == 204


@pytest.mark.integration
async def test_product_rejects_negative_price(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/products/", json={"name": "Broken", "unit_price": "-5"}, headers=auth_headers
    )
    assert response.status_code == 422
