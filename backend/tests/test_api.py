"""Tests for API endpoints."""

import uuid

import pytest
from httpx import AsyncClient

from pvz.container import Container
from pvz.models import PickupPoint


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# --- Auth ---

@pytest.mark.asyncio
async def test_dummy_login(client: AsyncClient):
    resp = await client.post("/api/v1/dummyLogin", json={"role": "moderator"})
    assert resp.status_code == 200
    assert isinstance(resp.json(), str)
    assert "auth_token" in resp.cookies


@pytest.mark.asyncio
async def test_dummy_login_invalid_role(client: AsyncClient):
    resp = await client.post("/api/v1/dummyLogin", json={"role": "admin"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "invalid user role"


@pytest.mark.asyncio
async def test_register_and_login(client: AsyncClient):
    resp = await client.post(
        "/api/v1/register",
        json={"email": "user@example.com", "password": "secret123", "role": "employee"},
    )
    assert resp.status_code == 201
    assert resp.json()["email"] == "user@example.com"
    assert resp.json()["role"] == "employee"

    resp = await client.post(
        "/api/v1/register",
        json={"email": "user@example.com", "password": "secret123", "role": "employee"},
    )
    assert resp.status_code == 409

    resp = await client.post("/api/v1/login", json={"email": "user@example.com", "password": "secret123"})
    assert resp.status_code == 200

    resp = await client.post("/api/v1/login", json={"email": "user@example.com", "password": "nope-nope"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_missing_token(client: AsyncClient):
    resp = await client.get("/api/v1/pvz")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_invalid_token(client: AsyncClient):
    resp = await client.get("/api/v1/pvz", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_cookie_auth(client: AsyncClient):
    await client.post("/api/v1/dummyLogin", json={"role": "moderator"})
    resp = await client.post("/api/v1/pvz", json={"city": "Kazan"})
    assert resp.status_code == 201


# --- Permissions ---

@pytest.mark.asyncio
async def test_employee_cannot_create_pvz(client: AsyncClient, employee_headers):
    resp = await client.post("/api/v1/pvz", json={"city": "Moscow"}, headers=employee_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_moderator_cannot_open_reception(
    client: AsyncClient, moderator_headers, sample_pvz: PickupPoint
):
    resp = await client.post(
        "/api/v1/receptions", json={"pvzId": str(sample_pvz.id)}, headers=moderator_headers
    )
    assert resp.status_code == 403


# --- Pickup points ---

@pytest.mark.asyncio
async def test_create_pvz(client: AsyncClient, moderator_headers):
    pvz_id = str(uuid.uuid4())
    resp = await client.post(
        "/api/v1/pvz",
        json={"id": pvz_id, "registrationDate": "2025-04-01T12:00:00Z", "city": "Moscow"},
        headers=moderator_headers,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["id"] == pvz_id
    assert data["city"] == "Moscow"
    assert data["registrationDate"].startswith("2025-04-01T12:00:00")

    resp = await client.post(
        "/api/v1/pvz", json={"id": pvz_id, "city": "Kazan"}, headers=moderator_headers
    )
    assert resp.status_code == 409
    assert resp.json()["message"] == "pickup point already exists"


@pytest.mark.asyncio
async def test_create_pvz_invalid_city(client: AsyncClient, moderator_headers):
    resp = await client.post("/api/v1/pvz", json={"city": "Paris"}, headers=moderator_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "invalid city"


@pytest.mark.asyncio
async def test_create_pvz_offset_date_stored_as_utc(client: AsyncClient, moderator_headers):
    pvz_id = str(uuid.uuid4())
    resp = await client.post(
        "/api/v1/pvz",
        json={"id": pvz_id, "registrationDate": "2025-04-01T15:00:00+03:00", "city": "Moscow"},
        headers=moderator_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["registrationDate"].startswith("2025-04-01T12:00:00")

    resp = await client.get("/api/v1/pvz/all", headers=moderator_headers)
    [point] = resp.json()
    assert point["registrationDate"].startswith("2025-04-01T12:00:00")


@pytest.mark.asyncio
async def test_list_pvz_validation(client: AsyncClient, employee_headers):
    resp = await client.get("/api/v1/pvz", params={"limit": 31}, headers=employee_headers)
    assert resp.status_code == 400
    resp = await client.get("/api/v1/pvz", params={"page": 0}, headers=employee_headers)
    assert resp.status_code == 400
    resp = await client.get(
        "/api/v1/pvz",
        params={"startDate": "2025-04-02T00:00:00Z", "endDate": "2025-04-01T00:00:00Z"},
        headers=employee_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "end date cannot be before start date"


@pytest.mark.asyncio
async def test_list_all_pvz(client: AsyncClient, moderator_headers, sample_pvz: PickupPoint):
    resp = await client.get("/api/v1/pvz/all", headers=moderator_headers)
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [str(sample_pvz.id)]


@pytest.mark.asyncio
async def test_last_reception_status_not_found(
    client: AsyncClient, employee_headers, sample_pvz: PickupPoint
):
    resp = await client.get(
        f"/api/v1/pvz/{sample_pvz.id}/last_reception_status", headers=employee_headers
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "no reception"


@pytest.mark.asyncio
async def test_open_reception_unknown_pvz(client: AsyncClient, employee_headers):
    resp = await client.post(
        "/api/v1/receptions", json={"pvzId": str(uuid.uuid4())}, headers=employee_headers
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_add_product_invalid_type(
    client: AsyncClient, employee_headers, sample_pvz: PickupPoint
):
    resp = await client.post(
        "/api/v1/products",
        json={"type": "furniture", "pvzId": str(sample_pvz.id)},
        headers=employee_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "invalid product type"


# --- Full flow ---

@pytest.mark.asyncio
async def test_reception_flow(client: AsyncClient, moderator_headers, employee_headers):
    resp = await client.post("/api/v1/pvz", json={"city": "Moscow"}, headers=moderator_headers)
    assert resp.status_code == 201
    pvz_id = resp.json()["id"]

    resp = await client.post("/api/v1/receptions", json={"pvzId": pvz_id}, headers=employee_headers)
    assert resp.status_code == 201
    reception = resp.json()
    assert reception["status"] == "in_progress"
    assert reception["pvzId"] == pvz_id

    resp = await client.post("/api/v1/receptions", json={"pvzId": pvz_id}, headers=employee_headers)
    assert resp.status_code == 409

    resp = await client.post(
        "/api/v1/products", json={"type": "electronics", "pvzId": pvz_id}, headers=employee_headers
    )
    assert resp.status_code == 201
    p1 = resp.json()
    assert p1["receptionId"] == reception["id"]
    assert p1["type"] == "electronics"

    resp = await client.post(
        "/api/v1/products", json={"type": "shoes", "pvzId": pvz_id}, headers=employee_headers
    )
    assert resp.status_code == 201

    resp = await client.post(f"/api/v1/pvz/{pvz_id}/delete_last_product", headers=employee_headers)
    assert resp.status_code == 200

    resp = await client.get("/api/v1/pvz", headers=employee_headers)
    assert resp.status_code == 200
    [entry] = resp.json()
    assert entry["pvz"]["id"] == pvz_id
    [reception_entry] = entry["receptions"]
    assert reception_entry["reception"]["id"] == reception["id"]
    assert [p["id"] for p in reception_entry["products"]] == [p1["id"]]

    resp = await client.post(f"/api/v1/pvz/{pvz_id}/close_last_reception", headers=employee_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "closed"
    assert resp.json()["id"] == reception["id"]

    resp = await client.get(f"/api/v1/pvz/{pvz_id}/last_reception_status", headers=employee_headers)
    assert resp.json()["status"] == "closed"

    resp = await client.post(
        "/api/v1/products", json={"type": "electronics", "pvzId": pvz_id}, headers=employee_headers
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "no open reception"

    resp = await client.post(f"/api/v1/pvz/{pvz_id}/delete_last_product", headers=employee_headers)
    assert resp.status_code == 400

    resp = await client.post("/api/v1/receptions", json={"pvzId": pvz_id}, headers=employee_headers)
    assert resp.status_code == 201
    assert resp.json()["id"] != reception["id"]


# --- Metrics ---

@pytest.mark.asyncio
async def test_metrics_endpoint(client: AsyncClient, container: Container, moderator_headers):
    await client.post("/api/v1/pvz", json={"city": "Kazan"}, headers=moderator_headers)
    resp = await client.get("/metrics")
    assert resp.status_code == 200
    assert "pvz_created_total 1.0" in resp.text
    assert "http_requests_total" in resp.text

    registry = container.metrics.registry
    assert registry.get_sample_value(
        "http_requests_total", {"method": "POST", "endpoint": "/api/v1/pvz", "status": "201"}
    ) == 1.0


@pytest.mark.asyncio
async def test_metrics_label_uses_route_template(
    client: AsyncClient, container: Container, employee_headers, sample_pvz: PickupPoint
):
    await client.get(f"/api/v1/pvz/{sample_pvz.id}/last_reception_status", headers=employee_headers)
    await client.get("/health")

    registry = container.metrics.registry
    assert registry.get_sample_value(
        "http_requests_total",
        {"method": "GET", "endpoint": "/api/v1/pvz/{pvz_id}/last_reception_status", "status": "404"},
    ) == 1.0
    assert registry.get_sample_value(
        "http_requests_total", {"method": "GET", "endpoint": "/health", "status": "200"}
    ) == 1.0
