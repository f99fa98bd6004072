"""
API tests for calculations endpoint following kkb_fastapi pattern.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from app.test.factory.activity import (
    ElectricityActivityFactory,
    FuelActivityFactory,
    PrecursorActivityFactory,
    ProductionActivityFactory,
)


async def seed_period(organisation, period):
    ids = {"organisation_id": organisation.id, "reporting_period_id": period.id}
    await FuelActivityFactory(**ids)
    await ElectricityActivityFactory(**ids)
    await PrecursorActivityFactory(**ids)
    await ProductionActivityFactory(**ids)


def run_payload(organisation, period):
    return {
        "organisation_id": str(organisation.id),
        "reporting_period_id": str(period.id),
    }


@pytest.mark.asyncio
async def test_run_calculation(test_async_client, organisation, reporting_period):
    """Test running a calculation for a reporting period."""
    await seed_period(organisation, reporting_period)

    response = await test_async_client.post(
        "/api/v1/calculations/run", json=run_payload(organisation, reporting_period)
    )
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "calculated"
    assert data["version"] == 1
    assert Decimal(data["total_scope1"]) == Decimal("20.2")
    assert Decimal(data["total_scope2"]) == Decimal("71.6")
    assert Decimal(data["total_scope3"]) == Decimal("1800")
    assert Decimal(data["total_emissions"]) == Decimal("1891.8")
    assert len(data["products"]) == 1
    assert data["products"][0]["product_name"] == "Steel Wire Rod"


@pytest.mark.asyncio
async def test_rerun_increments_version(test_async_client, organisation, reporting_period):
    """Test that running twice replaces the open calculation."""
    await seed_period(organisation, reporting_period)
    payload = run_payload(organisation, reporting_period)

    first = (await test_async_client.post("/api/v1/calculations/run", json=payload)).json()
    second = (await test_async_client.post("/api/v1/calculations/run", json=payload)).json()

    assert second["id"] == first["id"]
    assert second["version"] == 2
    assert second["total_emissions"] == first["total_emissions"]


@pytest.mark.asyncio
async def test_run_without_production(test_async_client, organisation, reporting_period):
    """Test that a period without production data is rejected."""
    response = await test_async_client.post(
        "/api/v1/calculations/run", json=run_payload(organisation, reporting_period)
    )

    assert response.status_code == 400
    assert "No production data" in response.json()["detail"]


@pytest.mark.asyncio
async def test_run_with_invalid_payload(test_async_client):
    """Test request validation of the run payload."""
    response = await test_async_client.post(
        "/api/v1/calculations/run", json={"organisation_id": "not-a-uuid"}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_calculation(test_async_client, organisation, reporting_period):
    """Test fetching a stored calculation by ID."""
    await seed_period(organisation, reporting_period)
    created = (
        await test_async_client.post(
            "/api/v1/calculations/run", json=run_payload(organisation, reporting_period)
        )
    ).json()

    response = await test_async_client.get(f"/api/v1/calculations/{created['id']}")

    assert response.status_code == 200
    assert response.json()["id"] == created["id"]
    assert Decimal(response.json()["products"][0]["see_total"]) == Decimal("3.7836")


@pytest.mark.asyncio
async def test_get_calculation_not_found(test_async_client):
    """Test 404 for an unknown calculation."""
    response = await test_async_client.get(f"/api/v1/calculations/{uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_finalize_calculation(test_async_client, organisation, reporting_period):
    """Test finalizing a calculation and refusing further changes."""
    await seed_period(organisation, reporting_period)
    payload = run_payload(organisation, reporting_period)
    created = (await test_async_client.post("/api/v1/calculations/run", json=payload)).json()

    response = await test_async_client.post(
        f"/api/v1/calculations/{created['id']}/finalize"
    )
    assert response.status_code == 200
    assert response.json()["status"] == "finalized"
    assert response.json()["finalized_at"] is not None

    again = await test_async_client.post(f"/api/v1/calculations/{created['id']}/finalize")
    assert again.status_code == 400

    rerun = await test_async_client.post("/api/v1/calculations/run", json=payload)
    assert rerun.status_code == 400
    assert rerun.json()["detail"] == "A finalized calculation already exists for this period"


@pytest.mark.asyncio
async def test_finalize_not_found(test_async_client):
    """Test 404 when finalizing an unknown calculation."""
    response = await test_async_client.post(f"/api/v1/calculations/{uuid4()}/finalize")
    assert response.status_code == 404
