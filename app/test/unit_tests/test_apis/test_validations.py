"""
API tests for validations endpoint following kkb_fastapi pattern.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from app.test.factory.activity import (
    ElectricityActivityFactory,
    FuelActivityFactory,
    ProductionActivityFactory,
)
from app.test.factory.calculation import CalculationFactory
from app.test.factory.reference import CNCodeFactory, ProductFactory


async def seed_complete_quarter(organisation, period):
    ids = {"organisation_id": organisation.id, "reporting_period_id": period.id}
    await CNCodeFactory()
    await ProductFactory(organisation_id=organisation.id)
    for month in (1, 2, 3):
        await ElectricityActivityFactory(**ids, month=month)
    await ProductionActivityFactory(**ids)
    return ids


@pytest.mark.asyncio
async def test_run_validation_passes(test_async_client, organisation, reporting_period):
    """Test a clean period passes and advances its calculation."""
    await seed_complete_quarter(organisation, reporting_period)
    calculation = await CalculationFactory(
        organisation_id=organisation.id, reporting_period_id=reporting_period.id
    )

    response = await test_async_client.post(
        "/api/v1/validations/run",
        json={
            "organisation_id": str(organisation.id),
            "reporting_period_id": str(reporting_period.id),
            "calculation_id": str(calculation.id),
        },
    )
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "passed"
    assert data["error_count"] == 0
    assert data["findings"] == []

    calc = await test_async_client.get(f"/api/v1/calculations/{calculation.id}")
    assert calc.json()["status"] == "validated"


@pytest.mark.asyncio
async def test_run_validation_fails(test_async_client, organisation, reporting_period):
    """Test an ERROR finding fails the run."""
    ids = await seed_complete_quarter(organisation, reporting_period)
    await FuelActivityFactory(**ids, quantity=Decimal("-10"))

    response = await test_async_client.post(
        "/api/v1/validations/run",
        json={
            "organisation_id": str(organisation.id),
            "reporting_period_id": str(reporting_period.id),
        },
    )

    data = response.json()
    assert data["status"] == "failed"
    assert data["error_count"] == 1
    error = next(f for f in data["findings"] if f["severity"] == "error")
    assert error["category"] == "numeric_format"
    assert error["message"] == "Fuel quantity cannot be negative for Natural Gas"


@pytest.mark.asyncio
async def test_get_validation(test_async_client, organisation, reporting_period):
    """Test fetching a stored validation result."""
    created = (
        await test_async_client.post(
            "/api/v1/validations/run",
            json={
                "organisation_id": str(organisation.id),
                "reporting_period_id": str(reporting_period.id),
            },
        )
    ).json()

    response = await test_async_client.get(f"/api/v1/validations/{created['id']}")

    assert response.status_code == 200
    assert response.json()["status"] == "failed"
    assert response.json()["findings"] == created["findings"]


@pytest.mark.asyncio
async def test_get_validation_not_found(test_async_client):
    """Test 404 for an unknown validation result."""
    response = await test_async_client.get(f"/api/v1/validations/{uuid4()}")
    assert response.status_code == 404
