"""
Service tests for the calculation engine following kkb_fastapi pattern.
"""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from app.database.schemas import CalculationDBModel
from app.services.calculators.calculation_engine import (
    CalculationEngine,
    FinalizedCalculationError,
    NoProductionDataError,
    get_fuzzy_threshold_from_config,
)
from app.test.factory.activity import (
    ElectricityActivityFactory,
    FuelActivityFactory,
    PrecursorActivityFactory,
    ProductionActivityFactory,
)
from app.test.factory.emission_factor import EmissionFactorFactory
from app.test.factory.reference import FacilityFactory, ProductFactory
from app.test.factory.supplier import SupplierDeclarationFactory
from app.utils.constants import CalculationStatus, FactorProvenance


async def seed_period(organisation, period, **production_kwargs):
    """Fuel, grid electricity, one precursor and 500 t of wire rod."""
    ids = {"organisation_id": organisation.id, "reporting_period_id": period.id}
    await FuelActivityFactory(**ids)
    await ElectricityActivityFactory(**ids)
    await PrecursorActivityFactory(**ids)
    await ProductionActivityFactory(**ids, **production_kwargs)
    return ids


@pytest.mark.asyncio
async def test_run_calculates_scopes(test_db_session, organisation, reporting_period):
    await seed_period(organisation, reporting_period)

    result = await CalculationEngine(test_db_session, fuzzy_threshold=90).run(
        organisation.id, reporting_period.id
    )

    assert result.success is True
    calculation = result.calculation
    assert calculation.total_scope1 == Decimal("20.2")
    assert calculation.total_scope2 == Decimal("71.6")
    assert calculation.total_scope3_direct == Decimal("1500")
    assert calculation.total_scope3_indirect == Decimal("300")
    assert calculation.total_scope3 == Decimal("1800")
    assert calculation.total_emissions == Decimal("1891.8")
    assert calculation.total_production == Decimal("500")
    assert calculation.status == CalculationStatus.CALCULATED
    assert calculation.version == 1

    assert len(calculation.products) == 1
    product = calculation.products[0]
    assert product.share == Decimal("1")
    assert product.total_emissions == Decimal("1891.8")
    assert product.see_total == Decimal("3.7836")
    assert product.scope1_details[0].source == "Natural Gas"
    assert product.scope3_details[0].source == "Tata Steel - Pig Iron"


@pytest.mark.asyncio
async def test_run_without_production_fails(test_db_session, organisation, reporting_period):
    await ElectricityActivityFactory(
        organisation_id=organisation.id, reporting_period_id=reporting_period.id
    )

    result = await CalculationEngine(test_db_session, fuzzy_threshold=90).run(
        organisation.id, reporting_period.id
    )

    assert result.success is False
    assert "No production data" in result.error
    assert result.error_code == NoProductionDataError.code
    assert result.calculation is None


@pytest.mark.asyncio
async def test_recompute_replaces_open_calculation(
    test_db_session, organisation, reporting_period
):
    await seed_period(organisation, reporting_period)
    engine = CalculationEngine(test_db_session, fuzzy_threshold=90)

    first = await engine.run(organisation.id, reporting_period.id)
    second = await engine.run(organisation.id, reporting_period.id)

    assert second.success is True
    assert second.calculation.id == first.calculation.id
    assert second.calculation.version == first.calculation.version + 1
    for field in (
        "total_scope1",
        "total_scope2",
        "total_scope3",
        "total_emissions",
        "total_production",
    ):
        assert getattr(second.calculation, field) == getattr(first.calculation, field)

    count = await test_db_session.scalar(
        select(func.count()).select_from(CalculationDBModel)
    )
    assert count == 1


@pytest.mark.asyncio
async def test_recompute_picks_up_new_activity(
    test_db_session, organisation, reporting_period
):
    ids = await seed_period(organisation, reporting_period)
    engine = CalculationEngine(test_db_session, fuzzy_threshold=90)
    first = await engine.run(organisation.id, reporting_period.id)
    await test_db_session.commit()

    await ElectricityActivityFactory(**ids, month=2)
    second = await engine.run(organisation.id, reporting_period.id)

    assert second.calculation.total_scope2 == first.calculation.total_scope2 * 2
    assert second.calculation.version == 2


@pytest.mark.asyncio
async def test_finalized_period_is_not_recalculated(
    test_db_session, organisation, reporting_period
):
    await seed_period(organisation, reporting_period)
    engine = CalculationEngine(test_db_session, fuzzy_threshold=90)
    calculated = await engine.run(organisation.id, reporting_period.id)

    finalized = await engine.finalize(calculated.calculation.id)
    assert finalized.success is True
    assert finalized.calculation.status == CalculationStatus.FINALIZED
    assert finalized.calculation.finalized_at is not None

    rerun = await engine.run(organisation.id, reporting_period.id)
    assert rerun.success is False
    assert rerun.error_code == FinalizedCalculationError.code


@pytest.mark.asyncio
async def test_finalize_twice_is_refused(test_db_session, organisation, reporting_period):
    await seed_period(organisation, reporting_period)
    engine = CalculationEngine(test_db_session, fuzzy_threshold=90)
    calculated = await engine.run(organisation.id, reporting_period.id)

    await engine.finalize(calculated.calculation.id)
    again = await engine.finalize(calculated.calculation.id)

    assert again.success is False
    assert again.error_code == "INVALID_STATUS"


@pytest.mark.asyncio
async def test_finalize_unknown_calculation(test_db_session):
    result = await CalculationEngine(test_db_session, fuzzy_threshold=90).finalize(
        uuid.uuid4()
    )

    assert result.success is False
    assert result.error_code == "CALCULATION_NOT_FOUND"


@pytest.mark.asyncio
async def test_verified_declaration_overrides_inline_precursor_factor(
    test_db_session, organisation, reporting_period
):
    await seed_period(organisation, reporting_period)
    await SupplierDeclarationFactory(
        organisation_id=organisation.id, reporting_period_id=reporting_period.id
    )

    result = await CalculationEngine(test_db_session, fuzzy_threshold=90).run(
        organisation.id, reporting_period.id
    )

    assert result.calculation.total_scope3_direct == Decimal("1200")
    assert result.calculation.total_scope3_indirect == Decimal("100")
    detail = result.calculation.products[0].scope3_details[0]
    assert detail.provenance == FactorProvenance.SUPPLIER_DECLARATION


@pytest.mark.asyncio
async def test_organisation_factor_preferred_over_global(
    test_db_session, organisation, reporting_period
):
    ids = {"organisation_id": organisation.id, "reporting_period_id": reporting_period.id}
    await EmissionFactorFactory(name="Diesel Oil", emission_factor=Decimal("3.169"))
    await EmissionFactorFactory(
        name="Diesel Oil",
        emission_factor=Decimal("3"),
        organisation_id=organisation.id,
        is_default=False,
    )
    await FuelActivityFactory(
        **ids, fuel_name="Diesel Oil", quantity=Decimal("10"), unit="tonnes",
        emission_factor=None,
    )
    await ProductionActivityFactory(**ids)

    result = await CalculationEngine(test_db_session, fuzzy_threshold=90).run(
        organisation.id, reporting_period.id
    )

    assert result.calculation.total_scope1 == Decimal("30")


@pytest.mark.asyncio
async def test_products_are_allocated_by_share(
    test_db_session, organisation, reporting_period
):
    ids = {"organisation_id": organisation.id, "reporting_period_id": reporting_period.id}
    wire_rod = await ProductFactory(
        organisation_id=organisation.id, name="Steel Wire Rod", cn_code="72139110"
    )
    await ElectricityActivityFactory(**ids)
    await ProductionActivityFactory(
        **ids, product_id=wire_rod.id, product_name="Steel Wire Rod",
        quantity_produced=Decimal("300"), cn_code=None,
    )
    await ProductionActivityFactory(
        **ids, product_name="Bright Bar", cn_code="72155000",
        quantity_produced=Decimal("200"),
    )

    result = await CalculationEngine(test_db_session, fuzzy_threshold=90).run(
        organisation.id, reporting_period.id
    )

    first, second = result.calculation.products
    assert first.cn_code == "72139110"
    assert first.scope2_emissions == Decimal("42.96")
    assert second.scope2_emissions == Decimal("28.64")
    assert first.scope2_emissions + second.scope2_emissions == result.calculation.total_scope2


@pytest.mark.asyncio
async def test_stored_products_add_up_to_stored_totals(
    test_db_session, organisation, reporting_period
):
    """71.6 tCO2e over three equal products cannot be split evenly at 7 places."""
    ids = {"organisation_id": organisation.id, "reporting_period_id": reporting_period.id}
    await ElectricityActivityFactory(**ids)
    for name in ("Wire Rod", "Bright Bar", "Wire Coil"):
        await ProductionActivityFactory(**ids, product_name=name, quantity_produced=Decimal("100"))

    result = await CalculationEngine(test_db_session, fuzzy_threshold=90).run(
        organisation.id, reporting_period.id
    )

    calculation = result.calculation
    assert sorted(p.scope2_emissions for p in calculation.products) == [
        Decimal("23.8666666"),
        Decimal("23.8666667"),
        Decimal("23.8666667"),
    ]
    assert sum(p.scope2_emissions for p in calculation.products) == calculation.total_scope2
    assert sum(p.total_emissions for p in calculation.products) == calculation.total_emissions


@pytest.mark.asyncio
async def test_facility_filter_and_country(test_db_session, organisation, reporting_period):
    german_plant = await FacilityFactory(organisation_id=organisation.id, country_code="DE")
    await EmissionFactorFactory(
        type="electricity",
        name="Germany Grid Average",
        emission_factor=Decimal("0.38"),
        unit="tCO2e/MWh",
        country_code="DE",
    )
    ids = {"organisation_id": organisation.id, "reporting_period_id": reporting_period.id}
    await ElectricityActivityFactory(**ids, facility_id=german_plant.id)
    await ProductionActivityFactory(**ids, facility_id=german_plant.id)
    await ElectricityActivityFactory(**ids)

    result = await CalculationEngine(test_db_session, fuzzy_threshold=90).run(
        organisation.id, reporting_period.id, facility_id=german_plant.id
    )

    assert result.calculation.facility_id == german_plant.id
    assert result.calculation.total_scope2 == Decimal("38")


def test_fuzzy_threshold_from_config(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "test")
    assert get_fuzzy_threshold_from_config() == 90
