"""
Service tests for scope calculators following kkb_fastapi pattern.
"""

import uuid
from decimal import Decimal

import pytest

from app.database.schemas import FuelActivityDBModel, ProductionActivityDBModel
from app.pydantic_models.activity import (
    ElectricityActivity,
    FuelActivity,
    PrecursorActivity,
    ProductionActivity,
    to_activity_record,
)
from app.pydantic_models.emission_factor import EmissionFactorPydModel
from app.services.calculators.calculation_engine import compute_scope_totals
from app.services.calculators.electricity_calculator import ElectricityCalculator
from app.services.calculators.factor_resolver import EmissionFactorResolver, FactorIndex
from app.services.calculators.fuel_calculator import FuelCalculator
from app.services.calculators.precursor_calculator import PrecursorCalculator
from app.utils.constants import ActivityKind, EmissionFactorType, FactorProvenance

ORG_ID = uuid.uuid4()
PERIOD_ID = uuid.uuid4()
ENVELOPE = {
    "organisation_id": ORG_ID,
    "reporting_period_id": PERIOD_ID,
    "month": 1,
    "year": 2024,
}


@pytest.fixture
def resolver():
    return EmissionFactorResolver(
        FactorIndex(
            [
                EmissionFactorPydModel(
                    id=uuid.uuid4(),
                    type=EmissionFactorType.FUEL,
                    name="Diesel Oil",
                    emission_factor=Decimal("3.169"),
                    unit="tCO2e/t",
                ),
                EmissionFactorPydModel(
                    id=uuid.uuid4(),
                    type=EmissionFactorType.ELECTRICITY,
                    name="Germany Grid Average",
                    emission_factor=Decimal("0.38"),
                    unit="tCO2e/MWh",
                    country_code="DE",
                ),
            ]
        )
    )


class TestFuelCalculator:
    def test_natural_gas_inline_factor(self, resolver):
        """10,000 m3 natural gas at 0.00202 tCO2e/m3 is 20.2 tCO2e."""
        record = FuelActivity(
            id=uuid.uuid4(),
            fuel_name="Natural Gas",
            quantity=Decimal("10000"),
            unit="m3",
            emission_factor=Decimal("0.00202"),
            **ENVELOPE,
        )

        total, details = FuelCalculator(resolver).calculate([record])

        assert total == Decimal("20.2")
        assert len(details) == 1
        assert details[0].source == "Natural Gas"
        assert details[0].source_id == record.id
        assert details[0].emission_factor_unit == "tCO2e/m3"
        assert details[0].provenance == FactorProvenance.INLINE

    def test_kilograms_are_converted_to_tonnes(self, resolver):
        record = FuelActivity(
            fuel_name="Diesel Oil", quantity=Decimal("2000"), unit="kg", **ENVELOPE
        )

        total, details = FuelCalculator(resolver).calculate([record])

        assert total == Decimal("6.338")
        assert details[0].emission_factor_unit == "tCO2e/t"
        assert details[0].provenance == FactorProvenance.REFERENCE

    def test_litres_use_density_constant(self, resolver):
        record = FuelActivity(
            fuel_name="Diesel Oil", quantity=Decimal("1000"), unit="litres", **ENVELOPE
        )

        total, _ = FuelCalculator(resolver).calculate([record])

        assert total == Decimal("0.84") * Decimal("3.169")

    def test_unresolved_fuel_contributes_zero(self, resolver):
        record = FuelActivity(
            fuel_name="Mystery Fuel", quantity=Decimal("50"), unit="tonnes", **ENVELOPE
        )

        total, details = FuelCalculator(resolver).calculate([record])

        assert total == Decimal("0")
        assert details[0].provenance == FactorProvenance.UNRESOLVED


class TestElectricityCalculator:
    def test_grid_electricity_default_factor(self, resolver):
        """100,000 kWh at 0.716 tCO2e/MWh is 71.6 tCO2e."""
        record = ElectricityActivity(grid_electricity=Decimal("100000"), **ENVELOPE)

        total, details = ElectricityCalculator(resolver).calculate([record])

        assert total == Decimal("71.6")
        assert [d.source for d in details] == ["Grid Electricity"]
        assert details[0].unit == "kWh"
        assert details[0].emission_factor_unit == "tCO2e/MWh"

    def test_grid_factor_follows_facility_country(self, resolver):
        facility_id = uuid.uuid4()
        record = ElectricityActivity(
            facility_id=facility_id, grid_electricity=Decimal("100000"), **ENVELOPE
        )

        calculator = ElectricityCalculator(
            resolver, facility_countries={facility_id: "DE"}, default_country="IN"
        )
        total, _ = calculator.calculate([record])

        assert total == Decimal("38")

    def test_captive_power_default_factor(self, resolver):
        record = ElectricityActivity(captive_electricity=Decimal("10000"), **ENVELOPE)

        total, details = ElectricityCalculator(resolver).calculate([record])

        assert total == Decimal("8")
        assert details[0].source == "Captive/DG Power"
        assert details[0].provenance == FactorProvenance.FIXED_DEFAULT

    @pytest.mark.parametrize("kwh", [Decimal("1"), Decimal("250000"), Decimal("1E+12")])
    def test_renewable_electricity_is_zero(self, resolver, kwh):
        record = ElectricityActivity(
            renewable_electricity=kwh, grid_emission_factor=Decimal("0.9"), **ENVELOPE
        )

        total, details = ElectricityCalculator(resolver).calculate([record])

        assert total == Decimal("0")
        assert len(details) == 1
        assert details[0].source == "Renewable Electricity"
        assert details[0].quantity == kwh
        assert details[0].emissions == Decimal("0")
        assert details[0].provenance == FactorProvenance.RENEWABLE

    def test_renewable_does_not_change_grid_total(self, resolver):
        grid_only = ElectricityActivity(grid_electricity=Decimal("100000"), **ENVELOPE)
        with_renewable = ElectricityActivity(
            grid_electricity=Decimal("100000"),
            renewable_electricity=Decimal("500000"),
            **ENVELOPE,
        )

        calculator = ElectricityCalculator(resolver)
        assert calculator.calculate([grid_only])[0] == calculator.calculate([with_renewable])[0]

    def test_zero_consumption_yields_no_rows(self, resolver):
        record = ElectricityActivity(**ENVELOPE)
        total, details = ElectricityCalculator(resolver).calculate([record])
        assert total == Decimal("0")
        assert details == ()


class TestPrecursorCalculator:
    def test_inline_direct_and_indirect(self, resolver):
        """1,000 t at 1.5 direct + 0.3 indirect is 1,800 tCO2e."""
        record = PrecursorActivity(
            supplier_name="Tata Steel",
            material_name="Pig Iron",
            quantity=Decimal("1000"),
            direct_emission_factor=Decimal("1.5"),
            indirect_emission_factor=Decimal("0.3"),
            **ENVELOPE,
        )

        direct, indirect, details = PrecursorCalculator(resolver).calculate([record])

        assert direct == Decimal("1500")
        assert indirect == Decimal("300")
        assert direct + indirect == Decimal("1800")
        assert details[0].source == "Tata Steel - Pig Iron"
        assert details[0].emission_factor == Decimal("1.8")
        assert details[0].emissions == Decimal("1800")

    def test_kilograms_are_converted_to_tonnes(self, resolver):
        record = PrecursorActivity(
            supplier_name="Tata Steel",
            material_name="Pig Iron",
            quantity=Decimal("500"),
            unit="kg",
            direct_emission_factor=Decimal("2"),
            **ENVELOPE,
        )

        direct, indirect, details = PrecursorCalculator(resolver).calculate([record])

        assert direct == Decimal("1")
        assert indirect == Decimal("0")
        assert details[0].quantity == Decimal("0.5")
        assert details[0].unit == "tonnes"


def test_compute_scope_totals(resolver):
    totals = compute_scope_totals(
        resolver,
        fuel=[
            FuelActivity(
                fuel_name="Natural Gas",
                quantity=Decimal("10000"),
                unit="m3",
                emission_factor=Decimal("0.00202"),
                **ENVELOPE,
            )
        ],
        electricity=[ElectricityActivity(grid_electricity=Decimal("100000"), **ENVELOPE)],
        precursors=[
            PrecursorActivity(
                supplier_name="Tata Steel",
                material_name="Pig Iron",
                quantity=Decimal("1000"),
                direct_emission_factor=Decimal("1.5"),
                indirect_emission_factor=Decimal("0.3"),
                **ENVELOPE,
            )
        ],
        default_country="IN",
    )

    assert totals.scope1 == Decimal("20.2")
    assert totals.scope2 == Decimal("71.6")
    assert totals.scope3 == Decimal("1800")
    assert totals.total == Decimal("1891.8")


def test_stored_rows_become_their_activity_variant():
    fuel = to_activity_record(
        FuelActivityDBModel(**ENVELOPE, fuel_name="Coal", quantity=Decimal("5"), unit="tonnes")
    )
    production = to_activity_record(
        ProductionActivityDBModel(
            **ENVELOPE,
            product_name="Steel Wire Rod",
            quantity_produced=Decimal("500"),
            unit="tonnes",
        )
    )

    assert isinstance(fuel, FuelActivity)
    assert fuel.kind == ActivityKind.FUEL
    assert fuel.quantity == Decimal("5")
    assert isinstance(production, ProductionActivity)
    assert production.quantity_produced == Decimal("500")
