"""
Service tests for unit conversion following kkb_fastapi pattern.
"""

from decimal import Decimal

import pytest

from app.services.calculators.unit_converter import UnitConverter


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1,234.56", Decimal("1234.56")),
        (" 42 ", Decimal("42")),
        (0.1, Decimal("0.1")),
        (7, Decimal("7")),
        (None, Decimal("0")),
        (Decimal("3.5"), Decimal("3.5")),
    ],
)
def test_normalize_number(value, expected):
    assert UnitConverter.normalize_number(value) == expected


def test_energy_and_mass_conversions():
    assert UnitConverter.kwh_to_mwh(Decimal("100000")) == Decimal("100")
    assert UnitConverter.kg_to_tonnes(Decimal("2500")) == Decimal("2.5")
    assert UnitConverter.litres_to_tonnes(Decimal("1000")) == Decimal("0.84")


@pytest.mark.parametrize(
    "quantity, unit, expected",
    [
        (Decimal("10000"), "m3", Decimal("10000")),
        (Decimal("2000"), "kg", Decimal("2")),
        (Decimal("2000"), "KG", Decimal("2")),
        (Decimal("1000"), "litres", Decimal("0.84")),
        (Decimal("5"), "tonnes", Decimal("5")),
    ],
)
def test_fuel_quantity_to_factor_basis(quantity, unit, expected):
    assert UnitConverter.fuel_quantity_to_factor_basis(quantity, unit) == expected


def test_mass_to_tonnes_passes_tonnes_through():
    assert UnitConverter.mass_to_tonnes(Decimal("1000"), "tonnes") == Decimal("1000")
    assert UnitConverter.mass_to_tonnes(Decimal("1500"), "kg") == Decimal("1.5")
