"""
Fuel combustion calculator (Scope 1).

Formula:
    emissions (tCO2e) = quantity in factor basis * factor

Quantities in kg are converted to tonnes and litres to tonnes via an
assumed density before the factor is applied. Any other unit is assumed
to be the factor's own basis (m3, tonnes, MWh).
"""

import logging
from decimal import Decimal
from typing import Iterable, Tuple

from app.pydantic_models.activity import FuelActivity
from app.pydantic_models.calculation import ScopeDetail
from app.services.calculators.factor_resolver import EmissionFactorResolver
from app.services.calculators.unit_converter import UnitConverter

logger = logging.getLogger(__name__)


class FuelCalculator:
    """Calculates Scope 1 emissions from fuel records."""

    def __init__(self, resolver: EmissionFactorResolver):
        self.resolver = resolver

    def calculate_record(self, record: FuelActivity) -> ScopeDetail:
        factor = self.resolver.resolve_fuel(record)
        quantity = UnitConverter.normalize_number(record.quantity)
        emissions = (
            UnitConverter.fuel_quantity_to_factor_basis(quantity, record.unit)
            * factor.direct
        )

        logger.debug(
            f"Fuel '{record.fuel_name}': {quantity} {record.unit} x {factor.direct} "
            f"({factor.provenance.value}) = {emissions} tCO2e"
        )
        return ScopeDetail(
            source=record.fuel_name,
            source_id=record.id,
            quantity=quantity,
            unit=record.unit,
            emission_factor=factor.direct,
            emission_factor_unit=UnitConverter.factor_unit_for(record.unit),
            emissions=emissions,
            provenance=factor.provenance,
        )

    def calculate(
        self, records: Iterable[FuelActivity]
    ) -> Tuple[Decimal, Tuple[ScopeDetail, ...]]:
        """
        Calculate Scope 1 emissions for all fuel records.

        Returns:
            Tuple of (total tCO2e, detail rows in input order)
        """
        details = tuple(self.calculate_record(record) for record in records)
        return sum((d.emissions for d in details), Decimal("0")), details
