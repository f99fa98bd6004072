"""
Electricity emissions calculator (Scope 2).

Each monthly record yields up to three detail rows: grid, captive/DG and
renewable. Renewable rows carry zero emissions and are kept so the report
shows the consumption.

Formula:
    emissions (tCO2e) = kWh / 1000 * factor (tCO2e/MWh)
"""

import logging
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Tuple
from uuid import UUID

from app.pydantic_models.activity import ElectricityActivity
from app.pydantic_models.calculation import ResolvedFactor, ScopeDetail
from app.services.calculators.factor_resolver import EmissionFactorResolver
from app.services.calculators.unit_converter import UnitConverter

logger = logging.getLogger(__name__)

ELECTRICITY_UNIT = "kWh"
ELECTRICITY_FACTOR_UNIT = "tCO2e/MWh"


class ElectricityCalculator:
    """
    Service for calculating emissions from electricity consumption.

    Grid factors are looked up by the country of the record's facility,
    falling back to the organisation country.
    """

    def __init__(
        self,
        resolver: EmissionFactorResolver,
        facility_countries: Optional[Mapping[UUID, str]] = None,
        default_country: Optional[str] = None,
    ):
        self.resolver = resolver
        self.facility_countries = dict(facility_countries or {})
        self.default_country = default_country

    def _country_for(self, record: ElectricityActivity) -> Optional[str]:
        if record.facility_id is not None:
            return self.facility_countries.get(record.facility_id, self.default_country)
        return self.default_country

    @staticmethod
    def _detail(
        source: str, record: ElectricityActivity, kwh: Decimal, factor: ResolvedFactor
    ) -> ScopeDetail:
        return ScopeDetail(
            source=source,
            source_id=record.id,
            quantity=kwh,
            unit=ELECTRICITY_UNIT,
            emission_factor=factor.direct,
            emission_factor_unit=ELECTRICITY_FACTOR_UNIT,
            emissions=UnitConverter.kwh_to_mwh(kwh) * factor.direct,
            provenance=factor.provenance,
        )

    def calculate_record(self, record: ElectricityActivity) -> Tuple[ScopeDetail, ...]:
        """
        Calculate detail rows for one electricity record.

        Rows are emitted only for positive consumption.
        """
        grid = UnitConverter.normalize_number(record.grid_electricity)
        captive = UnitConverter.normalize_number(record.captive_electricity)
        renewable = UnitConverter.normalize_number(record.renewable_electricity)

        details = []
        if grid > 0:
            details.append(
                self._detail(
                    "Grid Electricity",
                    record,
                    grid,
                    self.resolver.resolve_grid(record, self._country_for(record)),
                )
            )
        if captive > 0:
            details.append(
                self._detail(
                    "Captive/DG Power", record, captive, self.resolver.resolve_captive(record)
                )
            )
        if renewable > 0:
            details.append(
                self._detail(
                    "Renewable Electricity",
                    record,
                    renewable,
                    self.resolver.resolve_renewable(),
                )
            )
        return tuple(details)

    def calculate(
        self, records: Iterable[ElectricityActivity]
    ) -> Tuple[Decimal, Tuple[ScopeDetail, ...]]:
        """
        Calculate Scope 2 emissions for all electricity records.

        Returns:
            Tuple of (total tCO2e, detail rows in input order)
        """
        details = tuple(
            detail for record in records for detail in self.calculate_record(record)
        )
        total = sum((d.emissions for d in details), Decimal("0"))
        logger.info(f"Scope 2: {total} tCO2e from {len(details)} electricity rows")
        return total, details
