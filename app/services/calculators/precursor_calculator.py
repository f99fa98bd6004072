"""
Precursor calculator (embedded emissions of purchased materials).

Formula:
    direct (tCO2e)   = tonnes * direct factor
    indirect (tCO2e) = tonnes * indirect factor
"""

import logging
from decimal import Decimal
from typing import Iterable, Tuple

from app.pydantic_models.activity import PrecursorActivity
from app.pydantic_models.calculation import ScopeDetail
from app.services.calculators.factor_resolver import EmissionFactorResolver
from app.services.calculators.unit_converter import UnitConverter

logger = logging.getLogger(__name__)

PRECURSOR_FACTOR_UNIT = "tCO2e/t"


class PrecursorCalculator:
    """Calculates direct and indirect embedded emissions of precursors."""

    def __init__(self, resolver: EmissionFactorResolver):
        self.resolver = resolver

    def calculate_record(self, record: PrecursorActivity) -> ScopeDetail:
        factor = self.resolver.resolve_precursor(record)
        tonnes = UnitConverter.mass_to_tonnes(
            UnitConverter.normalize_number(record.quantity), record.unit
        )
        direct = tonnes * factor.direct
        indirect = tonnes * factor.indirect

        if factor.is_estimated:
            logger.info(
                f"Precursor '{record.material_name}' uses an estimated "
                f"{factor.provenance.value} factor split"
            )
        return ScopeDetail(
            source=f"{record.supplier_name} - {record.material_name}",
            source_id=record.id,
            quantity=tonnes,
            unit="tonnes",
            emission_factor=factor.total,
            emission_factor_unit=PRECURSOR_FACTOR_UNIT,
            emissions=direct + indirect,
            direct_emissions=direct,
            indirect_emissions=indirect,
            provenance=factor.provenance,
        )

    def calculate(
        self, records: Iterable[PrecursorActivity]
    ) -> Tuple[Decimal, Decimal, Tuple[ScopeDetail, ...]]:
        """
        Calculate embedded precursor emissions.

        Returns:
            Tuple of (direct tCO2e, indirect tCO2e, detail rows in input order)
        """
        details = tuple(self.calculate_record(record) for record in records)
        direct = sum((d.direct_emissions for d in details), Decimal("0"))
        indirect = sum((d.indirect_emissions for d in details), Decimal("0"))
        return direct, indirect, details
