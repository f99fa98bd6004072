"""
Main emission calculation orchestrator service - async version.

Aggregates one reporting period of activity data into Scope 1/2/3 totals,
allocates them across products by production share and stores the result
as the single open calculation of the period.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

import toml
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_environment_config
from app.database.repositories import (
    ActivityRepository,
    CalculationRepository,
    CNCodeRepository,
    EmissionFactorRepository,
    FacilityRepository,
    OrganisationRepository,
    ProductRepository,
    SupplierDeclarationRepository,
)
from app.pydantic_models.activity import (
    ElectricityActivity,
    FuelActivity,
    PrecursorActivity,
    to_activity_record,
)
from app.pydantic_models.calculation import (
    CalculationPydModel,
    CalculationRunResult,
    ScopeTotals,
)
from app.pydantic_models.emission_factor import (
    EmissionFactorPydModel,
    SupplierDeclarationPydModel,
)
from app.services.aggregators.product_allocator import ProductAllocator, quantize
from app.utils.constants import ActivityKind, CalculationStatus

from .electricity_calculator import ElectricityCalculator
from .factor_resolver import EmissionFactorResolver, FactorIndex
from .fuel_calculator import FuelCalculator
from .precursor_calculator import PrecursorCalculator

logger = logging.getLogger(__name__)

DEFAULT_FUZZY_THRESHOLD = FactorIndex.DEFAULT_THRESHOLD


def get_fuzzy_threshold_from_config() -> int:
    """
    Get fuzzy threshold from config file based on current environment.

    Returns:
        int: Fuzzy threshold value (0-100) from config, defaults to 90
    """
    try:
        threshold = get_environment_config().data.get("emission_calculation", {}).get(
            "fuzzy_match_threshold", DEFAULT_FUZZY_THRESHOLD
        )
        return int(threshold)
    except (OSError, ValueError, TypeError, toml.TomlDecodeError) as e:
        logger.warning(
            f"Failed to read fuzzy_match_threshold from config: {e}. "
            f"Using default {DEFAULT_FUZZY_THRESHOLD}"
        )
        return DEFAULT_FUZZY_THRESHOLD


class CalculationError(Exception):
    """
    Expected domain failure of a calculation run.

    Carries a stable code alongside the user-facing message so callers can
    branch without parsing text.
    """

    code = "CALCULATION_ERROR"

    def __init__(self, message: str, reporting_period_id: UUID | None = None):
        self.message = message
        self.reporting_period_id = reporting_period_id
        super().__init__(message)


class NoProductionDataError(CalculationError):
    code = "NO_PRODUCTION_DATA"

    def __init__(self, reporting_period_id: UUID | None = None):
        super().__init__(
            "No production data found for this period. "
            "Please add production data first.",
            reporting_period_id,
        )


class FinalizedCalculationError(CalculationError):
    code = "CALCULATION_FINALIZED"

    def __init__(self, reporting_period_id: UUID | None = None):
        super().__init__(
            "A finalized calculation already exists for this period",
            reporting_period_id,
        )


class CalculationNotFoundError(CalculationError):
    code = "CALCULATION_NOT_FOUND"

    def __init__(self, calculation_id: UUID):
        self.calculation_id = calculation_id
        super().__init__(f"Calculation {calculation_id} not found")


class CalculationNotFinalizableError(CalculationError):
    code = "INVALID_STATUS"

    def __init__(self, calculation_id: UUID, status: str):
        self.calculation_id = calculation_id
        super().__init__(
            f"Calculation {calculation_id} cannot be finalized from status '{status}'"
        )


def compute_scope_totals(
    resolver: EmissionFactorResolver,
    fuel: Iterable[FuelActivity],
    electricity: Iterable[ElectricityActivity],
    precursors: Iterable[PrecursorActivity],
    facility_countries: Optional[dict[UUID, str]] = None,
    default_country: Optional[str] = None,
) -> ScopeTotals:
    """
    Compute period-level scope totals from activity records.

    Args:
        resolver: Factor resolver for the run
        fuel: Fuel records (Scope 1)
        electricity: Electricity records (Scope 2)
        precursors: Precursor records (Scope 3)
        facility_countries: Facility ID -> country code for grid factors
        default_country: Organisation country code

    Returns:
        ScopeTotals with one detail row per source
    """
    scope1, scope1_details = FuelCalculator(resolver).calculate(fuel)
    scope2, scope2_details = ElectricityCalculator(
        resolver, facility_countries, default_country
    ).calculate(electricity)
    scope3_direct, scope3_indirect, scope3_details = PrecursorCalculator(
        resolver
    ).calculate(precursors)

    return ScopeTotals(
        scope1=scope1,
        scope1_details=scope1_details,
        scope2=scope2,
        scope2_details=scope2_details,
        scope3_direct=scope3_direct,
        scope3_indirect=scope3_indirect,
        scope3_details=scope3_details,
    )


class CalculationEngine:
    """
    Main orchestrator for embedded emissions calculations.

    Expected domain failures (no production data, finalized period) are
    returned as unsuccessful CalculationRunResult objects; store failures
    propagate to the caller.
    """

    def __init__(self, session: AsyncSession, fuzzy_threshold: int | None = None):
        """
        Initialize engine with database session.

        Args:
            session: Database session
            fuzzy_threshold: Optional fuzzy match threshold override.
                           If not provided, reads from config file.
        """
        self.session = session
        self.fuzzy_threshold = (
            fuzzy_threshold
            if fuzzy_threshold is not None
            else get_fuzzy_threshold_from_config()
        )
        self.calculation_repo = CalculationRepository(session)

    async def _load_activities(
        self,
        kind: ActivityKind,
        organisation_id: UUID,
        reporting_period_id: UUID,
        facility_id: UUID | None,
    ) -> tuple:
        rows = await ActivityRepository(self.session, kind).get_for_period(
            organisation_id, reporting_period_id, facility_id
        )
        return tuple(to_activity_record(row) for row in rows)

    async def _build_resolver(
        self, organisation_id: UUID, reporting_period_id: UUID
    ) -> EmissionFactorResolver:
        factors = await EmissionFactorRepository(self.session).get_active_for_organisation(
            organisation_id
        )
        declarations = await SupplierDeclarationRepository(
            self.session
        ).get_verified_for_period(organisation_id, reporting_period_id)
        cn_code_defaults = await CNCodeRepository(self.session).get_default_factors()

        factor_index = FactorIndex(
            (EmissionFactorPydModel.model_validate(f) for f in factors),
            fuzzy_threshold=self.fuzzy_threshold,
        )
        logger.debug(
            f"Indexed {len(factor_index)} emission factors and "
            f"{len(declarations)} verified declarations"
        )
        return EmissionFactorResolver(
            factor_index,
            declarations=(
                SupplierDeclarationPydModel.model_validate(d) for d in declarations
            ),
            cn_code_defaults=cn_code_defaults,
        )

    async def run(
        self,
        organisation_id: UUID,
        reporting_period_id: UUID,
        facility_id: UUID | None = None,
    ) -> CalculationRunResult:
        """
        Calculate and store embedded emissions for a reporting period.

        Args:
            organisation_id: Organisation UUID
            reporting_period_id: Reporting period UUID
            facility_id: Optional facility filter for activity data

        Returns:
            CalculationRunResult with the stored calculation on success,
            or error message and code on an expected failure

        Example:
            >>> engine = CalculationEngine(session)
            >>> result = await engine.run(org_id, period_id)
            >>> print(f"Total: {result.calculation.total_emissions} tCO2e")
        """
        logger.info(
            f"Running calculation for organisation {organisation_id}, "
            f"period {reporting_period_id}"
        )
        try:
            calculation = await self._run(
                organisation_id, reporting_period_id, facility_id
            )
        except CalculationError as e:
            logger.warning(f"Calculation for period {reporting_period_id} failed: {e}")
            return CalculationRunResult(success=False, error=e.message, error_code=e.code)

        logger.info(
            f"Calculation {calculation.id} v{calculation.version} stored: "
            f"{calculation.total_emissions} tCO2e"
        )
        return CalculationRunResult(success=True, calculation=calculation)

    async def _run(
        self,
        organisation_id: UUID,
        reporting_period_id: UUID,
        facility_id: UUID | None,
    ) -> CalculationPydModel:
        production = await self._load_activities(
            ActivityKind.PRODUCTION, organisation_id, reporting_period_id, facility_id
        )
        if not production:
            raise NoProductionDataError(reporting_period_id)

        finalized = await self.calculation_repo.get_finalized(
            organisation_id, reporting_period_id
        )
        if finalized is not None:
            raise FinalizedCalculationError(reporting_period_id)

        electricity = await self._load_activities(
            ActivityKind.ELECTRICITY, organisation_id, reporting_period_id, facility_id
        )
        fuel = await self._load_activities(
            ActivityKind.FUEL, organisation_id, reporting_period_id, facility_id
        )
        precursors = await self._load_activities(
            ActivityKind.PRECURSOR, organisation_id, reporting_period_id, facility_id
        )

        resolver = await self._build_resolver(organisation_id, reporting_period_id)

        organisation = await OrganisationRepository(self.session).get_by_id(organisation_id)
        facilities = await FacilityRepository(self.session).get_by_organisation(
            organisation_id
        )
        totals = compute_scope_totals(
            resolver,
            fuel,
            electricity,
            precursors,
            facility_countries={f.id: f.country_code for f in facilities if f.country_code},
            default_country=organisation.country_code if organisation else None,
        )

        products = await ProductRepository(self.session).get_by_ids(
            list({p.product_id for p in production if p.product_id is not None})
        )
        allocator = ProductAllocator({p.id: p.cn_code for p in products if p.cn_code})
        total_production, product_calculations = allocator.allocate(totals, production)

        scope1 = quantize(totals.scope1)
        scope2 = quantize(totals.scope2)
        scope3_direct = quantize(totals.scope3_direct)
        scope3_indirect = quantize(totals.scope3_indirect)
        scope3 = scope3_direct + scope3_indirect

        calculation = await self.calculation_repo.upsert_open_calculation(
            organisation_id,
            reporting_period_id,
            facility_id=facility_id,
            total_scope1=scope1,
            total_scope2=scope2,
            total_scope3_direct=scope3_direct,
            total_scope3_indirect=scope3_indirect,
            total_scope3=scope3,
            total_emissions=scope1 + scope2 + scope3,
            total_production=quantize(total_production),
            products=[p.model_dump(mode="json") for p in product_calculations],
            status=CalculationStatus.CALCULATED.value,
            calculated_at=datetime.utcnow(),
        )
        return CalculationPydModel.model_validate(calculation)

    async def finalize(
        self, calculation_id: UUID, organisation_id: UUID | None = None
    ) -> CalculationRunResult:
        """
        Move a CALCULATED or VALIDATED calculation to FINALIZED.

        A finalized calculation is never replaced by a later run.
        """
        calculation = await self.calculation_repo.get_by_id(calculation_id)
        if calculation is None or (
            organisation_id is not None and calculation.organisation_id != organisation_id
        ):
            error = CalculationNotFoundError(calculation_id)
            return CalculationRunResult(success=False, error=error.message, error_code=error.code)

        finalized = await self.calculation_repo.finalize(calculation_id, organisation_id)
        if finalized is None:
            error = CalculationNotFinalizableError(calculation_id, calculation.status)
            logger.warning(error.message)
            return CalculationRunResult(success=False, error=error.message, error_code=error.code)

        logger.info(f"Finalized calculation {calculation_id} at version {finalized.version}")
        return CalculationRunResult(
            success=True, calculation=CalculationPydModel.model_validate(finalized)
        )


__all__ = [
    "CalculationEngine",
    "CalculationError",
    "FinalizedCalculationError",
    "NoProductionDataError",
    "compute_scope_totals",
    "get_fuzzy_threshold_from_config",
]
