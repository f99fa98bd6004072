"""
Validation engine.

Runs five independent check groups (products, activity data, suppliers,
calculation, completeness) concurrently, derives the verdict and stores a
new ValidationResult row for every run.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories import (
    ActivityRepository,
    CalculationRepository,
    CNCodeRepository,
    ProductRepository,
    SupplierDeclarationRepository,
    SupplierRepository,
    ValidationResultRepository,
)
from app.pydantic_models.activity import to_activity_record
from app.pydantic_models.calculation import CalculationPydModel
from app.pydantic_models.validation import ValidationResultPydModel
from app.services.validators import rules
from app.utils.constants import ActivityKind, ValidationSeverity, ValidationStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

# position of validate_calculation in the gathered groups
CALCULATION_GROUP = 3


class ValidationEngine:
    """
    Service for validating a reporting period before report generation.

    Check groups share one AsyncSession, which does not allow concurrent
    statements, so their reads are serialized through a lock while the rule
    evaluation itself stays independent per group.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._read_lock = asyncio.Lock()

    async def _fetch(self, query: Awaitable[T]) -> T:
        async with self._read_lock:
            return await query

    async def _activities(
        self, kind: ActivityKind, organisation_id: UUID, reporting_period_id: UUID
    ) -> tuple:
        rows = await self._fetch(
            ActivityRepository(self.session, kind).get_for_period(
                organisation_id, reporting_period_id
            )
        )
        return tuple(to_activity_record(row) for row in rows)

    async def validate_products(self, organisation_id: UUID) -> rules.Findings:
        products = await self._fetch(
            ProductRepository(self.session).get_active_for_organisation(organisation_id)
        )
        codes = sorted({p.cn_code for p in products if p.cn_code})
        registry = await self._fetch(CNCodeRepository(self.session).get_by_codes(codes))
        return rules.check_products(products, {c.code: c for c in registry})

    async def validate_activity_data(
        self, organisation_id: UUID, reporting_period_id: UUID
    ) -> rules.Findings:
        electricity = await self._activities(
            ActivityKind.ELECTRICITY, organisation_id, reporting_period_id
        )
        fuel = await self._activities(ActivityKind.FUEL, organisation_id, reporting_period_id)
        production = await self._activities(
            ActivityKind.PRODUCTION, organisation_id, reporting_period_id
        )
        precursors = await self._activities(
            ActivityKind.PRECURSOR, organisation_id, reporting_period_id
        )
        return (
            rules.check_electricity(electricity)
            + rules.check_fuel(fuel)
            + rules.check_production(production)
            + rules.check_precursors(precursors)
        )

    async def validate_suppliers(
        self, organisation_id: UUID, reporting_period_id: UUID
    ) -> rules.Findings:
        suppliers = await self._fetch(
            SupplierRepository(self.session).get_by_organisation(organisation_id)
        )
        counts = await self._fetch(
            SupplierDeclarationRepository(self.session).count_by_supplier(
                reporting_period_id
            )
        )
        return rules.check_suppliers(suppliers, counts)

    async def validate_calculation(
        self,
        organisation_id: UUID,
        reporting_period_id: UUID,
        calculation_id: UUID | None,
    ) -> rules.Findings:
        if calculation_id is None:
            return ()

        calculation = await self._fetch(
            CalculationRepository(self.session).get_for_period(
                calculation_id, organisation_id, reporting_period_id
            )
        )
        if calculation is None:
            logger.warning(
                f"Calculation {calculation_id} not found for organisation "
                f"{organisation_id}, period {reporting_period_id}"
            )
            return rules.missing_calculation(calculation_id)
        return rules.check_calculation(CalculationPydModel.model_validate(calculation))

    async def validate_completeness(
        self, organisation_id: UUID, reporting_period_id: UUID
    ) -> rules.Findings:
        production_repo = ActivityRepository(self.session, ActivityKind.PRODUCTION)
        electricity_repo = ActivityRepository(self.session, ActivityKind.ELECTRICITY)

        production_count = await self._fetch(
            production_repo.count_for_period(organisation_id, reporting_period_id)
        )
        electricity_count = await self._fetch(
            electricity_repo.count_for_period(organisation_id, reporting_period_id)
        )
        months = await self._fetch(
            electricity_repo.get_distinct_months(organisation_id, reporting_period_id)
        )
        return rules.check_completeness(production_count, electricity_count, months)

    async def run(
        self,
        organisation_id: UUID,
        reporting_period_id: UUID,
        calculation_id: UUID | None = None,
    ) -> ValidationResultPydModel:
        """
        Validate a reporting period and store the result.

        Args:
            organisation_id: Organisation UUID
            reporting_period_id: Reporting period UUID
            calculation_id: Optional calculation to check; advanced to
                VALIDATED when the run passes

        Returns:
            The stored validation result
        """
        logger.info(
            f"Running validation for organisation {organisation_id}, "
            f"period {reporting_period_id}"
        )
        groups = await asyncio.gather(
            self.validate_products(organisation_id),
            self.validate_activity_data(organisation_id, reporting_period_id),
            self.validate_suppliers(organisation_id, reporting_period_id),
            self.validate_calculation(organisation_id, reporting_period_id, calculation_id),
            self.validate_completeness(organisation_id, reporting_period_id),
        )
        findings = tuple(finding for group in groups for finding in group)
        # results may only reference a calculation of the validated period
        if any(f.field == "calculation_id" for f in groups[CALCULATION_GROUP]):
            calculation_id = None

        status = rules.derive_status(findings)
        result = await ValidationResultRepository(self.session).create(
            organisation_id=organisation_id,
            reporting_period_id=reporting_period_id,
            calculation_id=calculation_id,
            status=status.value,
            error_count=sum(1 for f in findings if f.severity == ValidationSeverity.ERROR),
            warning_count=sum(
                1 for f in findings if f.severity == ValidationSeverity.WARNING
            ),
            info_count=sum(1 for f in findings if f.severity == ValidationSeverity.INFO),
            findings=[f.model_dump(mode="json") for f in findings],
            validated_at=datetime.utcnow(),
        )

        if status == ValidationStatus.PASSED and calculation_id is not None:
            advanced = await CalculationRepository(self.session).mark_validated(
                calculation_id, organisation_id, reporting_period_id
            )
            if advanced:
                logger.info(f"Calculation {calculation_id} marked as validated")

        logger.info(
            f"Validation {result.id} {status.value}: {result.error_count} errors, "
            f"{result.warning_count} warnings, {result.info_count} info"
        )
        return ValidationResultPydModel.model_validate(result)
