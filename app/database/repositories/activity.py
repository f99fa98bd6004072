"""
Repository for Activity database operations.

Handles database reads for all activity variants (electricity, fuel,
production, precursor).
"""
from typing import Dict, List, Optional, Type, Union
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import (
    ElectricityActivityDBModel,
    FuelActivityDBModel,
    PrecursorActivityDBModel,
    ProductionActivityDBModel,
)
from app.utils.constants import ActivityKind

ActivityModelType = Union[
    ElectricityActivityDBModel,
    FuelActivityDBModel,
    ProductionActivityDBModel,
    PrecursorActivityDBModel,
]


class ActivityRepository(BaseRepository[ActivityModelType]):
    """Repository for activity operations across all activity variants."""

    MODEL_MAP: Dict[ActivityKind, Type[ActivityModelType]] = {
        ActivityKind.ELECTRICITY: ElectricityActivityDBModel,
        ActivityKind.FUEL: FuelActivityDBModel,
        ActivityKind.PRODUCTION: ProductionActivityDBModel,
        ActivityKind.PRECURSOR: PrecursorActivityDBModel,
    }

    def __init__(self, session: AsyncSession, kind: ActivityKind | str):
        """
        Initialize activity repository.

        Args:
            session: Async database session
            kind: Activity variant ('electricity', 'fuel', 'production', 'precursor')

        Raises:
            ValueError: If kind is not recognized
        """
        try:
            kind = ActivityKind(kind)
        except ValueError:
            raise ValueError(
                f"Invalid activity kind: {kind}. "
                f"Must be one of: {[k.value for k in self.MODEL_MAP]}"
            ) from None

        super().__init__(self.MODEL_MAP[kind], session)
        self.kind = kind

    def _period_filter(
        self,
        stmt,
        organisation_id: UUID,
        reporting_period_id: UUID,
        facility_id: Optional[UUID] = None,
    ):
        stmt = stmt.where(
            self.model.organisation_id == organisation_id,
            self.model.reporting_period_id == reporting_period_id,
        )
        if facility_id is not None:
            stmt = stmt.where(self.model.facility_id == facility_id)
        return stmt

    async def get_for_period(
        self,
        organisation_id: UUID,
        reporting_period_id: UUID,
        facility_id: Optional[UUID] = None,
    ) -> List[ActivityModelType]:
        """
        Get all records of this variant for a reporting period.

        Args:
            organisation_id: Organisation UUID
            reporting_period_id: Reporting period UUID
            facility_id: Optional facility filter

        Returns:
            Records ordered by month then creation time
        """
        stmt = self._period_filter(
            select(self.model), organisation_id, reporting_period_id, facility_id
        ).order_by(self.model.month, self.model.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_period(
        self, organisation_id: UUID, reporting_period_id: UUID
    ) -> int:
        """Count records of this variant for a reporting period."""
        stmt = self._period_filter(
            select(func.count()).select_from(self.model),
            organisation_id,
            reporting_period_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def get_distinct_months(
        self, organisation_id: UUID, reporting_period_id: UUID
    ) -> List[int]:
        """Calendar months that have at least one record in the period."""
        stmt = self._period_filter(
            select(self.model.month).distinct(), organisation_id, reporting_period_id
        ).order_by(self.model.month)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
