"""
Repository for ValidationResult database operations.

Validation history is append-only; results are created, never updated.
"""
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import ValidationResultDBModel


class ValidationResultRepository(BaseRepository[ValidationResultDBModel]):
    """Repository for validation result operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ValidationResultDBModel, session)

    async def get_for_period(
        self, organisation_id: UUID, reporting_period_id: UUID
    ) -> List[ValidationResultDBModel]:
        """Validation history of a period, newest first."""
        stmt = (
            select(self.model)
            .where(
                self.model.organisation_id == organisation_id,
                self.model.reporting_period_id == reporting_period_id,
            )
            .order_by(self.model.validated_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
