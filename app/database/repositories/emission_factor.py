"""
Repository for EmissionFactor database operations.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import EmissionFactorDBModel


class EmissionFactorRepository(BaseRepository[EmissionFactorDBModel]):
    """Repository for emission factor operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(EmissionFactorDBModel, session)

    async def get_active_for_organisation(
        self, organisation_id: Optional[UUID] = None
    ) -> List[EmissionFactorDBModel]:
        """
        Get active factors visible to an organisation.

        Args:
            organisation_id: Organisation UUID, or None for global factors only

        Returns:
            Organisation-scoped and global active factors, organisation-scoped first
        """
        scope = self.model.organisation_id.is_(None)
        if organisation_id is not None:
            scope = or_(scope, self.model.organisation_id == organisation_id)

        stmt = (
            select(self.model)
            .where(self.model.is_active.is_(True), scope)
            .order_by(self.model.organisation_id.is_(None), self.model.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
