"""
Repositories for suppliers and supplier declarations.
"""
from typing import List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import SupplierDBModel, SupplierDeclarationDBModel
from app.utils.constants import DeclarationStatus


class SupplierRepository(BaseRepository[SupplierDBModel]):
    """Repository for supplier operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(SupplierDBModel, session)

    async def get_by_organisation(self, organisation_id: UUID) -> List[SupplierDBModel]:
        stmt = (
            select(self.model)
            .where(self.model.organisation_id == organisation_id)
            .order_by(self.model.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class SupplierDeclarationRepository(BaseRepository[SupplierDeclarationDBModel]):
    """Repository for supplier declaration operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(SupplierDeclarationDBModel, session)

    async def get_verified_for_period(
        self, organisation_id: UUID, reporting_period_id: UUID
    ) -> List[SupplierDeclarationDBModel]:
        """
        Get verified declarations for a reporting period.

        Args:
            organisation_id: Organisation UUID
            reporting_period_id: Reporting period UUID

        Returns:
            Verified declarations, oldest first
        """
        stmt = (
            select(self.model)
            .where(
                self.model.organisation_id == organisation_id,
                self.model.reporting_period_id == reporting_period_id,
                self.model.status == DeclarationStatus.VERIFIED.value,
            )
            .order_by(self.model.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_supplier(self, reporting_period_id: UUID) -> dict[UUID, int]:
        """Declaration counts per supplier for a reporting period, any status."""
        stmt = (
            select(self.model.supplier_id, func.count())
            .where(self.model.reporting_period_id == reporting_period_id)
            .group_by(self.model.supplier_id)
        )
        result = await self.session.execute(stmt)
        return {supplier_id: count for supplier_id, count in result.all()}
