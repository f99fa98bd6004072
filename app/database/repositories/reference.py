"""
Repositories for reference entities (organisations, facilities, periods,
products and the CN code registry).
"""
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import (
    CNCodeDBModel,
    FacilityDBModel,
    OrganisationDBModel,
    ProductDBModel,
    ReportingPeriodDBModel,
)


class OrganisationRepository(BaseRepository[OrganisationDBModel]):
    """Repository for organisation operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(OrganisationDBModel, session)


class FacilityRepository(BaseRepository[FacilityDBModel]):
    """Repository for facility operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(FacilityDBModel, session)

    async def get_by_organisation(self, organisation_id: UUID) -> List[FacilityDBModel]:
        """Get the active facilities of an organisation ordered by name."""
        stmt = (
            select(self.model)
            .where(
                self.model.organisation_id == organisation_id,
                self.model.is_active.is_(True),
            )
            .order_by(self.model.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class ReportingPeriodRepository(BaseRepository[ReportingPeriodDBModel]):
    """Repository for reporting period operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ReportingPeriodDBModel, session)


class ProductRepository(BaseRepository[ProductDBModel]):
    """Repository for product operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ProductDBModel, session)

    async def get_active_for_organisation(
        self, organisation_id: UUID
    ) -> List[ProductDBModel]:
        """Get active products of an organisation."""
        stmt = (
            select(self.model)
            .where(
                self.model.organisation_id == organisation_id,
                self.model.is_active.is_(True),
            )
            .order_by(self.model.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_ids(self, ids: List[UUID]) -> List[ProductDBModel]:
        """Get products by a list of IDs."""
        if not ids:
            return []
        stmt = select(self.model).where(self.model.id.in_(ids))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class CNCodeRepository(BaseRepository[CNCodeDBModel]):
    """Repository for the CN code registry."""

    def __init__(self, session: AsyncSession):
        super().__init__(CNCodeDBModel, session)

    async def get_by_code(self, code: str) -> Optional[CNCodeDBModel]:
        stmt = select(self.model).where(self.model.code == code)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_codes(self, codes: List[str]) -> List[CNCodeDBModel]:
        """Get registry entries for a set of codes."""
        if not codes:
            return []
        stmt = select(self.model).where(self.model.code.in_(codes))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_default_factors(self) -> Dict[str, Decimal]:
        """CBAM-applicable codes that carry a combined default factor."""
        stmt = select(self.model.code, self.model.default_emission_factor).where(
            self.model.cbam_applicable.is_(True),
            self.model.default_emission_factor.is_not(None),
        )
        result = await self.session.execute(stmt)
        return {code: factor for code, factor in result.all()}
