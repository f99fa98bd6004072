"""
Repository for Calculation database operations.
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import CalculationDBModel
from app.database.schemas.calculation import OPEN_CALCULATION_PREDICATE
from app.utils.constants import CalculationStatus

logger = logging.getLogger(__name__)

INSERT_BY_DIALECT = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class CalculationRepository(BaseRepository[CalculationDBModel]):
    """Repository for calculation operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(CalculationDBModel, session)

    async def get_finalized(
        self, organisation_id: UUID, reporting_period_id: UUID
    ) -> Optional[CalculationDBModel]:
        """Get the finalized calculation of a period, if any."""
        stmt = select(self.model).where(
            self.model.organisation_id == organisation_id,
            self.model.reporting_period_id == reporting_period_id,
            self.model.status == CalculationStatus.FINALIZED.value,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_for_period(
        self, id: UUID, organisation_id: UUID, reporting_period_id: UUID
    ) -> Optional[CalculationDBModel]:
        """Get a calculation by ID only if it belongs to the organisation and period."""
        stmt = select(self.model).where(
            self.model.id == id,
            self.model.organisation_id == organisation_id,
            self.model.reporting_period_id == reporting_period_id,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def upsert_open_calculation(
        self, organisation_id: UUID, reporting_period_id: UUID, **values: Any
    ) -> CalculationDBModel:
        """
        Insert or replace the non-finalized calculation of a period.

        Runs as a single INSERT ... ON CONFLICT DO UPDATE against the partial
        unique index on (organisation_id, reporting_period_id) WHERE status is
        not finalized, so concurrent runs resolve to one row and the last
        writer wins. A replaced row has its version incremented.

        Args:
            organisation_id: Organisation UUID
            reporting_period_id: Reporting period UUID
            **values: Column values for totals, products, status and timestamps

        Returns:
            The stored calculation
        """
        dialect = self.session.get_bind().dialect.name
        try:
            insert = INSERT_BY_DIALECT[dialect]
        except KeyError:
            raise NotImplementedError(
                f"Calculation upsert is not supported on {dialect}"
            ) from None

        now = datetime.utcnow()
        stmt = insert(self.model).values(
            id=uuid.uuid4(),
            organisation_id=organisation_id,
            reporting_period_id=reporting_period_id,
            version=1,
            created_at=now,
            updated_at=now,
            **values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[self.model.organisation_id, self.model.reporting_period_id],
            index_where=OPEN_CALCULATION_PREDICATE,
            set_={
                **{key: stmt.excluded[key] for key in values},
                "version": self.model.version + 1,
                "updated_at": now,
            },
        ).returning(self.model.id)

        result = await self.session.execute(stmt)
        calculation_id = result.scalar_one()

        stmt = (
            select(self.model)
            .where(self.model.id == calculation_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        calculation = result.scalars().one()
        logger.debug(f"Upserted calculation {calculation.id} at version {calculation.version}")
        return calculation

    async def mark_validated(
        self, id: UUID, organisation_id: UUID, reporting_period_id: UUID
    ) -> bool:
        """
        Advance a CALCULATED calculation of the organisation and period to VALIDATED.

        Returns:
            True if the calculation was advanced
        """
        stmt = (
            update(self.model)
            .where(
                self.model.id == id,
                self.model.organisation_id == organisation_id,
                self.model.reporting_period_id == reporting_period_id,
                self.model.status == CalculationStatus.CALCULATED.value,
            )
            .values(status=CalculationStatus.VALIDATED.value, updated_at=datetime.utcnow())
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def finalize(
        self, id: UUID, organisation_id: Optional[UUID] = None
    ) -> Optional[CalculationDBModel]:
        """
        Move a CALCULATED or VALIDATED calculation to FINALIZED.

        Args:
            id: Calculation UUID
            organisation_id: Optional owner check

        Returns:
            The finalized calculation, or None if not found or not finalizable
        """
        now = datetime.utcnow()
        stmt = update(self.model).where(
            self.model.id == id,
            self.model.status.in_(
                [CalculationStatus.CALCULATED.value, CalculationStatus.VALIDATED.value]
            ),
        )
        if organisation_id is not None:
            stmt = stmt.where(self.model.organisation_id == organisation_id)
        stmt = stmt.values(
            status=CalculationStatus.FINALIZED.value, finalized_at=now, updated_at=now
        )

        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None

        stmt = (
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().one()
