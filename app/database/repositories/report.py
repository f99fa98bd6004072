"""
Repository for Report database operations.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories.base import BaseRepository
from app.database.schemas import ReportDBModel
from app.utils.constants import ReportStatus


class ReportRepository(BaseRepository[ReportDBModel]):
    """Repository for report operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ReportDBModel, session)

    async def mark_submitted(self, id: UUID) -> Optional[ReportDBModel]:
        """Record that a report was submitted to the registry."""
        return await self.update(
            id, status=ReportStatus.SUBMITTED.value, submitted_at=datetime.utcnow()
        )
