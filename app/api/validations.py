"""
Validations API router.

Run validation for a reporting period and read validation history.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db_session
from app.database.repositories import ValidationResultRepository
from app.pydantic_models.validation import ValidationResultPydModel, ValidationRunRequest
from app.services.validators.validation_engine import ValidationEngine

router = APIRouter(
    prefix="/api/v1/validations",
    tags=["Validations"],
)

logger = logging.getLogger(__name__)


@router.post("/run", response_model=ValidationResultPydModel)
async def run_validation(
    request: ValidationRunRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Validate a reporting period.

    Every run is stored. When it passes and a calculation ID is given, the
    calculation is advanced to validated.
    """
    result = await ValidationEngine(session).run(
        request.organisation_id, request.reporting_period_id, request.calculation_id
    )
    await session.commit()

    logger.info(f"Validation completed: {result.status.value}")
    return result


@router.get("/{validation_id}", response_model=ValidationResultPydModel)
async def get_validation(
    validation_id: UUID,
    session: AsyncSession = Depends(get_db_session),
):
    """Get a validation result by ID."""
    result = await ValidationResultRepository(session).get_by_id(validation_id)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Validation {validation_id} not found",
        )
    return result
