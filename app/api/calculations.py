"""
Emissions Calculations API router.

Run, fetch and finalize embedded emissions calculations.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db_session
from app.database.repositories import CalculationRepository
from app.pydantic_models.calculation import CalculationPydModel, CalculationRunRequest
from app.services.calculators.calculation_engine import (
    CalculationEngine,
    CalculationNotFoundError,
)

router = APIRouter(
    prefix="/api/v1/calculations",
    tags=["Calculations"],
)

logger = logging.getLogger(__name__)


@router.post("/run", response_model=CalculationPydModel)
async def run_calculation(
    request: CalculationRunRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Calculate embedded emissions for a reporting period.

    This endpoint will:
    1. Aggregate fuel, electricity and precursor data into Scope 1/2/3
    2. Allocate the totals to products by production share
    3. Store the result, replacing any non-finalized calculation of the period

    Example:
        ```
        POST /api/v1/calculations/run
        {
            "organisation_id": "uuid",
            "reporting_period_id": "uuid"
        }
        ```
    """
    engine = CalculationEngine(session)
    result = await engine.run(
        request.organisation_id, request.reporting_period_id, request.facility_id
    )
    if not result.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)

    await session.commit()
    return result.calculation


@router.get("/{calculation_id}", response_model=CalculationPydModel)
async def get_calculation(
    calculation_id: UUID,
    session: AsyncSession = Depends(get_db_session),
):
    """Get a calculation by ID, including per-product allocation."""
    calculation = await CalculationRepository(session).get_by_id(calculation_id)
    if not calculation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Calculation {calculation_id} not found",
        )
    return calculation


@router.post("/{calculation_id}/finalize", response_model=CalculationPydModel)
async def finalize_calculation(
    calculation_id: UUID,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Finalize a calculated or validated calculation.

    A finalized calculation is never replaced by a later run.
    """
    result = await CalculationEngine(session).finalize(calculation_id)
    if not result.success:
        raise HTTPException(
            status_code=(
                status.HTTP_404_NOT_FOUND
                if result.error_code == CalculationNotFoundError.code
                else status.HTTP_400_BAD_REQUEST
            ),
            detail=result.error,
        )

    await session.commit()
    return result.calculation
