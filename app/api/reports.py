"""
CBAM Reports API router.

Generate, fetch and download CBAM quarterly XML reports.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db_session
from app.database.repositories import CalculationRepository, ReportRepository
from app.pydantic_models.report import ReportGenerateRequest, ReportPydModel
from app.services.reports.xml_generator import ReportGenerator
from app.utils.constants import CalculationStatus

router = APIRouter(
    prefix="/api/v1/reports",
    tags=["Reports"],
)

logger = logging.getLogger(__name__)

REPORTABLE_STATUSES = {CalculationStatus.VALIDATED.value, CalculationStatus.FINALIZED.value}


@router.post("/xml/generate", response_model=ReportPydModel)
async def generate_xml_report(
    request: ReportGenerateRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Generate a CBAM XML report from a validated or finalized calculation.

    Example:
        ```
        POST /api/v1/reports/xml/generate
        {
            "organisation_id": "uuid",
            "reporting_period_id": "uuid",
            "calculation_id": "uuid"
        }
        ```
    """
    calculation = await CalculationRepository(session).get_for_period(
        request.calculation_id, request.organisation_id, request.reporting_period_id
    )
    if not calculation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Calculation {request.calculation_id} not found",
        )
    if calculation.status not in REPORTABLE_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Calculation must be validated or finalized before generating XML",
        )

    result = await ReportGenerator(session).generate(
        request.organisation_id, request.reporting_period_id, request.calculation_id
    )
    if not result.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)

    await session.commit()
    return result.report


@router.get("/{report_id}", response_model=ReportPydModel)
async def get_report(
    report_id: UUID,
    session: AsyncSession = Depends(get_db_session),
):
    """Get report metadata and self-check result by ID."""
    report = await ReportRepository(session).get_by_id(report_id)
    if not report:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Report {report_id} not found",
        )
    return report


@router.get("/{report_id}/download")
async def download_report(
    report_id: UUID,
    session: AsyncSession = Depends(get_db_session),
):
    """Download the stored XML document as an attachment."""
    report = await ReportRepository(session).get_by_id(report_id)
    if not report or not report.xml_content:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Report {report_id} not found",
        )

    return Response(
        content=report.xml_content,
        media_type=report.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{report.file_name}"'},
    )


@router.post("/{report_id}/submit", response_model=ReportPydModel)
async def submit_report(
    report_id: UUID,
    session: AsyncSession = Depends(get_db_session),
):
    """Record that a report was submitted to the CBAM registry."""
    report = await ReportRepository(session).mark_submitted(report_id)
    if not report:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Report {report_id} not found",
        )

    await session.commit()
    return report
