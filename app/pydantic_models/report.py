"""
Pydantic models for generated reports.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.utils.constants import ReportStatus, ReportType


class XMLValidationResult(BaseModel):
    """Outcome of the generator's self-check on its own output."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ReportGenerateRequest(BaseModel):
    """Request model for generating a CBAM XML report."""

    organisation_id: UUID
    reporting_period_id: UUID
    calculation_id: UUID


class ReportPydModel(BaseModel):
    """Model for report response, without the XML body."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organisation_id: UUID
    reporting_period_id: UUID
    calculation_id: UUID
    type: ReportType
    status: ReportStatus
    file_name: str = Field(..., examples=["CBAM_Venus_Wire_2024_Q1.xml"])
    mime_type: str
    file_size: int | None = None
    xsd_version: str | None = None
    validation_result: XMLValidationResult | None = None
    generated_at: datetime
    submitted_at: datetime | None = None


class ReportGenerationResult(BaseModel):
    """Structured outcome of report generation."""

    success: bool
    report: ReportPydModel | None = None
    xml_content: str | None = None
    error: str | None = None
