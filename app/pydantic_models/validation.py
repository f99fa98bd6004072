"""
Pydantic models for validation runs.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.utils.constants import ValidationCategory, ValidationSeverity, ValidationStatus


class ValidationFinding(BaseModel):
    """A single severity-classified validation finding."""

    model_config = ConfigDict(frozen=True)

    severity: ValidationSeverity
    category: ValidationCategory
    field: str = Field(..., examples=["cn_code"])
    message: str
    source_table: str | None = Field(None, examples=["products"])
    source_id: UUID | None = None
    value: str | None = None
    suggestion: str | None = None


class ValidationRunRequest(BaseModel):
    """Request model for running validation."""

    organisation_id: UUID
    reporting_period_id: UUID
    calculation_id: UUID | None = None


class ValidationResultPydModel(BaseModel):
    """Model for validation result response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organisation_id: UUID
    reporting_period_id: UUID
    calculation_id: UUID | None = None
    status: ValidationStatus
    error_count: int
    warning_count: int
    info_count: int
    findings: list[ValidationFinding]
    validated_at: datetime
