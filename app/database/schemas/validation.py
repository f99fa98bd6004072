"""
Validation result SQLAlchemy model.

Rows are append-only: every validation run inserts a new result.
"""
import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Uuid

from app.database import Base


class ValidationResultDBModel(Base):
    """Findings and verdict of one validation run."""

    __tablename__ = "validation_results"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    organisation_id = Column(
        Uuid, ForeignKey("organisations.id"), nullable=False, index=True
    )

    reporting_period_id = Column(
        Uuid, ForeignKey("reporting_periods.id"), nullable=False, index=True
    )

    calculation_id = Column(Uuid, ForeignKey("calculations.id"), nullable=True)

    status = Column(
        String(20), nullable=False, comment="Verdict (passed, warnings, failed)"
    )

    error_count = Column(Integer, nullable=False, default=0)
    warning_count = Column(Integer, nullable=False, default=0)
    info_count = Column(Integer, nullable=False, default=0)

    findings = Column(JSON, nullable=False, default=list)

    validated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index(
            "ix_validation_results_org_period", "organisation_id", "reporting_period_id"
        ),
        {"comment": "Validation run history"},
    )

    def __repr__(self):
        return (
            f"<ValidationResultDBModel: {self.status} "
            f"({self.error_count} errors, {self.warning_count} warnings)>"
        )
