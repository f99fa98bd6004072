"""
Report SQLAlchemy model.
"""
import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text, Uuid

from app.database import Base


class ReportDBModel(Base):
    """
    Generated regulatory report.

    Immutable after creation apart from submitted_at.
    """

    __tablename__ = "reports"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    organisation_id = Column(
        Uuid, ForeignKey("organisations.id"), nullable=False, index=True
    )

    reporting_period_id = Column(
        Uuid, ForeignKey("reporting_periods.id"), nullable=False, index=True
    )

    calculation_id = Column(Uuid, ForeignKey("calculations.id"), nullable=False)

    type = Column(String(20), nullable=False, default="cbam_xml")

    status = Column(
        String(20),
        nullable=False,
        comment="Report status (completed, validated, submitted)",
    )

    file_name = Column(String(255), nullable=False)

    mime_type = Column(String(100), nullable=False, default="application/xml")

    file_size = Column(Integer, nullable=True, comment="Size in bytes of xml_content")

    xml_content = Column(Text, nullable=True)

    xsd_version = Column(String(10), nullable=True)

    validation_result = Column(
        JSON,
        nullable=True,
        comment="Self-check verdict {is_valid, errors, warnings}",
    )

    error_message = Column(String, nullable=True)

    generated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    submitted_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_reports_org_period", "organisation_id", "reporting_period_id"),
        {"comment": "Generated regulatory reports"},
    )

    def __repr__(self):
        return f"<ReportDBModel: {self.file_name} ({self.status})>"
