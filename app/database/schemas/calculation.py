"""
Calculation SQLAlchemy model.

At most one non-finalized calculation exists per organisation and
reporting period, enforced by a partial unique index that the upsert in
CalculationRepository targets.
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Uuid,
    text,
)

from app.database import Base

OPEN_CALCULATION_PREDICATE = text("status != 'finalized'")


class CalculationDBModel(Base):
    """Period-level embedded emissions with per-product allocation."""

    __tablename__ = "calculations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    organisation_id = Column(
        Uuid, ForeignKey("organisations.id"), nullable=False, index=True
    )

    reporting_period_id = Column(
        Uuid, ForeignKey("reporting_periods.id"), nullable=False, index=True
    )

    facility_id = Column(Uuid, ForeignKey("facilities.id"), nullable=True)

    total_scope1 = Column(Numeric(38, 10), nullable=False, default=0)
    total_scope2 = Column(Numeric(38, 10), nullable=False, default=0)
    total_scope3_direct = Column(Numeric(38, 10), nullable=False, default=0)
    total_scope3_indirect = Column(Numeric(38, 10), nullable=False, default=0)
    total_scope3 = Column(Numeric(38, 10), nullable=False, default=0)
    total_emissions = Column(
        Numeric(38, 10),
        nullable=False,
        default=0,
        comment="total_scope1 + total_scope2 + total_scope3 in tCO2e",
    )
    total_production = Column(
        Numeric(38, 10), nullable=False, default=0, comment="Total production in tonnes"
    )

    products = Column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered per-product allocation with itemised scope details",
    )

    status = Column(
        String(20),
        nullable=False,
        default="draft",
        comment="Calculation status (draft, calculated, validated, finalized)",
    )

    version = Column(
        Integer, nullable=False, default=1, comment="Incremented on every recalculation"
    )

    calculated_at = Column(DateTime, nullable=True)
    finalized_at = Column(DateTime, nullable=True)

    notes = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        Index(
            "uq_calculations_open_per_period",
            "organisation_id",
            "reporting_period_id",
            unique=True,
            postgresql_where=OPEN_CALCULATION_PREDICATE,
            sqlite_where=OPEN_CALCULATION_PREDICATE,
        ),
        {"comment": "Embedded emissions calculations"},
    )

    def __repr__(self):
        return (
            f"<CalculationDBModel: {self.total_emissions} tCO2e "
            f"v{self.version} ({self.status})>"
        )
