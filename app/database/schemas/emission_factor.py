"""
EmissionFactor SQLAlchemy model.
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Uuid,
)

from app.database import Base


class EmissionFactorDBModel(Base):
    """
    Emission factor reference table.

    Factors are global when organisation_id is NULL, otherwise scoped to
    one organisation. Organisation-scoped factors take precedence.
    """

    __tablename__ = "emission_factors"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    organisation_id = Column(
        Uuid,
        ForeignKey("organisations.id"),
        nullable=True,
        index=True,
        comment="Owning organisation, NULL for global factors",
    )

    type = Column(
        String(20),
        nullable=False,
        index=True,
        comment="Factor type (fuel, electricity, precursor, default)",
    )

    name = Column(
        String(200),
        nullable=False,
        comment="Name used to match activity data (e.g., 'Natural Gas', 'India Grid')",
    )

    code = Column(String(50), nullable=True, comment="Short lookup code")

    category = Column(String(50), nullable=True, comment="Goods or fuel category")

    cn_code = Column(
        String(8), nullable=True, comment="CN code prefix a default factor applies to"
    )

    emission_factor = Column(
        Numeric(16, 8),
        nullable=False,
        comment="Combined emission factor value (>= 0)",
    )

    direct_emission_factor = Column(
        Numeric(16, 8),
        nullable=True,
        comment="Direct share of the factor when published separately",
    )

    indirect_emission_factor = Column(
        Numeric(16, 8),
        nullable=True,
        comment="Indirect share of the factor when published separately",
    )

    unit = Column(
        String(50), nullable=False, comment="Factor unit (e.g., tCO2e/t, tCO2e/MWh)"
    )

    source_unit = Column(
        String(50), nullable=True, comment="Activity unit the factor expects"
    )

    country_code = Column(String(2), nullable=True, index=True)

    year = Column(Integer, nullable=True)

    source = Column(
        String(200),
        nullable=True,
        comment="Source of the emission factor (e.g., 'IPCC 2006', 'CEA 2023')",
    )

    is_default = Column(Boolean, default=False, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_emission_factors_type_active", "type", "is_active"),
        Index("ix_emission_factors_type_country", "type", "country_code"),
        {"comment": "Emission factor reference table"},
    )

    def __repr__(self):
        return f"<EmissionFactorDBModel: {self.type} - {self.name}>"
