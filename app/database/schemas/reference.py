"""
Reference entity SQLAlchemy models.

Organisations, facilities, reporting periods, products and the CN code
registry. These are maintained by data-entry workflows and read by the
calculation, validation and reporting services.
"""
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)

from app.database import Base


class OrganisationDBModel(Base):
    """Declarant organisation (EU importer or non-EU producer)."""

    __tablename__ = "organisations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    name = Column(String(200), nullable=False, comment="Legal name of the declarant")

    type = Column(
        String(50),
        nullable=False,
        default="non_eu_producer",
        comment="Organisation type (eu_importer, non_eu_producer)",
    )

    identification_number = Column(
        String(100),
        nullable=True,
        comment="EORI or other declarant identification number",
    )

    street = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)
    country_code = Column(
        String(2), nullable=True, comment="ISO 3166-1 alpha-2 country code"
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = ({"comment": "CBAM declarant organisations"},)

    def __repr__(self):
        return f"<OrganisationDBModel: {self.name}>"


class FacilityDBModel(Base):
    """Production installation belonging to an organisation."""

    __tablename__ = "facilities"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    organisation_id = Column(
        Uuid, ForeignKey("organisations.id"), nullable=False, index=True
    )

    name = Column(String(200), nullable=False, comment="Installation name")

    street = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    country_code = Column(
        String(2),
        nullable=True,
        comment="Country of the installation, used for grid factor lookup",
    )

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = ({"comment": "Production installations"},)

    def __repr__(self):
        return f"<FacilityDBModel: {self.name}>"


class ReportingPeriodDBModel(Base):
    """Quarterly CBAM reporting period."""

    __tablename__ = "reporting_periods"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    organisation_id = Column(
        Uuid, ForeignKey("organisations.id"), nullable=False, index=True
    )

    year = Column(Integer, nullable=False, comment="Reporting year")

    quarter = Column(String(2), nullable=False, comment="Reporting quarter (Q1..Q4)")

    start_date = Column(Date, nullable=True, comment="First day of the quarter")
    end_date = Column(Date, nullable=True, comment="Last day of the quarter")

    status = Column(String(20), nullable=False, default="draft")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "organisation_id", "year", "quarter", name="uq_reporting_periods_org_quarter"
        ),
        {"comment": "Quarterly reporting periods"},
    )

    def __repr__(self):
        return f"<ReportingPeriodDBModel: {self.year} {self.quarter}>"


class ProductDBModel(Base):
    """Manufactured good declared under CBAM."""

    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    organisation_id = Column(
        Uuid, ForeignKey("organisations.id"), nullable=False, index=True
    )

    name = Column(String(200), nullable=False, comment="Product name")

    cn_code = Column(
        String(20), nullable=True, comment="8-digit Combined Nomenclature code"
    )

    unit = Column(String(20), nullable=False, default="tonnes")

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_products_org_active", "organisation_id", "is_active"),
        {"comment": "Products declared under CBAM"},
    )

    def __repr__(self):
        return f"<ProductDBModel: {self.name} ({self.cn_code})>"


class CNCodeDBModel(Base):
    """Combined Nomenclature registry entry."""

    __tablename__ = "cn_codes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    code = Column(
        String(8), nullable=False, unique=True, comment="8-digit CN code"
    )

    description = Column(String, nullable=False)

    category = Column(
        String(50),
        nullable=False,
        comment="CBAM goods category (iron_steel, aluminium, cement, fertilizers, hydrogen, electricity)",
    )

    cbam_applicable = Column(Boolean, default=True, nullable=False)

    default_emission_factor = Column(
        Numeric(16, 8),
        nullable=True,
        comment="Combined CBAM default value in tCO2e/t",
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = ({"comment": "Combined Nomenclature registry"},)

    def __repr__(self):
        return f"<CNCodeDBModel: {self.code}>"
