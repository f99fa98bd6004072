"""
Supplier and supplier declaration SQLAlchemy models.
"""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Numeric, String, Uuid

from app.database import Base


class SupplierDBModel(Base):
    """Precursor supplier."""

    __tablename__ = "suppliers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    organisation_id = Column(
        Uuid, ForeignKey("organisations.id"), nullable=False, index=True
    )

    name = Column(String(200), nullable=False)

    email = Column(String(255), nullable=True)

    country = Column(String(100), nullable=True)

    country_code = Column(
        String(10), nullable=True, comment="Supplier country, ISO 3166-1 alpha-2"
    )

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = ({"comment": "Precursor suppliers"},)

    def __repr__(self):
        return f"<SupplierDBModel: {self.name}>"


class SupplierDeclarationDBModel(Base):
    """
    Supplier-provided embedded emissions for one product and period.

    Only verified declarations are used by calculations.
    """

    __tablename__ = "supplier_declarations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    supplier_id = Column(Uuid, ForeignKey("suppliers.id"), nullable=False, index=True)

    organisation_id = Column(
        Uuid, ForeignKey("organisations.id"), nullable=False, index=True
    )

    reporting_period_id = Column(
        Uuid, ForeignKey("reporting_periods.id"), nullable=False, index=True
    )

    product_name = Column(
        String(200), nullable=False, comment="Declared product or material name"
    )

    cn_code = Column(String(20), nullable=True)

    direct_emission_factor = Column(
        Numeric(16, 8), nullable=False, comment="Direct emissions in tCO2e/t"
    )

    indirect_emission_factor = Column(
        Numeric(16, 8), nullable=False, comment="Indirect emissions in tCO2e/t"
    )

    status = Column(
        String(20),
        nullable=False,
        default="draft",
        comment="Declaration status (draft, pending, verified, rejected)",
    )

    verified_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    __table_args__ = (
        Index(
            "ix_supplier_declarations_period_status", "reporting_period_id", "status"
        ),
        {"comment": "Supplier emission declarations"},
    )

    def __repr__(self):
        return f"<SupplierDeclarationDBModel: {self.product_name} ({self.status})>"
