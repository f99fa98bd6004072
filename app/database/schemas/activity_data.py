"""
Activity data SQLAlchemy models.

One table per activity variant. Every variant shares the envelope in
BaseActivityMixin: organisation, reporting period, optional facility and
the calendar month the figures belong to.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Uuid
from sqlalchemy.orm import declared_attr

from app.database import Base
from app.utils.constants import ActivityKind


class BaseActivityMixin:
    """
    Base mixin for all activity data models.

    Provides the shared envelope and timestamps.
    """

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    @declared_attr
    def organisation_id(cls):
        return Column(
            Uuid, ForeignKey("organisations.id"), nullable=False, index=True
        )

    @declared_attr
    def reporting_period_id(cls):
        return Column(
            Uuid, ForeignKey("reporting_periods.id"), nullable=False, index=True
        )

    @declared_attr
    def facility_id(cls):
        return Column(Uuid, ForeignKey("facilities.id"), nullable=True, index=True)

    month = Column(Integer, nullable=False, comment="Calendar month (1..12)")

    year = Column(Integer, nullable=False, comment="Calendar year")

    notes = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class ElectricityActivityDBModel(Base, BaseActivityMixin):
    """
    Electricity consumption for one month (Scope 2).

    Grid, captive and renewable consumption are recorded side by side in kWh.
    """

    __tablename__ = "electricity_activities"
    kind = ActivityKind.ELECTRICITY

    grid_electricity = Column(
        Numeric(20, 4), nullable=False, default=0, comment="Grid electricity in kWh"
    )

    grid_emission_factor = Column(
        Numeric(16, 8), nullable=True, comment="Grid factor in tCO2e/MWh"
    )

    renewable_electricity = Column(
        Numeric(20, 4),
        nullable=False,
        default=0,
        comment="Renewable electricity in kWh, always zero emissions",
    )

    captive_electricity = Column(
        Numeric(20, 4),
        nullable=False,
        default=0,
        comment="Captive or DG generation in kWh",
    )

    captive_emission_factor = Column(
        Numeric(16, 8), nullable=True, comment="Captive factor in tCO2e/MWh"
    )

    captive_fuel_type = Column(
        String(100), nullable=True, comment="Fuel burnt for captive generation"
    )

    __table_args__ = (
        Index("ix_electricity_activities_org_period", "organisation_id", "reporting_period_id"),
        {"comment": "Electricity consumption activity data (Scope 2)"},
    )

    def __repr__(self):
        return (
            f"<ElectricityActivityDBModel: {self.grid_electricity} kWh grid "
            f"in {self.year}-{self.month}>"
        )


class FuelActivityDBModel(Base, BaseActivityMixin):
    """Fuel combustion for one month (Scope 1)."""

    __tablename__ = "fuel_activities"
    kind = ActivityKind.FUEL

    fuel_type_id = Column(
        Uuid,
        ForeignKey("emission_factors.id"),
        nullable=True,
        comment="Reference fuel emission factor",
    )

    fuel_name = Column(String(200), nullable=False, comment="Fuel name as entered")

    quantity = Column(Numeric(20, 4), nullable=False, comment="Fuel quantity")

    unit = Column(String(20), nullable=False, comment="Unit (tonnes, kg, litres, m3)")

    emission_factor = Column(
        Numeric(16, 8), nullable=True, comment="Inline factor in tCO2e per unit"
    )

    __table_args__ = (
        Index("ix_fuel_activities_org_period", "organisation_id", "reporting_period_id"),
        {"comment": "Fuel combustion activity data (Scope 1)"},
    )

    def __repr__(self):
        return f"<FuelActivityDBModel: {self.fuel_name} {self.quantity} {self.unit}>"


class ProductionActivityDBModel(Base, BaseActivityMixin):
    """Production output for one month, the allocation denominator."""

    __tablename__ = "production_activities"
    kind = ActivityKind.PRODUCTION

    product_id = Column(Uuid, ForeignKey("products.id"), nullable=True, index=True)

    product_name = Column(String(200), nullable=False)

    cn_code = Column(String(20), nullable=True)

    quantity_produced = Column(Numeric(20, 4), nullable=False)

    unit = Column(String(20), nullable=False, default="tonnes")

    __table_args__ = (
        Index(
            "ix_production_activities_org_period", "organisation_id", "reporting_period_id"
        ),
        {"comment": "Production activity data"},
    )

    def __repr__(self):
        return (
            f"<ProductionActivityDBModel: {self.product_name} "
            f"{self.quantity_produced} {self.unit}>"
        )


class PrecursorActivityDBModel(Base, BaseActivityMixin):
    """Purchased precursor material for one month (Scope 3)."""

    __tablename__ = "precursor_activities"
    kind = ActivityKind.PRECURSOR

    supplier_id = Column(Uuid, ForeignKey("suppliers.id"), nullable=True, index=True)

    supplier_name = Column(String(200), nullable=False)

    material_name = Column(String(200), nullable=False)

    cn_code = Column(String(20), nullable=True)

    quantity = Column(Numeric(20, 4), nullable=False)

    unit = Column(String(20), nullable=False, default="tonnes")

    direct_emission_factor = Column(
        Numeric(16, 8), nullable=True, comment="Direct factor in tCO2e/t"
    )

    indirect_emission_factor = Column(
        Numeric(16, 8), nullable=True, comment="Indirect factor in tCO2e/t"
    )

    emission_factor_source = Column(
        String(50), nullable=True, comment="Where the inline factors came from"
    )

    __table_args__ = (
        Index(
            "ix_precursor_activities_org_period", "organisation_id", "reporting_period_id"
        ),
        {"comment": "Purchased precursor activity data (Scope 3)"},
    )

    def __repr__(self):
        return (
            f"<PrecursorActivityDBModel: {self.supplier_name} - {self.material_name} "
            f"{self.quantity} {self.unit}>"
        )
