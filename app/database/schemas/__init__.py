"""
SQLAlchemy database models (schemas).
"""
from app.database.schemas.activity_data import (
    ElectricityActivityDBModel,
    FuelActivityDBModel,
    PrecursorActivityDBModel,
    ProductionActivityDBModel,
)
from app.database.schemas.calculation import CalculationDBModel
from app.database.schemas.emission_factor import EmissionFactorDBModel
from app.database.schemas.reference import (
    CNCodeDBModel,
    FacilityDBModel,
    OrganisationDBModel,
    ProductDBModel,
    ReportingPeriodDBModel,
)
from app.database.schemas.report import ReportDBModel
from app.database.schemas.supplier import SupplierDBModel, SupplierDeclarationDBModel
from app.database.schemas.validation import ValidationResultDBModel

__all__ = [
    "CNCodeDBModel",
    "CalculationDBModel",
    "ElectricityActivityDBModel",
    "EmissionFactorDBModel",
    "FacilityDBModel",
    "FuelActivityDBModel",
    "OrganisationDBModel",
    "PrecursorActivityDBModel",
    "ProductDBModel",
    "ProductionActivityDBModel",
    "ReportDBModel",
    "ReportingPeriodDBModel",
    "SupplierDBModel",
    "SupplierDeclarationDBModel",
    "ValidationResultDBModel",
]
