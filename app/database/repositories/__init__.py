"""
Database repositories.
"""
from app.database.repositories.activity import ActivityRepository
from app.database.repositories.base import BaseRepository
from app.database.repositories.calculation import CalculationRepository
from app.database.repositories.emission_factor import EmissionFactorRepository
from app.database.repositories.reference import (
    CNCodeRepository,
    FacilityRepository,
    OrganisationRepository,
    ProductRepository,
    ReportingPeriodRepository,
)
from app.database.repositories.report import ReportRepository
from app.database.repositories.supplier import (
    SupplierDeclarationRepository,
    SupplierRepository,
)
from app.database.repositories.validation import ValidationResultRepository

__all__ = [
    "ActivityRepository",
    "BaseRepository",
    "CNCodeRepository",
    "CalculationRepository",
    "EmissionFactorRepository",
    "FacilityRepository",
    "OrganisationRepository",
    "ProductRepository",
    "ReportRepository",
    "ReportingPeriodRepository",
    "SupplierDeclarationRepository",
    "SupplierRepository",
    "ValidationResultRepository",
]
