"""
Pydantic models for reference emission factors and supplier declarations.
"""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.utils.constants import DeclarationStatus, EmissionFactorType


class EmissionFactorPydModel(BaseModel):
    """Reference emission factor as seen by the resolver."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID
    organisation_id: UUID | None = Field(
        None, description="Owning organisation, None for global factors"
    )
    type: EmissionFactorType
    name: str = Field(..., examples=["Natural Gas"])
    code: str | None = None
    category: str | None = None
    cn_code: str | None = Field(None, examples=["7201"])
    emission_factor: Decimal = Field(..., ge=0, examples=[Decimal("0.00202")])
    direct_emission_factor: Decimal | None = Field(None, ge=0)
    indirect_emission_factor: Decimal | None = Field(None, ge=0)
    unit: str = Field(..., examples=["tCO2e/m3"])
    country_code: str | None = Field(None, examples=["IN"])
    year: int | None = None
    is_active: bool = True


class SupplierDeclarationPydModel(BaseModel):
    """Supplier-declared direct/indirect factors for one product and period."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID
    supplier_id: UUID
    reporting_period_id: UUID
    product_name: str
    cn_code: str | None = None
    direct_emission_factor: Decimal
    indirect_emission_factor: Decimal
    status: DeclarationStatus
