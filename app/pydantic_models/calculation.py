"""
Pydantic models for Emission Calculations following kkb_fastapi pattern.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.utils.constants import CalculationStatus, FactorProvenance


class ResolvedFactor(BaseModel):
    """Effective (direct, indirect) factor pair and where it came from."""

    model_config = ConfigDict(frozen=True)

    direct: Decimal = Field(..., description="Direct factor")
    indirect: Decimal = Field(Decimal("0"), description="Indirect factor")
    provenance: FactorProvenance
    factor_id: UUID | None = Field(None, description="Reference factor or declaration ID")
    matched_name: str | None = None
    confidence: Decimal = Field(
        Decimal("1.0"), ge=0, le=1, description="Name matching confidence"
    )
    is_estimated: bool = Field(
        False, description="True when the value is a heuristic rather than measured"
    )

    @property
    def total(self) -> Decimal:
        return self.direct + self.indirect


class ScopeDetail(BaseModel):
    """One itemised emission source, traceable to its activity record."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., examples=["Grid Electricity"])
    source_id: UUID | None = Field(None, description="Activity record ID")
    quantity: Decimal = Field(..., examples=[Decimal("100000")])
    unit: str = Field(..., examples=["kWh"])
    emission_factor: Decimal = Field(..., examples=[Decimal("0.716")])
    emission_factor_unit: str = Field(..., examples=["tCO2e/MWh"])
    emissions: Decimal = Field(..., description="Emissions in tCO2e", examples=[Decimal("71.6")])
    direct_emissions: Decimal | None = Field(
        None, description="Direct part of emissions (precursors only)"
    )
    indirect_emissions: Decimal | None = Field(
        None, description="Indirect part of emissions (precursors only)"
    )
    provenance: FactorProvenance | None = None


class ScopeTotals(BaseModel):
    """Period-level scope totals before allocation."""

    model_config = ConfigDict(frozen=True)

    scope1: Decimal
    scope1_details: tuple[ScopeDetail, ...]
    scope2: Decimal
    scope2_details: tuple[ScopeDetail, ...]
    scope3_direct: Decimal
    scope3_indirect: Decimal
    scope3_details: tuple[ScopeDetail, ...]

    @property
    def scope3(self) -> Decimal:
        return self.scope3_direct + self.scope3_indirect

    @property
    def total(self) -> Decimal:
        return self.scope1 + self.scope2 + self.scope3


class ProductCalculation(BaseModel):
    """Emissions allocated to one product by production share."""

    model_config = ConfigDict(frozen=True)

    product_id: UUID | None = None
    product_name: str = Field(..., examples=["Steel Wire Rod"])
    cn_code: str | None = Field(None, examples=["72139110"])
    production_quantity: Decimal = Field(..., examples=[Decimal("500")])
    production_unit: str = "tonnes"
    share: Decimal = Field(..., description="Share of total production", examples=[Decimal("0.6")])

    scope1_emissions: Decimal
    scope1_details: list[ScopeDetail] = Field(default_factory=list)

    scope2_emissions: Decimal
    scope2_details: list[ScopeDetail] = Field(default_factory=list)

    scope3_direct_emissions: Decimal
    scope3_indirect_emissions: Decimal
    scope3_total_emissions: Decimal
    scope3_details: list[ScopeDetail] = Field(default_factory=list)

    total_emissions: Decimal

    see_total: Decimal = Field(..., description="Specific embedded emissions in tCO2e/t")
    see_direct: Decimal
    see_indirect: Decimal


class CalculationRunRequest(BaseModel):
    """Request model for running a calculation."""

    organisation_id: UUID
    reporting_period_id: UUID
    facility_id: UUID | None = None


class CalculationPydModel(BaseModel):
    """Model for calculation response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organisation_id: UUID
    reporting_period_id: UUID
    facility_id: UUID | None = None

    total_scope1: Decimal = Field(..., examples=[Decimal("20.2")])
    total_scope2: Decimal = Field(..., examples=[Decimal("71.6")])
    total_scope3_direct: Decimal
    total_scope3_indirect: Decimal
    total_scope3: Decimal
    total_emissions: Decimal
    total_production: Decimal

    products: list[ProductCalculation]

    status: CalculationStatus
    version: int
    calculated_at: datetime | None = None
    finalized_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class CalculationRunResult(BaseModel):
    """Structured outcome of a calculation run."""

    success: bool
    calculation: CalculationPydModel | None = None
    error: str | None = None
    error_code: str | None = None
