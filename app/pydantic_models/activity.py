"""
Pydantic models for Activity Data following kkb_fastapi pattern.

The four activity variants form a tagged union on ``kind`` sharing the
ActivityEnvelope fields.
"""

from decimal import Decimal
from typing import Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from app.utils.constants import ActivityKind


class ActivityEnvelope(BaseModel):
    """Fields shared by every activity record."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID | None = Field(None, description="Source record ID")
    organisation_id: UUID
    reporting_period_id: UUID
    facility_id: UUID | None = None
    month: int = Field(..., ge=1, le=12, description="Calendar month", examples=[1])
    year: int = Field(..., description="Calendar year", examples=[2024])


class ElectricityActivity(ActivityEnvelope):
    """Monthly electricity consumption in kWh."""

    kind: Literal[ActivityKind.ELECTRICITY] = ActivityKind.ELECTRICITY
    grid_electricity: Decimal = Field(
        Decimal("0"), description="Grid electricity in kWh", examples=[Decimal("100000")]
    )
    grid_emission_factor: Decimal | None = Field(
        None, description="Grid factor in tCO2e/MWh", examples=[Decimal("0.716")]
    )
    renewable_electricity: Decimal = Field(
        Decimal("0"), description="Renewable electricity in kWh"
    )
    captive_electricity: Decimal = Field(
        Decimal("0"), description="Captive/DG generation in kWh"
    )
    captive_emission_factor: Decimal | None = Field(
        None, description="Captive factor in tCO2e/MWh"
    )
    captive_fuel_type: str | None = None


class FuelActivity(ActivityEnvelope):
    """Monthly fuel combustion."""

    kind: Literal[ActivityKind.FUEL] = ActivityKind.FUEL
    fuel_type_id: UUID | None = Field(None, description="Reference fuel factor ID")
    fuel_name: str = Field(..., examples=["Natural Gas"])
    quantity: Decimal = Field(..., examples=[Decimal("10000")])
    unit: str = Field(..., examples=["m3"])
    emission_factor: Decimal | None = Field(
        None, description="Inline factor in tCO2e per unit", examples=[Decimal("0.00202")]
    )


class ProductionActivity(ActivityEnvelope):
    """Monthly production output."""

    kind: Literal[ActivityKind.PRODUCTION] = ActivityKind.PRODUCTION
    product_id: UUID | None = None
    product_name: str = Field(..., examples=["Steel Wire Rod"])
    cn_code: str | None = Field(None, examples=["72139110"])
    quantity_produced: Decimal = Field(..., examples=[Decimal("500")])
    unit: str = "tonnes"


class PrecursorActivity(ActivityEnvelope):
    """Monthly purchased precursor material."""

    kind: Literal[ActivityKind.PRECURSOR] = ActivityKind.PRECURSOR
    supplier_id: UUID | None = None
    supplier_name: str = Field(..., examples=["Tata Steel"])
    material_name: str = Field(..., examples=["Pig Iron"])
    cn_code: str | None = None
    quantity: Decimal = Field(..., examples=[Decimal("1000")])
    unit: str = "tonnes"
    direct_emission_factor: Decimal | None = None
    indirect_emission_factor: Decimal | None = None
    emission_factor_source: str | None = None


ActivityRecord = Annotated[
    Union[ElectricityActivity, FuelActivity, ProductionActivity, PrecursorActivity],
    Field(discriminator="kind"),
]

ACTIVITY_RECORD_ADAPTER = TypeAdapter(ActivityRecord)


def to_activity_record(row: Any) -> ActivityEnvelope:
    """
    Validate a stored activity row into its variant.

    The variant is picked by the row's ``kind``.
    """
    return ACTIVITY_RECORD_ADAPTER.validate_python(row, from_attributes=True)
