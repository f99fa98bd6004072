"""
Unit conversion utilities for emissions calculations.

Stateless helpers normalising activity quantities to tonnes and MWh.
"""

from decimal import Decimal

from app.utils.constants import KG_PER_TONNE, KWH_PER_MWH, LITRE_TO_TONNES


class UnitConverter:
    """
    Unit conversion service.

    Every unit other than kilograms (and litres for fuels) is assumed to be
    already in the unit its emission factor expects and passes through.
    """

    KG_UNITS = frozenset({"kg", "kgs", "kilogram", "kilograms"})
    LITRE_UNITS = frozenset({"l", "litre", "litres", "liter", "liters"})
    TONNE_UNITS = frozenset({"t", "tonne", "tonnes", "ton", "tons", "mt"})

    @staticmethod
    def normalize_number(value: str | float | int | Decimal | None) -> Decimal:
        """
        Normalize a number value to Decimal.

        Handles string inputs with commas, floats, None and existing Decimals.

        Example:
            >>> UnitConverter.normalize_number("1,234.56")
            Decimal('1234.56')
        """
        if value is None:
            return Decimal("0")

        if isinstance(value, Decimal):
            return value

        if isinstance(value, str):
            value = value.replace(",", "").strip()

        return Decimal(str(value))

    @staticmethod
    def _unit_key(unit: str | None) -> str:
        return (unit or "").strip().lower()

    @staticmethod
    def kg_to_tonnes(kg: float | Decimal) -> Decimal:
        """Convert kilograms to tonnes."""
        return UnitConverter.normalize_number(kg) / KG_PER_TONNE

    @staticmethod
    def litres_to_tonnes(litres: float | Decimal) -> Decimal:
        """
        Convert litres of liquid fuel to tonnes.

        Uses a fixed diesel density; an approximation for other fuels.
        """
        return UnitConverter.normalize_number(litres) * LITRE_TO_TONNES

    @staticmethod
    def kwh_to_mwh(kwh: float | Decimal) -> Decimal:
        """Convert kilowatt-hours to megawatt-hours."""
        return UnitConverter.normalize_number(kwh) / KWH_PER_MWH

    @staticmethod
    def fuel_quantity_to_factor_basis(quantity: Decimal, unit: str | None) -> Decimal:
        """
        Normalise a fuel quantity before applying its factor.

        kg is divided by 1000, litres are multiplied by the density constant,
        anything else (tonnes, m3, GJ) passes through.

        Example:
            >>> UnitConverter.fuel_quantity_to_factor_basis(Decimal("1000"), "litres")
            Decimal('0.84000')
        """
        key = UnitConverter._unit_key(unit)
        if key in UnitConverter.KG_UNITS:
            return UnitConverter.kg_to_tonnes(quantity)
        if key in UnitConverter.LITRE_UNITS:
            return UnitConverter.litres_to_tonnes(quantity)
        return UnitConverter.normalize_number(quantity)

    @staticmethod
    def mass_to_tonnes(quantity: Decimal, unit: str | None) -> Decimal:
        """Normalise a material quantity to tonnes; only kg is converted."""
        if UnitConverter._unit_key(unit) in UnitConverter.KG_UNITS:
            return UnitConverter.kg_to_tonnes(quantity)
        return UnitConverter.normalize_number(quantity)

    @staticmethod
    def factor_unit_for(unit: str | None) -> str:
        """Unit label of a factor applied after fuel normalisation."""
        key = UnitConverter._unit_key(unit)
        if (
            key in UnitConverter.KG_UNITS
            or key in UnitConverter.LITRE_UNITS
            or key in UnitConverter.TONNE_UNITS
            or not key
        ):
            return "tCO2e/t"
        return f"tCO2e/{unit.strip()}"
