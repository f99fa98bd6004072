"""
Validation rules.

Pure functions over already-loaded records. Each returns a tuple of
findings; none touches the database.
"""

import re
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Tuple
from uuid import UUID

from app.pydantic_models.activity import (
    ElectricityActivity,
    FuelActivity,
    PrecursorActivity,
    ProductionActivity,
)
from app.pydantic_models.calculation import CalculationPydModel
from app.pydantic_models.validation import ValidationFinding
from app.utils.constants import (
    ELECTRICITY_OUTLIER_KWH,
    EXPECTED_MONTHS_PER_QUARTER,
    MAX_FRACTION_DIGITS,
    MAX_INTEGER_DIGITS,
    SEE_LOWER_BOUND,
    SEE_UPPER_BOUND,
    VALID_COUNTRY_CODES,
    ValidationCategory,
    ValidationSeverity,
    ValidationStatus,
)

Findings = Tuple[ValidationFinding, ...]

CN_CODE_PATTERN = re.compile(r"^\d{8}$")


def exceeds_numeric_format(
    value: Any,
    max_integer_digits: int = MAX_INTEGER_DIGITS,
    max_fraction_digits: int = MAX_FRACTION_DIGITS,
) -> bool:
    """
    Check a number against the CBAM n..16,7 style format.

    Trailing zeros of the fraction do not count.

    Example:
        >>> exceeds_numeric_format(Decimal("1.123456789"))
        True
    """
    text = format(abs(Decimal(str(value))), "f")
    integer, _, fraction = text.partition(".")
    return (
        len(integer) > max_integer_digits
        or len(fraction.rstrip("0")) > max_fraction_digits
    )


def check_products(products: Iterable[Any], cn_registry: Mapping[str, Any]) -> Findings:
    """
    CN code checks for active products.

    Args:
        products: Product rows with name, cn_code and id
        cn_registry: CN code -> registry row with cbam_applicable
    """
    findings = []
    for product in products:
        if not product.cn_code or not CN_CODE_PATTERN.match(product.cn_code):
            findings.append(
                ValidationFinding(
                    severity=ValidationSeverity.ERROR,
                    category=ValidationCategory.CN_CODE,
                    field="cn_code",
                    message=f'Product "{product.name}" has invalid CN code format',
                    source_table="products",
                    source_id=product.id,
                    value=product.cn_code,
                    suggestion="CN code must be exactly 8 digits",
                )
            )
            continue

        entry = cn_registry.get(product.cn_code)
        if entry is None:
            findings.append(
                ValidationFinding(
                    severity=ValidationSeverity.WARNING,
                    category=ValidationCategory.CN_CODE,
                    field="cn_code",
                    message=(
                        f'CN code {product.cn_code} for "{product.name}" '
                        f"not found in CBAM registry"
                    ),
                    source_table="products",
                    source_id=product.id,
                    value=product.cn_code,
                    suggestion="Verify the CN code is correct and CBAM applicable",
                )
            )
        elif not entry.cbam_applicable:
            findings.append(
                ValidationFinding(
                    severity=ValidationSeverity.WARNING,
                    category=ValidationCategory.CN_CODE,
                    field="cn_code",
                    message=f"CN code {product.cn_code} may not be CBAM applicable",
                    source_table="products",
                    source_id=product.id,
                )
            )
    return tuple(findings)


def _negative(
    field: str, message: str, source_table: str, record: Any, value: Decimal
) -> ValidationFinding:
    return ValidationFinding(
        severity=ValidationSeverity.ERROR,
        category=ValidationCategory.NUMERIC_FORMAT,
        field=field,
        message=message,
        source_table=source_table,
        source_id=record.id,
        value=str(value),
    )


def check_electricity(records: Iterable[ElectricityActivity]) -> Findings:
    findings = []
    for record in records:
        for field, label in (
            ("grid_electricity", "Grid"),
            ("captive_electricity", "Captive"),
            ("renewable_electricity", "Renewable"),
        ):
            value = getattr(record, field)
            if value < 0:
                findings.append(
                    _negative(
                        field,
                        f"{label} electricity cannot be negative",
                        "electricity_activities",
                        record,
                        value,
                    )
                )

        total = record.grid_electricity + record.captive_electricity
        if total > ELECTRICITY_OUTLIER_KWH:
            findings.append(
                ValidationFinding(
                    severity=ValidationSeverity.WARNING,
                    category=ValidationCategory.OUTLIER,
                    field="total_electricity",
                    message=f"Unusually high electricity consumption ({total:,} kWh)",
                    source_table="electricity_activities",
                    source_id=record.id,
                    value=str(total),
                    suggestion="Please verify this value is correct",
                )
            )
    return tuple(findings)


def check_fuel(records: Iterable[FuelActivity]) -> Findings:
    findings = []
    for record in records:
        if record.quantity < 0:
            findings.append(
                _negative(
                    "quantity",
                    f"Fuel quantity cannot be negative for {record.fuel_name}",
                    "fuel_activities",
                    record,
                    record.quantity,
                )
            )
        if not record.emission_factor and record.fuel_type_id is None:
            findings.append(
                ValidationFinding(
                    severity=ValidationSeverity.WARNING,
                    category=ValidationCategory.SUPPLIER_DATA,
                    field="emission_factor",
                    message=f'No emission factor set for fuel "{record.fuel_name}"',
                    source_table="fuel_activities",
                    source_id=record.id,
                    suggestion=(
                        "System will attempt to match fuel to default emission factors"
                    ),
                )
            )
    return tuple(findings)


def check_production(records: Iterable[ProductionActivity]) -> Findings:
    return tuple(
        ValidationFinding(
            severity=ValidationSeverity.ERROR,
            category=ValidationCategory.NUMERIC_FORMAT,
            field="quantity_produced",
            message=f"Production quantity must be positive for {record.product_name}",
            source_table="production_activities",
            source_id=record.id,
            value=str(record.quantity_produced),
        )
        for record in records
        if record.quantity_produced <= 0
    )


def check_precursors(records: Iterable[PrecursorActivity]) -> Findings:
    findings = []
    for record in records:
        if record.quantity < 0:
            findings.append(
                _negative(
                    "quantity",
                    f"Precursor quantity cannot be negative for {record.material_name}",
                    "precursor_activities",
                    record,
                    record.quantity,
                )
            )
        if not record.direct_emission_factor and not record.indirect_emission_factor:
            findings.append(
                ValidationFinding(
                    severity=ValidationSeverity.WARNING,
                    category=ValidationCategory.SUPPLIER_DATA,
                    field="emission_factor",
                    message=(
                        f'No emission factors for precursor "{record.material_name}" '
                        f"from {record.supplier_name}"
                    ),
                    source_table="precursor_activities",
                    source_id=record.id,
                    suggestion="CBAM default values will be used if available",
                )
            )
    return tuple(findings)


def check_suppliers(
    suppliers: Iterable[Any], declaration_counts: Mapping[Any, int]
) -> Findings:
    """
    Country code and declaration coverage checks.

    Args:
        suppliers: Supplier rows with id, name and country_code
        declaration_counts: Supplier ID -> declarations in the period
    """
    findings = []
    for supplier in suppliers:
        if supplier.country_code and supplier.country_code.upper() not in VALID_COUNTRY_CODES:
            findings.append(
                ValidationFinding(
                    severity=ValidationSeverity.WARNING,
                    category=ValidationCategory.COUNTRY_CODE,
                    field="country_code",
                    message=(
                        f'Country code "{supplier.country_code}" for supplier '
                        f'"{supplier.name}" may not be recognized'
                    ),
                    source_table="suppliers",
                    source_id=supplier.id,
                    value=supplier.country_code,
                )
            )

        if declaration_counts.get(supplier.id, 0) == 0:
            findings.append(
                ValidationFinding(
                    severity=ValidationSeverity.INFO,
                    category=ValidationCategory.SUPPLIER_DATA,
                    field="declarations",
                    message=(
                        f'No emission declarations from supplier "{supplier.name}" '
                        f"for this period"
                    ),
                    source_table="suppliers",
                    source_id=supplier.id,
                    suggestion="Request emission data from supplier or use default values",
                )
            )
    return tuple(findings)


def _calculation_values(calculation: CalculationPydModel):
    yield "total_scope1", calculation.total_scope1
    yield "total_scope2", calculation.total_scope2
    yield "total_scope3_direct", calculation.total_scope3_direct
    yield "total_scope3_indirect", calculation.total_scope3_indirect
    yield "total_scope3", calculation.total_scope3
    yield "total_emissions", calculation.total_emissions
    yield "total_production", calculation.total_production
    for product in calculation.products:
        for field in (
            "production_quantity",
            "scope1_emissions",
            "scope2_emissions",
            "scope3_direct_emissions",
            "scope3_indirect_emissions",
            "scope3_total_emissions",
            "total_emissions",
            "see_total",
            "see_direct",
            "see_indirect",
        ):
            yield field, getattr(product, field)
        for detail in (
            *product.scope1_details,
            *product.scope2_details,
            *product.scope3_details,
        ):
            yield "emissions", detail.emissions


def missing_calculation(calculation_id: UUID) -> Findings:
    """The requested calculation does not belong to the validated period."""
    return (
        ValidationFinding(
            severity=ValidationSeverity.ERROR,
            category=ValidationCategory.CALCULATION,
            field="calculation_id",
            message="Calculation not found for this organisation and reporting period",
            source_table="calculations",
            source_id=calculation_id,
        ),
    )


def check_calculation(calculation: Optional[CalculationPydModel]) -> Findings:
    """Plausibility and numeric format checks on a stored calculation."""
    if calculation is None:
        return ()

    findings = []
    if calculation.total_emissions == 0:
        findings.append(
            ValidationFinding(
                severity=ValidationSeverity.WARNING,
                category=ValidationCategory.CALCULATION,
                field="total_emissions",
                message="Total emissions is zero - please verify all data is entered",
                source_table="calculations",
                source_id=calculation.id,
            )
        )

    for product in calculation.products:
        if product.see_total > SEE_UPPER_BOUND:
            findings.append(
                ValidationFinding(
                    severity=ValidationSeverity.WARNING,
                    category=ValidationCategory.OUTLIER,
                    field="see_total",
                    message=(
                        f'SEE of {product.see_total:.3f} tCO2e/t for '
                        f'"{product.product_name}" seems unusually high'
                    ),
                    source_table="calculations",
                    source_id=calculation.id,
                    suggestion="Verify production and emission data",
                )
            )
        if product.see_total < SEE_LOWER_BOUND and product.production_quantity > 0:
            findings.append(
                ValidationFinding(
                    severity=ValidationSeverity.WARNING,
                    category=ValidationCategory.OUTLIER,
                    field="see_total",
                    message=(
                        f'SEE of {product.see_total:.3f} tCO2e/t for '
                        f'"{product.product_name}" seems unusually low'
                    ),
                    source_table="calculations",
                    source_id=calculation.id,
                    suggestion="Verify all emission sources are included",
                )
            )

    for field, value in _calculation_values(calculation):
        if exceeds_numeric_format(value):
            findings.append(
                ValidationFinding(
                    severity=ValidationSeverity.ERROR,
                    category=ValidationCategory.NUMERIC_FORMAT,
                    field=field,
                    message=(
                        f"Value {value} exceeds CBAM numeric format "
                        f"(max {MAX_INTEGER_DIGITS} digits, {MAX_FRACTION_DIGITS} decimals)"
                    ),
                    source_table="calculations",
                    source_id=calculation.id,
                    value=str(value),
                    suggestion=f"Round to maximum {MAX_FRACTION_DIGITS} decimal places",
                )
            )
    return tuple(findings)


def check_completeness(
    production_count: int, electricity_count: int, electricity_months: Iterable[int]
) -> Findings:
    findings = []
    if production_count == 0:
        findings.append(
            ValidationFinding(
                severity=ValidationSeverity.ERROR,
                category=ValidationCategory.COMPLETENESS,
                field="production",
                message="No production data found for this reporting period",
                suggestion="Add production data before generating CBAM report",
            )
        )
    if electricity_count == 0:
        findings.append(
            ValidationFinding(
                severity=ValidationSeverity.WARNING,
                category=ValidationCategory.COMPLETENESS,
                field="electricity",
                message="No electricity consumption data found",
                suggestion="Add electricity data for accurate Scope 2 calculations",
            )
        )

    months_covered = len(set(electricity_months))
    if months_covered < EXPECTED_MONTHS_PER_QUARTER:
        findings.append(
            ValidationFinding(
                severity=ValidationSeverity.WARNING,
                category=ValidationCategory.COMPLETENESS,
                field="months",
                message=(
                    f"Only {months_covered} month(s) of data found "
                    f"(expected {EXPECTED_MONTHS_PER_QUARTER} for quarterly report)"
                ),
                suggestion="Ensure all months in the quarter have data",
            )
        )
    return tuple(findings)


def derive_status(findings: Iterable[ValidationFinding]) -> ValidationStatus:
    """failed if any ERROR, else warnings if any WARNING, else passed."""
    severities = {f.severity for f in findings}
    if ValidationSeverity.ERROR in severities:
        return ValidationStatus.FAILED
    if ValidationSeverity.WARNING in severities:
        return ValidationStatus.WARNINGS
    return ValidationStatus.PASSED
