"""
Product allocation service.

Allocates period-level scope totals to products by production share and
derives Specific Embedded Emissions (SEE) per product.

Every scope total and every individual ScopeDetail row is multiplied by the
product's share, so each product keeps a traceable breakdown of the sources
that contributed to it.
"""

import logging
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, NamedTuple, Optional, Sequence, Tuple, Union
from uuid import UUID

from app.pydantic_models.activity import ProductionActivity
from app.pydantic_models.calculation import ProductCalculation, ScopeDetail, ScopeTotals
from app.utils.constants import CALCULATION_PRECISION

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

ProductKey = Union[UUID, str]


def quantize(value: Decimal) -> Decimal:
    """Round to the persisted 7 decimal places."""
    return value.quantize(CALCULATION_PRECISION, rounding=ROUND_HALF_UP)


class ProductionGroup(NamedTuple):
    """Production of one product summed over the period."""

    product_id: Optional[UUID]
    product_name: str
    cn_code: Optional[str]
    unit: str
    quantity: Decimal


class AllocatedScopes(NamedTuple):
    """Rounded scope values apportioned to one product."""

    scope1: Decimal
    scope2: Decimal
    scope3_direct: Decimal
    scope3_indirect: Decimal


def _product_key(record: ProductionActivity) -> ProductKey:
    return record.product_id if record.product_id is not None else record.product_name


def group_production(
    records: Iterable[ProductionActivity],
) -> Tuple[ProductionGroup, ...]:
    """
    Group production records by product, summing quantities.

    Products are identified by product_id, falling back to product_name when
    a record has no product reference. Groups keep first-appearance order.
    """
    records = tuple(records)
    first_by_key = {}
    for record in records:
        first_by_key.setdefault(_product_key(record), record)

    return tuple(
        ProductionGroup(
            product_id=first.product_id,
            product_name=first.product_name,
            cn_code=first.cn_code,
            unit=first.unit,
            quantity=sum(
                (r.quantity_produced for r in records if _product_key(r) == key), ZERO
            ),
        )
        for key, first in first_by_key.items()
    )


def _scale_detail(detail: ScopeDetail, share: Decimal) -> ScopeDetail:
    update = {"emissions": quantize(detail.emissions * share)}
    if detail.direct_emissions is not None:
        update["direct_emissions"] = quantize(detail.direct_emissions * share)
    if detail.indirect_emissions is not None:
        update["indirect_emissions"] = quantize(detail.indirect_emissions * share)
    return detail.model_copy(update=update)


def _per_unit(value: Decimal, quantity: Decimal) -> Decimal:
    if quantity == 0:
        return ZERO
    return quantize(value / quantity)


def apportion(total: Decimal, weights: Sequence[Decimal]) -> Tuple[Decimal, ...]:
    """
    Split a total across weights, rounded to 7 places, summing exactly.

    Largest-remainder method: every part is rounded down, then the units
    still missing from the rounded total go to the parts with the largest
    discarded remainders (first part wins a tie). All parts are 0 when the
    weights sum to 0.

    Example:
        >>> apportion(Decimal("1"), [Decimal("1")] * 3)
        (Decimal('0.3333334'), Decimal('0.3333333'), Decimal('0.3333333'))
    """
    weight_sum = sum(weights, ZERO)
    if weight_sum == 0:
        return tuple(ZERO for _ in weights)

    exact = [total * weight / weight_sum for weight in weights]
    floors = [
        value.quantize(CALCULATION_PRECISION, rounding=ROUND_FLOOR) for value in exact
    ]
    missing = (quantize(total) - sum(floors, ZERO)) / CALCULATION_PRECISION
    units = min(max(int(missing.to_integral_value()), 0), len(weights))

    by_remainder = sorted(
        range(len(weights)), key=lambda i: exact[i] - floors[i], reverse=True
    )
    bumped = set(by_remainder[:units])
    return tuple(
        floor + CALCULATION_PRECISION if i in bumped else floor
        for i, floor in enumerate(floors)
    )


class ProductAllocator:
    """Allocates scope totals across products by production share."""

    def __init__(self, product_cn_codes: Optional[Mapping[UUID, str]] = None):
        """
        Initialize allocator.

        Args:
            product_cn_codes: CN codes from the product catalogue by product ID;
                these take precedence over the code on the production record
        """
        self.product_cn_codes = dict(product_cn_codes or {})

    def allocate_group(
        self,
        totals: ScopeTotals,
        group: ProductionGroup,
        total_production: Decimal,
        scopes: AllocatedScopes,
    ) -> ProductCalculation:
        """
        Build the calculation of one product from its apportioned scope values.

        Formula:
            share = product quantity / total production (0 if total is 0)
            SEE   = product total / product quantity (0 if quantity is 0)
        """
        share = group.quantity / total_production if total_production else ZERO
        scope3_total = scopes.scope3_direct + scopes.scope3_indirect
        total = scopes.scope1 + scopes.scope2 + scope3_total

        cn_code = self.product_cn_codes.get(group.product_id) or group.cn_code

        return ProductCalculation(
            product_id=group.product_id,
            product_name=group.product_name,
            cn_code=cn_code,
            production_quantity=group.quantity,
            production_unit=group.unit,
            share=quantize(share),
            scope1_emissions=scopes.scope1,
            scope1_details=[_scale_detail(d, share) for d in totals.scope1_details],
            scope2_emissions=scopes.scope2,
            scope2_details=[_scale_detail(d, share) for d in totals.scope2_details],
            scope3_direct_emissions=scopes.scope3_direct,
            scope3_indirect_emissions=scopes.scope3_indirect,
            scope3_total_emissions=scope3_total,
            scope3_details=[_scale_detail(d, share) for d in totals.scope3_details],
            total_emissions=total,
            see_total=_per_unit(total, group.quantity),
            see_direct=_per_unit(scopes.scope1 + scopes.scope3_direct, group.quantity),
            see_indirect=_per_unit(scopes.scope2 + scopes.scope3_indirect, group.quantity),
        )

    def allocate(
        self, totals: ScopeTotals, production: Iterable[ProductionActivity]
    ) -> Tuple[Decimal, Tuple[ProductCalculation, ...]]:
        """
        Allocate scope totals across all products of the period.

        Each scope is apportioned from the unrounded total, so the product
        values of a scope add up exactly to the total rounded to 7 places.

        Returns:
            Tuple of (total production, product calculations)
        """
        groups = group_production(production)
        total_production = sum((g.quantity for g in groups), ZERO)
        if total_production == 0:
            logger.warning("Total production is zero; all product shares are 0")

        weights = [g.quantity for g in groups]
        per_product = zip(
            apportion(totals.scope1, weights),
            apportion(totals.scope2, weights),
            apportion(totals.scope3_direct, weights),
            apportion(totals.scope3_indirect, weights),
        )

        products = tuple(
            self.allocate_group(totals, group, total_production, AllocatedScopes(*scopes))
            for group, scopes in zip(groups, per_product)
        )
        logger.info(
            f"Allocated {totals.total} tCO2e across {len(products)} products "
            f"({total_production} total production)"
        )
        return total_production, products
