"""
Emission factor resolution.

Resolves the effective (direct, indirect) factor pair for a fuel,
electricity or precursor record using a fixed priority chain:

    supplier declaration -> inline factor -> reference lookup
    -> category / CN code default -> zero (unresolved)

Reference factors are indexed once per calculation run by FactorIndex;
lookups are exact name/code first, then substring, then rapidfuzz
token_sort_ratio above the configured threshold.
"""

import logging
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Tuple
from uuid import UUID

from rapidfuzz import fuzz, process

from app.pydantic_models.activity import (
    ElectricityActivity,
    FuelActivity,
    PrecursorActivity,
)
from app.pydantic_models.calculation import ResolvedFactor
from app.pydantic_models.emission_factor import (
    EmissionFactorPydModel,
    SupplierDeclarationPydModel,
)
from app.utils.constants import (
    DEFAULT_CAPTIVE_EMISSION_FACTOR,
    DEFAULT_DIRECT_SHARE,
    DEFAULT_GRID_EMISSION_FACTOR,
    DEFAULT_INDIRECT_SHARE,
    DeclarationStatus,
    EmissionFactorType,
    FactorProvenance,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
EXACT_CONFIDENCE = Decimal("1.0")
SUBSTRING_CONFIDENCE = Decimal("0.9")

FactorMatch = Tuple[EmissionFactorPydModel, Decimal]


def normalize_name(name: Optional[str]) -> str:
    """Lower-case and collapse whitespace."""
    return " ".join((name or "").lower().split())


def _is_set(value: Optional[Decimal]) -> bool:
    # Zero factors are treated as missing, as data entry uses 0 for blank
    return value is not None and value != 0


def split_combined_factor(combined: Decimal) -> Tuple[Decimal, Decimal]:
    """Split a combined default factor 80% direct / 20% indirect."""
    return combined * DEFAULT_DIRECT_SHARE, combined * DEFAULT_INDIRECT_SHARE


class FactorIndex:
    """
    Pre-indexed active emission factors for one calculation run.

    Organisation-scoped factors shadow global factors with the same key.
    """

    DEFAULT_THRESHOLD = 90

    def __init__(
        self,
        factors: Iterable[EmissionFactorPydModel],
        fuzzy_threshold: int = DEFAULT_THRESHOLD,
    ):
        # Stable sort puts organisation-scoped factors first so they win every key
        active = sorted(
            (f for f in factors if f.is_active),
            key=lambda f: f.organisation_id is None,
        )
        self.fuzzy_threshold = fuzzy_threshold
        self._by_id = {f.id: f for f in active}

        self._by_type: dict[EmissionFactorType, tuple[EmissionFactorPydModel, ...]] = {
            factor_type: tuple(f for f in active if f.type == factor_type)
            for factor_type in EmissionFactorType
        }

        self._by_name: dict[Tuple[EmissionFactorType, str], EmissionFactorPydModel] = {}
        self._by_country: dict[Tuple[EmissionFactorType, str], EmissionFactorPydModel] = {}
        for factor in active:
            self._by_name.setdefault((factor.type, normalize_name(factor.name)), factor)
            if factor.code:
                self._by_name.setdefault((factor.type, normalize_name(factor.code)), factor)
            if factor.country_code:
                self._by_country.setdefault(
                    (factor.type, factor.country_code.upper()), factor
                )

    def __len__(self):
        return len(self._by_id)

    def get(self, factor_id: Optional[UUID]) -> Optional[EmissionFactorPydModel]:
        if factor_id is None:
            return None
        return self._by_id.get(factor_id)

    def lookup(
        self, factor_type: EmissionFactorType, name: Optional[str]
    ) -> Optional[FactorMatch]:
        """
        Find a factor of one type by name.

        Args:
            factor_type: Factor type to search within
            name: Fuel, material or source name

        Returns:
            Tuple of (factor, confidence) if matched, None otherwise
        """
        key = normalize_name(name)
        if not key:
            return None

        factor = self._by_name.get((factor_type, key))
        if factor is not None:
            return factor, EXACT_CONFIDENCE

        candidates = self._by_type[factor_type]
        for factor in candidates:
            factor_key = normalize_name(factor.name)
            if key in factor_key or factor_key in key:
                logger.debug(f"Substring matched '{name}' to '{factor.name}'")
                return factor, SUBSTRING_CONFIDENCE

        choices = {normalize_name(f.name): f for f in reversed(candidates)}
        if not choices:
            return None

        result = process.extractOne(
            key,
            list(choices.keys()),
            scorer=fuzz.token_sort_ratio,
            score_cutoff=self.fuzzy_threshold,
        )
        if result is None:
            logger.debug(f"No {factor_type.value} factor matched '{name}'")
            return None

        matched_name, score, _ = result
        logger.info(
            f"Fuzzy matched '{name}' to '{matched_name}' with {score:.0f}% confidence"
        )
        return choices[matched_name], Decimal(str(round(score, 2))) / Decimal("100")

    def by_country(
        self, factor_type: EmissionFactorType, country_code: Optional[str]
    ) -> Optional[EmissionFactorPydModel]:
        if not country_code:
            return None
        return self._by_country.get((factor_type, country_code.upper()))

    def default_for(
        self, name: Optional[str], cn_code: Optional[str]
    ) -> Optional[FactorMatch]:
        """
        Find a DEFAULT-type factor by material name or CN code prefix.

        The longest matching CN code prefix wins.
        """
        match = self.lookup(EmissionFactorType.DEFAULT, name)
        if match is not None:
            return match

        if not cn_code:
            return None
        by_prefix = [
            f
            for f in self._by_type[EmissionFactorType.DEFAULT]
            if f.cn_code and cn_code.startswith(f.cn_code)
        ]
        if not by_prefix:
            return None
        return max(by_prefix, key=lambda f: len(f.cn_code)), EXACT_CONFIDENCE


class EmissionFactorResolver:
    """
    Resolves effective emission factors for activity records.

    Never raises: anything that cannot be resolved comes back as a zero
    factor with provenance UNRESOLVED so the calculation still produces a
    row and validation can flag it.
    """

    def __init__(
        self,
        factor_index: FactorIndex,
        declarations: Iterable[SupplierDeclarationPydModel] = (),
        cn_code_defaults: Optional[Mapping[str, Decimal]] = None,
    ):
        """
        Initialize resolver.

        Args:
            factor_index: Indexed reference factors for the run
            declarations: Supplier declarations for the reporting period
            cn_code_defaults: CN code -> combined default factor from the registry
        """
        self.factor_index = factor_index
        # Later declarations for the same product replace earlier ones
        self._declarations = {
            normalize_name(d.product_name): d
            for d in declarations
            if d.status == DeclarationStatus.VERIFIED
        }
        self._cn_code_defaults = dict(cn_code_defaults or {})

    @staticmethod
    def _unresolved() -> ResolvedFactor:
        return ResolvedFactor(
            direct=ZERO, indirect=ZERO, provenance=FactorProvenance.UNRESOLVED,
            confidence=ZERO,
        )

    @staticmethod
    def _from_reference(
        match: FactorMatch, provenance: FactorProvenance = FactorProvenance.REFERENCE
    ) -> ResolvedFactor:
        factor, confidence = match
        return ResolvedFactor(
            direct=factor.emission_factor,
            indirect=ZERO,
            provenance=provenance,
            factor_id=factor.id,
            matched_name=factor.name,
            confidence=confidence,
        )

    @staticmethod
    def _split_reference(
        match: FactorMatch, provenance: FactorProvenance
    ) -> ResolvedFactor:
        factor, confidence = match
        if factor.direct_emission_factor is not None or factor.indirect_emission_factor is not None:
            return ResolvedFactor(
                direct=factor.direct_emission_factor or ZERO,
                indirect=factor.indirect_emission_factor or ZERO,
                provenance=provenance,
                factor_id=factor.id,
                matched_name=factor.name,
                confidence=confidence,
            )

        direct, indirect = split_combined_factor(factor.emission_factor)
        return ResolvedFactor(
            direct=direct,
            indirect=indirect,
            provenance=(
                FactorProvenance.CATEGORY_DEFAULT_SPLIT
                if provenance == FactorProvenance.CATEGORY_DEFAULT
                else provenance
            ),
            factor_id=factor.id,
            matched_name=factor.name,
            confidence=confidence,
            is_estimated=True,
        )

    def resolve_fuel(self, record: FuelActivity) -> ResolvedFactor:
        """Resolve the Scope 1 factor of a fuel record (direct only)."""
        if _is_set(record.emission_factor):
            return ResolvedFactor(
                direct=record.emission_factor, provenance=FactorProvenance.INLINE
            )

        factor = self.factor_index.get(record.fuel_type_id)
        if factor is not None:
            return self._from_reference((factor, EXACT_CONFIDENCE))

        match = self.factor_index.lookup(EmissionFactorType.FUEL, record.fuel_name)
        if match is not None:
            return self._from_reference(match)

        logger.warning(f"No emission factor resolved for fuel '{record.fuel_name}'")
        return self._unresolved()

    def resolve_grid(
        self, record: ElectricityActivity, country_code: Optional[str] = None
    ) -> ResolvedFactor:
        """Resolve the grid electricity factor in tCO2e/MWh."""
        if _is_set(record.grid_emission_factor):
            return ResolvedFactor(
                direct=record.grid_emission_factor, provenance=FactorProvenance.INLINE
            )

        factor = self.factor_index.by_country(EmissionFactorType.ELECTRICITY, country_code)
        if factor is not None:
            return self._from_reference((factor, EXACT_CONFIDENCE))

        return ResolvedFactor(
            direct=DEFAULT_GRID_EMISSION_FACTOR, provenance=FactorProvenance.FIXED_DEFAULT
        )

    def resolve_captive(self, record: ElectricityActivity) -> ResolvedFactor:
        """Resolve the captive/DG generation factor in tCO2e/MWh."""
        if _is_set(record.captive_emission_factor):
            return ResolvedFactor(
                direct=record.captive_emission_factor,
                provenance=FactorProvenance.INLINE,
            )
        return ResolvedFactor(
            direct=DEFAULT_CAPTIVE_EMISSION_FACTOR,
            provenance=FactorProvenance.FIXED_DEFAULT,
        )

    @staticmethod
    def resolve_renewable() -> ResolvedFactor:
        """Renewable electricity always carries a zero factor."""
        return ResolvedFactor(direct=ZERO, provenance=FactorProvenance.RENEWABLE)

    def resolve_precursor(self, record: PrecursorActivity) -> ResolvedFactor:
        """Resolve the (direct, indirect) factor pair of a precursor record."""
        declaration = self._declarations.get(normalize_name(record.material_name))
        if declaration is not None:
            return ResolvedFactor(
                direct=declaration.direct_emission_factor,
                indirect=declaration.indirect_emission_factor,
                provenance=FactorProvenance.SUPPLIER_DECLARATION,
                factor_id=declaration.id,
                matched_name=declaration.product_name,
            )

        if _is_set(record.direct_emission_factor) or _is_set(
            record.indirect_emission_factor
        ):
            return ResolvedFactor(
                direct=record.direct_emission_factor or ZERO,
                indirect=record.indirect_emission_factor or ZERO,
                provenance=FactorProvenance.INLINE,
            )

        match = self.factor_index.lookup(EmissionFactorType.PRECURSOR, record.material_name)
        if match is not None:
            return self._split_reference(match, FactorProvenance.REFERENCE)

        match = self.factor_index.default_for(record.material_name, record.cn_code)
        if match is not None:
            return self._split_reference(match, FactorProvenance.CATEGORY_DEFAULT)

        combined = self._cn_code_default(record.cn_code)
        if combined is not None:
            direct, indirect = split_combined_factor(combined)
            return ResolvedFactor(
                direct=direct,
                indirect=indirect,
                provenance=FactorProvenance.CATEGORY_DEFAULT_SPLIT,
                matched_name=record.cn_code,
                is_estimated=True,
            )

        logger.warning(
            f"No emission factor resolved for precursor '{record.material_name}' "
            f"from {record.supplier_name}"
        )
        return self._unresolved()

    def _cn_code_default(self, cn_code: Optional[str]) -> Optional[Decimal]:
        if not cn_code:
            return None
        prefixes = [code for code in self._cn_code_defaults if cn_code.startswith(code)]
        if not prefixes:
            return None
        return self._cn_code_defaults[max(prefixes, key=len)]
