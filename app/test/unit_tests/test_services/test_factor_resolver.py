"""
Service tests for emission factor resolution following kkb_fastapi pattern.
"""

import uuid
from decimal import Decimal

import pytest

from app.pydantic_models.activity import (
    ElectricityActivity,
    FuelActivity,
    PrecursorActivity,
)
from app.pydantic_models.emission_factor import (
    EmissionFactorPydModel,
    SupplierDeclarationPydModel,
)
from app.services.calculators.factor_resolver import (
    EmissionFactorResolver,
    FactorIndex,
    normalize_name,
    split_combined_factor,
)
from app.utils.constants import DeclarationStatus, EmissionFactorType, FactorProvenance

ORG_ID = uuid.uuid4()
PERIOD_ID = uuid.uuid4()


def make_factor(**overrides) -> EmissionFactorPydModel:
    data = {
        "id": uuid.uuid4(),
        "type": EmissionFactorType.FUEL,
        "name": "Natural Gas",
        "emission_factor": Decimal("0.00202"),
        "unit": "tCO2e/m3",
    }
    data.update(overrides)
    return EmissionFactorPydModel(**data)


def make_precursor(**overrides) -> PrecursorActivity:
    data = {
        "id": uuid.uuid4(),
        "organisation_id": ORG_ID,
        "reporting_period_id": PERIOD_ID,
        "month": 1,
        "year": 2024,
        "supplier_name": "Tata Steel",
        "material_name": "Pig Iron",
        "quantity": Decimal("1000"),
    }
    data.update(overrides)
    return PrecursorActivity(**data)


def make_declaration(**overrides) -> SupplierDeclarationPydModel:
    data = {
        "id": uuid.uuid4(),
        "supplier_id": uuid.uuid4(),
        "reporting_period_id": PERIOD_ID,
        "product_name": "Pig Iron",
        "direct_emission_factor": Decimal("1.2"),
        "indirect_emission_factor": Decimal("0.1"),
        "status": DeclarationStatus.VERIFIED,
    }
    data.update(overrides)
    return SupplierDeclarationPydModel(**data)


def make_electricity(**overrides) -> ElectricityActivity:
    data = {
        "id": uuid.uuid4(),
        "organisation_id": ORG_ID,
        "reporting_period_id": PERIOD_ID,
        "month": 1,
        "year": 2024,
        "grid_electricity": Decimal("100000"),
    }
    data.update(overrides)
    return ElectricityActivity(**data)


def make_fuel(**overrides) -> FuelActivity:
    data = {
        "id": uuid.uuid4(),
        "organisation_id": ORG_ID,
        "reporting_period_id": PERIOD_ID,
        "month": 1,
        "year": 2024,
        "fuel_name": "Natural Gas",
        "quantity": Decimal("10000"),
        "unit": "m3",
    }
    data.update(overrides)
    return FuelActivity(**data)


def test_normalize_name():
    assert normalize_name("  Natural   GAS ") == "natural gas"
    assert normalize_name(None) == ""


def test_split_combined_factor():
    direct, indirect = split_combined_factor(Decimal("1.808"))
    assert direct == Decimal("1.4464")
    assert indirect == Decimal("0.3616")


class TestFactorIndex:
    def test_exact_name_and_code_lookup(self):
        factor = make_factor(code="NAT_GAS_M3")
        index = FactorIndex([factor])

        assert index.lookup(EmissionFactorType.FUEL, "natural gas") == (factor, Decimal("1.0"))
        assert index.lookup(EmissionFactorType.FUEL, "nat_gas_m3")[0] is factor

    def test_substring_lookup_has_lower_confidence(self):
        factor = make_factor(name="Natural Gas (per m3)")
        index = FactorIndex([factor])

        matched, confidence = index.lookup(EmissionFactorType.FUEL, "Natural Gas")
        assert matched is factor
        assert confidence == Decimal("0.9")

    def test_fuzzy_lookup_uses_token_sort_ratio(self):
        factor = make_factor(name="Natural Gas")
        index = FactorIndex([make_factor(name="Diesel Oil"), factor])

        matched, confidence = index.lookup(EmissionFactorType.FUEL, "Gas Natural")
        assert matched is factor
        assert confidence == Decimal("1")

    def test_lookup_below_threshold_returns_none(self):
        index = FactorIndex([make_factor(name="Natural Gas")])
        assert index.lookup(EmissionFactorType.FUEL, "Coal Tar") is None
        assert index.lookup(EmissionFactorType.FUEL, "") is None

    def test_lookup_is_scoped_to_factor_type(self):
        index = FactorIndex([make_factor(type=EmissionFactorType.PRECURSOR, name="Pig Iron")])
        assert index.lookup(EmissionFactorType.FUEL, "Pig Iron") is None

    def test_inactive_factors_are_ignored(self):
        index = FactorIndex([make_factor(is_active=False)])
        assert len(index) == 0
        assert index.lookup(EmissionFactorType.FUEL, "Natural Gas") is None

    def test_organisation_factor_shadows_global(self):
        global_factor = make_factor(name="Diesel Oil", emission_factor=Decimal("3.169"))
        own_factor = make_factor(
            name="Diesel Oil", emission_factor=Decimal("3.1"), organisation_id=ORG_ID
        )
        index = FactorIndex([global_factor, own_factor])

        matched, _ = index.lookup(EmissionFactorType.FUEL, "Diesel Oil")
        assert matched is own_factor

    def test_default_for_prefers_longest_cn_prefix(self):
        broad = make_factor(
            type=EmissionFactorType.DEFAULT, name="Iron Default", cn_code="72",
            emission_factor=Decimal("2.0"),
        )
        narrow = make_factor(
            type=EmissionFactorType.DEFAULT, name="Pig Iron Default", cn_code="7201",
            emission_factor=Decimal("1.808"),
        )
        index = FactorIndex([broad, narrow])

        matched, _ = index.default_for("Mystery Alloy", "72011000")
        assert matched is narrow
        assert index.default_for("Mystery Alloy", None) is None


class TestPrecursorResolution:
    def test_verified_declaration_wins_over_inline(self):
        resolver = EmissionFactorResolver(FactorIndex([]), declarations=[make_declaration()])
        record = make_precursor(
            direct_emission_factor=Decimal("1.5"), indirect_emission_factor=Decimal("0.3")
        )

        factor = resolver.resolve_precursor(record)

        assert factor.provenance == FactorProvenance.SUPPLIER_DECLARATION
        assert factor.direct == Decimal("1.2")
        assert factor.indirect == Decimal("0.1")

    def test_unverified_declaration_is_ignored(self):
        resolver = EmissionFactorResolver(
            FactorIndex([]),
            declarations=[make_declaration(status=DeclarationStatus.PENDING)],
        )
        record = make_precursor(
            direct_emission_factor=Decimal("1.5"), indirect_emission_factor=Decimal("0.3")
        )

        factor = resolver.resolve_precursor(record)

        assert factor.provenance == FactorProvenance.INLINE
        assert factor.total == Decimal("1.8")

    def test_zero_inline_factors_fall_through_to_reference(self):
        reference = make_factor(
            type=EmissionFactorType.PRECURSOR,
            name="Pig Iron",
            emission_factor=Decimal("2.0"),
            direct_emission_factor=Decimal("1.7"),
            indirect_emission_factor=Decimal("0.3"),
        )
        resolver = EmissionFactorResolver(FactorIndex([reference]))
        record = make_precursor(
            direct_emission_factor=Decimal("0"), indirect_emission_factor=Decimal("0")
        )

        factor = resolver.resolve_precursor(record)

        assert factor.provenance == FactorProvenance.REFERENCE
        assert (factor.direct, factor.indirect) == (Decimal("1.7"), Decimal("0.3"))
        assert factor.factor_id == reference.id
        assert not factor.is_estimated

    def test_combined_reference_is_split_and_flagged(self):
        reference = make_factor(
            type=EmissionFactorType.PRECURSOR, name="Pig Iron", emission_factor=Decimal("2.0")
        )
        resolver = EmissionFactorResolver(FactorIndex([reference]))

        factor = resolver.resolve_precursor(make_precursor())

        assert factor.provenance == FactorProvenance.REFERENCE
        assert (factor.direct, factor.indirect) == (Decimal("1.6"), Decimal("0.4"))
        assert factor.is_estimated

    def test_category_default_by_cn_code(self):
        default = make_factor(
            type=EmissionFactorType.DEFAULT,
            name="Pig Iron Default",
            cn_code="7201",
            emission_factor=Decimal("1.808"),
        )
        resolver = EmissionFactorResolver(FactorIndex([default]))

        factor = resolver.resolve_precursor(
            make_precursor(material_name="Mystery Alloy", cn_code="72011000")
        )

        assert factor.provenance == FactorProvenance.CATEGORY_DEFAULT_SPLIT
        assert factor.direct == Decimal("1.4464")
        assert factor.indirect == Decimal("0.3616")
        assert factor.is_estimated

    def test_cn_registry_default_is_last_resort(self):
        resolver = EmissionFactorResolver(
            FactorIndex([]), cn_code_defaults={"72011000": Decimal("2.0")}
        )

        factor = resolver.resolve_precursor(
            make_precursor(material_name="Mystery Alloy", cn_code="72011000")
        )

        assert factor.provenance == FactorProvenance.CATEGORY_DEFAULT_SPLIT
        assert (factor.direct, factor.indirect) == (Decimal("1.6"), Decimal("0.4"))

    def test_unresolved_precursor_is_zero(self):
        resolver = EmissionFactorResolver(FactorIndex([]))

        factor = resolver.resolve_precursor(make_precursor(material_name="Mystery Alloy"))

        assert factor.provenance == FactorProvenance.UNRESOLVED
        assert factor.total == Decimal("0")
        assert factor.confidence == Decimal("0")


class TestEnergyResolution:
    def test_fuel_inline_factor(self):
        resolver = EmissionFactorResolver(FactorIndex([]))
        factor = resolver.resolve_fuel(make_fuel(emission_factor=Decimal("0.00202")))

        assert factor.provenance == FactorProvenance.INLINE
        assert factor.direct == Decimal("0.00202")
        assert factor.indirect == Decimal("0")

    def test_fuel_by_fuel_type_id(self):
        reference = make_factor(name="Diesel Oil", emission_factor=Decimal("3.169"))
        resolver = EmissionFactorResolver(FactorIndex([reference]))

        factor = resolver.resolve_fuel(
            make_fuel(fuel_name="HSD", fuel_type_id=reference.id, unit="tonnes")
        )

        assert factor.provenance == FactorProvenance.REFERENCE
        assert factor.direct == Decimal("3.169")

    def test_unmatched_fuel_is_unresolved(self):
        resolver = EmissionFactorResolver(FactorIndex([]))
        factor = resolver.resolve_fuel(make_fuel(fuel_name="Mystery Fuel"))
        assert factor.provenance == FactorProvenance.UNRESOLVED
        assert factor.direct == Decimal("0")

    @pytest.mark.parametrize(
        "country, expected, provenance",
        [
            ("IN", Decimal("0.716"), FactorProvenance.REFERENCE),
            ("de", Decimal("0.38"), FactorProvenance.REFERENCE),
            ("ZZ", Decimal("0.716"), FactorProvenance.FIXED_DEFAULT),
            (None, Decimal("0.716"), FactorProvenance.FIXED_DEFAULT),
        ],
    )
    def test_grid_factor_by_country(self, country, expected, provenance):
        index = FactorIndex(
            [
                make_factor(
                    type=EmissionFactorType.ELECTRICITY, name="India Grid Average",
                    emission_factor=Decimal("0.716"), unit="tCO2e/MWh", country_code="IN",
                ),
                make_factor(
                    type=EmissionFactorType.ELECTRICITY, name="Germany Grid Average",
                    emission_factor=Decimal("0.38"), unit="tCO2e/MWh", country_code="DE",
                ),
            ]
        )
        factor = EmissionFactorResolver(index).resolve_grid(make_electricity(), country)

        assert factor.direct == expected
        assert factor.provenance == provenance

    def test_inline_grid_factor_wins(self):
        resolver = EmissionFactorResolver(FactorIndex([]))
        factor = resolver.resolve_grid(
            make_electricity(grid_emission_factor=Decimal("0.5")), "IN"
        )
        assert factor.direct == Decimal("0.5")
        assert factor.provenance == FactorProvenance.INLINE

    def test_captive_factor(self):
        resolver = EmissionFactorResolver(FactorIndex([]))

        assert resolver.resolve_captive(make_electricity()).direct == Decimal("0.8")
        inline = resolver.resolve_captive(
            make_electricity(captive_emission_factor=Decimal("0.9"))
        )
        assert inline.direct == Decimal("0.9")
        assert inline.provenance == FactorProvenance.INLINE
