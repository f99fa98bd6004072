"""
Factories for reference entities following kkb_fastapi pattern.
"""
import uuid
from datetime import date, datetime
from decimal import Decimal

import factory

from app.database.schemas import (
    CNCodeDBModel,
    FacilityDBModel,
    OrganisationDBModel,
    ProductDBModel,
    ReportingPeriodDBModel,
)
from app.test.factory.base_factory import AsyncSQLAlchemyFactory
from app.test.factory.create_async_session import async_session
from app.utils.constants import OrganisationType


class OrganisationFactory(AsyncSQLAlchemyFactory):
    """Factory for creating Organisation test instances."""

    class Meta:
        model = OrganisationDBModel
        sqlalchemy_session = async_session
        sqlalchemy_session_persistence = "commit"

    id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Test Wire Industries {n}")
    type = OrganisationType.NON_EU_PRODUCER.value
    identification_number = None
    street = "Plot 12, MIDC Industrial Area"
    city = "Nagpur"
    postal_code = "440016"
    country = "India"
    country_code = "IN"
    created_at = factory.LazyFunction(datetime.utcnow)
    updated_at = factory.LazyFunction(datetime.utcnow)


class FacilityFactory(AsyncSQLAlchemyFactory):
    """Factory for creating Facility test instances."""

    class Meta:
        model = FacilityDBModel
        sqlalchemy_session = async_session
        sqlalchemy_session_persistence = "commit"

    id = factory.LazyFunction(uuid.uuid4)
    organisation_id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Wire Rod Mill {n}")
    street = "Plot 12, MIDC Industrial Area"
    city = "Nagpur"
    postal_code = "440016"
    country_code = "IN"
    is_active = True
    created_at = factory.LazyFunction(datetime.utcnow)
    updated_at = factory.LazyFunction(datetime.utcnow)


class ReportingPeriodFactory(AsyncSQLAlchemyFactory):
    """Factory for creating ReportingPeriod test instances (Q1 2024)."""

    class Meta:
        model = ReportingPeriodDBModel
        sqlalchemy_session = async_session
        sqlalchemy_session_persistence = "commit"

    id = factory.LazyFunction(uuid.uuid4)
    organisation_id = factory.LazyFunction(uuid.uuid4)
    year = 2024
    quarter = "Q1"
    start_date = date(2024, 1, 1)
    end_date = date(2024, 3, 31)
    status = "draft"
    created_at = factory.LazyFunction(datetime.utcnow)
    updated_at = factory.LazyFunction(datetime.utcnow)


class ProductFactory(AsyncSQLAlchemyFactory):
    """Factory for creating Product test instances."""

    class Meta:
        model = ProductDBModel
        sqlalchemy_session = async_session
        sqlalchemy_session_persistence = "commit"

    id = factory.LazyFunction(uuid.uuid4)
    organisation_id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Steel Wire Rod {n}")
    cn_code = "72139110"
    unit = "tonnes"
    is_active = True
    created_at = factory.LazyFunction(datetime.utcnow)
    updated_at = factory.LazyFunction(datetime.utcnow)


class CNCodeFactory(AsyncSQLAlchemyFactory):
    """Factory for creating CN code registry entries."""

    class Meta:
        model = CNCodeDBModel
        sqlalchemy_session = async_session
        sqlalchemy_session_persistence = "commit"

    id = factory.LazyFunction(uuid.uuid4)
    code = "72139110"
    description = "Bars and rods, hot-rolled, circular cross-section, diameter < 14mm"
    category = "iron_steel"
    cbam_applicable = True
    default_emission_factor = Decimal("2.302")
    created_at = factory.LazyFunction(datetime.utcnow)
