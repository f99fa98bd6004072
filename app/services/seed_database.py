"""
Database seeding service for loading reference data from CSV files.

Seeds the global emission factor library (fuel, grid electricity and CBAM
default values) and the Combined Nomenclature registry.

Usage:
    from app.services.seed_database import DatabaseSeeder

    async with DatabaseSeeder() as seeder:
        await seeder.seed_all(clear_existing=True)
"""

import csv
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories import CNCodeRepository, EmissionFactorRepository
from app.database.session_manager.db_session import Database
from app.utils.constants import EmissionFactorType

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "reference_data"


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def _optional_decimal(value: Optional[str]) -> Optional[Decimal]:
    value = _optional(value)
    return Decimal(value) if value is not None else None


class DatabaseSeeder:
    """Service for seeding the reference tables from CSV files."""

    def __init__(
        self,
        session: AsyncSession | None = None,
        data_dir: str | Path = DEFAULT_DATA_DIR,
    ):
        """
        Initialize the database seeder.

        Args:
            session: Optional async database session. If not provided, will create one.
            data_dir: Directory containing CSV files (default: app/reference_data)
        """
        self._session = session
        self._external_session = session is not None
        self.data_dir = Path(data_dir)

        if not self.data_dir.exists():
            raise ValueError(f"Data directory not found: {self.data_dir}")

    async def __aenter__(self):
        if not self._external_session:
            db = Database()
            self._session = await db.__aenter__()
            self._db_context = db
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if not self._external_session and hasattr(self, "_db_context"):
            await self._db_context.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def session(self) -> AsyncSession:
        """Get the database session."""
        if not self._session:
            raise RuntimeError("Session not initialized. Use as context manager.")
        return self._session

    async def seed_all(self, clear_existing: bool = False) -> dict[str, Any]:
        """
        Seed all reference data from CSV files.

        Tables that already hold rows are left alone unless clear_existing
        is set.

        Args:
            clear_existing: If True, clear existing reference data before seeding

        Returns:
            Dictionary with seeding statistics
        """
        logger.info("Starting database seeding")

        stats = {
            "emission_factors": 0,
            "fuel_factors": 0,
            "electricity_factors": 0,
            "default_factors": 0,
            "cn_codes": 0,
            "errors": [],
        }

        try:
            if clear_existing:
                await self._clear_existing_data()

            factor_counts = await self.seed_emission_factors(stats["errors"])
            stats.update(factor_counts)
            stats["emission_factors"] = sum(factor_counts.values())
            stats["cn_codes"] = await self.seed_cn_codes(stats["errors"])

            await self.session.commit()

            logger.info(f"Database seeding completed: {stats}")
            return stats

        except Exception as e:
            logger.error(f"Error during database seeding: {e}", exc_info=True)
            await self.session.rollback()
            raise

    async def _clear_existing_data(self):
        """Clear global reference data. Organisation-scoped factors are kept."""
        logger.info("Clearing existing reference data")

        await self.session.execute(
            text("DELETE FROM emission_factors WHERE organisation_id IS NULL")
        )
        await self.session.execute(text("DELETE FROM cn_codes"))

        await self.session.commit()
        logger.info("Existing reference data cleared")

    async def seed_emission_factors(self, errors: Optional[list] = None) -> dict[str, int]:
        """
        Load global emission factors from emission_factors.csv.

        Returns:
            Number of factors created per type (fuel_factors, electricity_factors,
            default_factors)
        """
        counts = {"fuel_factors": 0, "electricity_factors": 0, "default_factors": 0}
        csv_file = self.data_dir / "emission_factors.csv"
        if not csv_file.exists():
            logger.warning(f"File not found: {csv_file}")
            return counts

        repo = EmissionFactorRepository(self.session)
        existing = await repo.count({"organisation_id": None})
        if existing:
            logger.info(f"Global emission factors already seeded ({existing} records)")
            return counts

        logger.info(f"Loading emission factors from {csv_file}")

        with open(csv_file, "r", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                try:
                    factor_type = EmissionFactorType(row["type"].strip())
                    year = _optional(row.get("year"))

                    await repo.create(
                        type=factor_type.value,
                        name=row["name"].strip(),
                        code=_optional(row.get("code")),
                        category=_optional(row.get("category")),
                        cn_code=_optional(row.get("cn_code")),
                        emission_factor=Decimal(row["emission_factor"]),
                        unit=row["unit"].strip(),
                        source_unit=_optional(row.get("source_unit")),
                        country_code=_optional(row.get("country_code")),
                        year=int(year) if year else None,
                        source=_optional(row.get("source")),
                        is_default=True,
                        is_active=True,
                    )
                    counts[f"{factor_type.value}_factors"] += 1

                except (KeyError, ValueError, InvalidOperation) as e:
                    logger.warning(f"Failed to create emission factor from row {row}: {e}")
                    if errors is not None:
                        errors.append(f"emission_factors: {row.get('name')}: {e}")
                    continue

        logger.info(
            f"Created {counts['fuel_factors']} fuel factors, "
            f"{counts['electricity_factors']} electricity factors, "
            f"{counts['default_factors']} default factors"
        )
        return counts

    async def seed_cn_codes(self, errors: Optional[list] = None) -> int:
        """
        Load the CN code registry from cn_codes.csv.

        Returns:
            Number of CN codes created
        """
        csv_file = self.data_dir / "cn_codes.csv"
        if not csv_file.exists():
            logger.warning(f"File not found: {csv_file}")
            return 0

        repo = CNCodeRepository(self.session)
        existing = await repo.count()
        if existing:
            logger.info(f"CN codes already seeded ({existing} records)")
            return 0

        logger.info(f"Loading CN codes from {csv_file}")
        items = []

        with open(csv_file, "r", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                try:
                    code = row["code"].strip()
                    if len(code) != 8 or not code.isdigit():
                        raise ValueError(f"invalid CN code {code!r}")

                    items.append(
                        {
                            "code": code,
                            "description": row["description"].strip(),
                            "category": row["category"].strip(),
                            "cbam_applicable": True,
                            "default_emission_factor": _optional_decimal(
                                row.get("default_emission_factor")
                            ),
                        }
                    )

                except (KeyError, ValueError, InvalidOperation) as e:
                    logger.warning(f"Failed to create CN code from row {row}: {e}")
                    if errors is not None:
                        errors.append(f"cn_codes: {row.get('code')}: {e}")
                    continue

        created = await repo.bulk_create(items)
        logger.info(f"Created {len(created)} CN codes")
        return len(created)
