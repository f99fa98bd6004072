"""create_supplier_and_activity_tables

Revision ID: c5e9f0a17d42
Revises: 8d24b6e1c5a3
Create Date: 2026-03-01 09:02:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "c5e9f0a17d42"
down_revision = "8d24b6e1c5a3"
branch_labels = None
depends_on = None

ACTIVITY_TABLES = (
    "electricity_activities",
    "fuel_activities",
    "production_activities",
    "precursor_activities",
)


def _activity_envelope():
    """Columns shared by every activity table."""
    return [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("reporting_period_id", sa.Uuid(), nullable=False),
        sa.Column("facility_id", sa.Uuid(), nullable=True),
        sa.Column("month", sa.Integer(), nullable=False, comment="Calendar month (1..12)"),
        sa.Column("year", sa.Integer(), nullable=False, comment="Calendar year"),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organisation_id"], ["organisations.id"]),
        sa.ForeignKeyConstraint(["reporting_period_id"], ["reporting_periods.id"]),
        sa.ForeignKeyConstraint(["facility_id"], ["facilities.id"]),
        sa.PrimaryKeyConstraint("id"),
    ]


def _create_activity_indexes(table: str):
    for column in ("organisation_id", "reporting_period_id", "facility_id"):
        op.create_index(op.f(f"ix_{table}_{column}"), table, [column], unique=False)
    op.create_index(
        f"ix_{table}_org_period",
        table,
        ["organisation_id", "reporting_period_id"],
        unique=False,
    )


def upgrade() -> None:
    op.create_table(
        "suppliers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column(
            "country_code",
            sa.String(length=10),
            nullable=True,
            comment="Supplier country, ISO 3166-1 alpha-2",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organisation_id"], ["organisations.id"]),
        sa.PrimaryKeyConstraint("id"),
        comment="Precursor suppliers",
    )
    op.create_index(
        op.f("ix_suppliers_organisation_id"), "suppliers", ["organisation_id"], unique=False
    )

    op.create_table(
        "supplier_declarations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("supplier_id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("reporting_period_id", sa.Uuid(), nullable=False),
        sa.Column(
            "product_name",
            sa.String(length=200),
            nullable=False,
            comment="Declared product or material name",
        ),
        sa.Column("cn_code", sa.String(length=20), nullable=True),
        sa.Column(
            "direct_emission_factor",
            sa.Numeric(precision=16, scale=8),
            nullable=False,
            comment="Direct emissions in tCO2e/t",
        ),
        sa.Column(
            "indirect_emission_factor",
            sa.Numeric(precision=16, scale=8),
            nullable=False,
            comment="Indirect emissions in tCO2e/t",
        ),
        sa.Column(
            "status",
            sa.String(length=20),
            nullable=False,
            comment="Declaration status (draft, pending, verified, rejected)",
        ),
        sa.Column("verified_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"]),
        sa.ForeignKeyConstraint(["organisation_id"], ["organisations.id"]),
        sa.ForeignKeyConstraint(["reporting_period_id"], ["reporting_periods.id"]),
        sa.PrimaryKeyConstraint("id"),
        comment="Supplier emission declarations",
    )
    for column in ("supplier_id", "organisation_id", "reporting_period_id"):
        op.create_index(
            op.f(f"ix_supplier_declarations_{column}"),
            "supplier_declarations",
            [column],
            unique=False,
        )
    op.create_index(
        "ix_supplier_declarations_period_status",
        "supplier_declarations",
        ["reporting_period_id", "status"],
        unique=False,
    )

    op.create_table(
        "electricity_activities",
        *_activity_envelope(),
        sa.Column(
            "grid_electricity",
            sa.Numeric(precision=20, scale=4),
            nullable=False,
            comment="Grid electricity in kWh",
        ),
        sa.Column(
            "grid_emission_factor",
            sa.Numeric(precision=16, scale=8),
            nullable=True,
            comment="Grid factor in tCO2e/MWh",
        ),
        sa.Column(
            "renewable_electricity",
            sa.Numeric(precision=20, scale=4),
            nullable=False,
            comment="Renewable electricity in kWh, always zero emissions",
        ),
        sa.Column(
            "captive_electricity",
            sa.Numeric(precision=20, scale=4),
            nullable=False,
            comment="Captive or DG generation in kWh",
        ),
        sa.Column(
            "captive_emission_factor",
            sa.Numeric(precision=16, scale=8),
            nullable=True,
            comment="Captive factor in tCO2e/MWh",
        ),
        sa.Column(
            "captive_fuel_type",
            sa.String(length=100),
            nullable=True,
            comment="Fuel burnt for captive generation",
        ),
        comment="Electricity consumption activity data (Scope 2)",
    )

    op.create_table(
        "fuel_activities",
        *_activity_envelope(),
        sa.Column(
            "fuel_type_id",
            sa.Uuid(),
            nullable=True,
            comment="Reference fuel emission factor",
        ),
        sa.Column(
            "fuel_name", sa.String(length=200), nullable=False, comment="Fuel name as entered"
        ),
        sa.Column(
            "quantity",
            sa.Numeric(precision=20, scale=4),
            nullable=False,
            comment="Fuel quantity",
        ),
        sa.Column(
            "unit",
            sa.String(length=20),
            nullable=False,
            comment="Unit (tonnes, kg, litres, m3)",
        ),
        sa.Column(
            "emission_factor",
            sa.Numeric(precision=16, scale=8),
            nullable=True,
            comment="Inline factor in tCO2e per unit",
        ),
        sa.ForeignKeyConstraint(["fuel_type_id"], ["emission_factors.id"]),
        comment="Fuel combustion activity data (Scope 1)",
    )

    op.create_table(
        "production_activities",
        *_activity_envelope(),
        sa.Column("product_id", sa.Uuid(), nullable=True),
        sa.Column("product_name", sa.String(length=200), nullable=False),
        sa.Column("cn_code", sa.String(length=20), nullable=True),
        sa.Column("quantity_produced", sa.Numeric(precision=20, scale=4), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        comment="Production activity data",
    )
    op.create_index(
        op.f("ix_production_activities_product_id"),
        "production_activities",
        ["product_id"],
        unique=False,
    )

    op.create_table(
        "precursor_activities",
        *_activity_envelope(),
        sa.Column("supplier_id", sa.Uuid(), nullable=True),
        sa.Column("supplier_name", sa.String(length=200), nullable=False),
        sa.Column("material_name", sa.String(length=200), nullable=False),
        sa.Column("cn_code", sa.String(length=20), nullable=True),
        sa.Column("quantity", sa.Numeric(precision=20, scale=4), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=False),
        sa.Column(
            "direct_emission_factor",
            sa.Numeric(precision=16, scale=8),
            nullable=True,
            comment="Direct factor in tCO2e/t",
        ),
        sa.Column(
            "indirect_emission_factor",
            sa.Numeric(precision=16, scale=8),
            nullable=True,
            comment="Indirect factor in tCO2e/t",
        ),
        sa.Column(
            "emission_factor_source",
            sa.String(length=50),
            nullable=True,
            comment="Where the inline factors came from",
        ),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"]),
        comment="Purchased precursor activity data (Scope 3)",
    )
    op.create_index(
        op.f("ix_precursor_activities_supplier_id"),
        "precursor_activities",
        ["supplier_id"],
        unique=False,
    )

    for table in ACTIVITY_TABLES:
        _create_activity_indexes(table)


def downgrade() -> None:
    for table in ACTIVITY_TABLES:
        op.drop_index(f"ix_{table}_org_period", table_name=table)
        for column in ("organisation_id", "reporting_period_id", "facility_id"):
            op.drop_index(op.f(f"ix_{table}_{column}"), table_name=table)

    op.drop_index(op.f("ix_precursor_activities_supplier_id"), table_name="precursor_activities")
    op.drop_table("precursor_activities")
    op.drop_index(op.f("ix_production_activities_product_id"), table_name="production_activities")
    op.drop_table("production_activities")
    op.drop_table("fuel_activities")
    op.drop_table("electricity_activities")

    op.drop_index("ix_supplier_declarations_period_status", table_name="supplier_declarations")
    for column in ("supplier_id", "organisation_id", "reporting_period_id"):
        op.drop_index(
            op.f(f"ix_supplier_declarations_{column}"), table_name="supplier_declarations"
        )
    op.drop_table("supplier_declarations")
    op.drop_index(op.f("ix_suppliers_organisation_id"), table_name="suppliers")
    op.drop_table("suppliers")
