"""create_reference_tables

Revision ID: 3f1a7c2e9b10
Revises:
Create Date: 2026-03-01 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3f1a7c2e9b10"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "organisations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "name", sa.String(length=200), nullable=False, comment="Legal name of the declarant"
        ),
        sa.Column(
            "type",
            sa.String(length=50),
            nullable=False,
            comment="Organisation type (eu_importer, non_eu_producer)",
        ),
        sa.Column(
            "identification_number",
            sa.String(length=100),
            nullable=True,
            comment="EORI or other declarant identification number",
        ),
        sa.Column("street", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("postal_code", sa.String(length=20), nullable=True),
        sa.Column("country", sa.String(length=100), nullable=True),
        sa.Column(
            "country_code",
            sa.String(length=2),
            nullable=True,
            comment="ISO 3166-1 alpha-2 country code",
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        comment="CBAM declarant organisations",
    )

    op.create_table(
        "facilities",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False, comment="Installation name"),
        sa.Column("street", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("postal_code", sa.String(length=20), nullable=True),
        sa.Column(
            "country_code",
            sa.String(length=2),
            nullable=True,
            comment="Country of the installation, used for grid factor lookup",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organisation_id"], ["organisations.id"]),
        sa.PrimaryKeyConstraint("id"),
        comment="Production installations",
    )
    op.create_index(
        op.f("ix_facilities_organisation_id"), "facilities", ["organisation_id"], unique=False
    )

    op.create_table(
        "reporting_periods",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False, comment="Reporting year"),
        sa.Column(
            "quarter", sa.String(length=2), nullable=False, comment="Reporting quarter (Q1..Q4)"
        ),
        sa.Column("start_date", sa.Date(), nullable=True, comment="First day of the quarter"),
        sa.Column("end_date", sa.Date(), nullable=True, comment="Last day of the quarter"),
        sa.Column("status", sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organisation_id"], ["organisations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "organisation_id", "year", "quarter", name="uq_reporting_periods_org_quarter"
        ),
        comment="Quarterly reporting periods",
    )
    op.create_index(
        op.f("ix_reporting_periods_organisation_id"),
        "reporting_periods",
        ["organisation_id"],
        unique=False,
    )

    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False, comment="Product name"),
        sa.Column(
            "cn_code",
            sa.String(length=20),
            nullable=True,
            comment="8-digit Combined Nomenclature code",
        ),
        sa.Column("unit", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organisation_id"], ["organisations.id"]),
        sa.PrimaryKeyConstraint("id"),
        comment="Products declared under CBAM",
    )
    op.create_index(
        op.f("ix_products_organisation_id"), "products", ["organisation_id"], unique=False
    )
    op.create_index(
        "ix_products_org_active", "products", ["organisation_id", "is_active"], unique=False
    )

    op.create_table(
        "cn_codes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("code", sa.String(length=8), nullable=False, comment="8-digit CN code"),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column(
            "category",
            sa.String(length=50),
            nullable=False,
            comment="CBAM goods category (iron_steel, aluminium, cement, fertilizers, hydrogen, electricity)",
        ),
        sa.Column("cbam_applicable", sa.Boolean(), nullable=False),
        sa.Column(
            "default_emission_factor",
            sa.Numeric(precision=16, scale=8),
            nullable=True,
            comment="Combined CBAM default value in tCO2e/t",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
        comment="Combined Nomenclature registry",
    )


def downgrade() -> None:
    op.drop_table("cn_codes")
    op.drop_index("ix_products_org_active", table_name="products")
    op.drop_index(op.f("ix_products_organisation_id"), table_name="products")
    op.drop_table("products")
    op.drop_index(op.f("ix_reporting_periods_organisation_id"), table_name="reporting_periods")
    op.drop_table("reporting_periods")
    op.drop_index(op.f("ix_facilities_organisation_id"), table_name="facilities")
    op.drop_table("facilities")
    op.drop_table("organisations")
