"""create_emission_factors_table

Revision ID: 8d24b6e1c5a3
Revises: 3f1a7c2e9b10
Create Date: 2026-03-01 09:01:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "8d24b6e1c5a3"
down_revision = "3f1a7c2e9b10"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "emission_factors",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "organisation_id",
            sa.Uuid(),
            nullable=True,
            comment="Owning organisation, NULL for global factors",
        ),
        sa.Column(
            "type",
            sa.String(length=20),
            nullable=False,
            comment="Factor type (fuel, electricity, precursor, default)",
        ),
        sa.Column(
            "name",
            sa.String(length=200),
            nullable=False,
            comment="Name used to match activity data (e.g., 'Natural Gas', 'India Grid')",
        ),
        sa.Column("code", sa.String(length=50), nullable=True, comment="Short lookup code"),
        sa.Column(
            "category", sa.String(length=50), nullable=True, comment="Goods or fuel category"
        ),
        sa.Column(
            "cn_code",
            sa.String(length=8),
            nullable=True,
            comment="CN code prefix a default factor applies to",
        ),
        sa.Column(
            "emission_factor",
            sa.Numeric(precision=16, scale=8),
            nullable=False,
            comment="Combined emission factor value (>= 0)",
        ),
        sa.Column(
            "direct_emission_factor",
            sa.Numeric(precision=16, scale=8),
            nullable=True,
            comment="Direct share of the factor when published separately",
        ),
        sa.Column(
            "indirect_emission_factor",
            sa.Numeric(precision=16, scale=8),
            nullable=True,
            comment="Indirect share of the factor when published separately",
        ),
        sa.Column(
            "unit",
            sa.String(length=50),
            nullable=False,
            comment="Factor unit (e.g., tCO2e/t, tCO2e/MWh)",
        ),
        sa.Column(
            "source_unit",
            sa.String(length=50),
            nullable=True,
            comment="Activity unit the factor expects",
        ),
        sa.Column("country_code", sa.String(length=2), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column(
            "source",
            sa.String(length=200),
            nullable=True,
            comment="Source of the emission factor (e.g., 'IPCC 2006', 'CEA 2023')",
        ),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organisation_id"], ["organisations.id"]),
        sa.PrimaryKeyConstraint("id"),
        comment="Emission factor reference table",
    )
    op.create_index(
        op.f("ix_emission_factors_organisation_id"),
        "emission_factors",
        ["organisation_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_emission_factors_type"), "emission_factors", ["type"], unique=False
    )
    op.create_index(
        op.f("ix_emission_factors_country_code"),
        "emission_factors",
        ["country_code"],
        unique=False,
    )
    op.create_index(
        "ix_emission_factors_type_active",
        "emission_factors",
        ["type", "is_active"],
        unique=False,
    )
    op.create_index(
        "ix_emission_factors_type_country",
        "emission_factors",
        ["type", "country_code"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_emission_factors_type_country", table_name="emission_factors")
    op.drop_index("ix_emission_factors_type_active", table_name="emission_factors")
    op.drop_index(op.f("ix_emission_factors_country_code"), table_name="emission_factors")
    op.drop_index(op.f("ix_emission_factors_type"), table_name="emission_factors")
    op.drop_index(op.f("ix_emission_factors_organisation_id"), table_name="emission_factors")
    op.drop_table("emission_factors")
