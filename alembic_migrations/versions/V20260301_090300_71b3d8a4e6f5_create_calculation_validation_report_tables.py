"""create_calculation_validation_report_tables

Revision ID: 71b3d8a4e6f5
Revises: c5e9f0a17d42
Create Date: 2026-03-01 09:03:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "71b3d8a4e6f5"
down_revision = "c5e9f0a17d42"
branch_labels = None
depends_on = None

OPEN_CALCULATION_PREDICATE = sa.text("status != 'finalized'")


def upgrade() -> None:
    op.create_table(
        "calculations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("reporting_period_id", sa.Uuid(), nullable=False),
        sa.Column("facility_id", sa.Uuid(), nullable=True),
        sa.Column("total_scope1", sa.Numeric(precision=38, scale=10), nullable=False),
        sa.Column("total_scope2", sa.Numeric(precision=38, scale=10), nullable=False),
        sa.Column("total_scope3_direct", sa.Numeric(precision=38, scale=10), nullable=False),
        sa.Column("total_scope3_indirect", sa.Numeric(precision=38, scale=10), nullable=False),
        sa.Column("total_scope3", sa.Numeric(precision=38, scale=10), nullable=False),
        sa.Column(
            "total_emissions",
            sa.Numeric(precision=38, scale=10),
            nullable=False,
            comment="total_scope1 + total_scope2 + total_scope3 in tCO2e",
        ),
        sa.Column(
            "total_production",
            sa.Numeric(precision=38, scale=10),
            nullable=False,
            comment="Total production in tonnes",
        ),
        sa.Column(
            "products",
            sa.JSON(),
            nullable=False,
            comment="Ordered per-product allocation with itemised scope details",
        ),
        sa.Column(
            "status",
            sa.String(length=20),
            nullable=False,
            comment="Calculation status (draft, calculated, validated, finalized)",
        ),
        sa.Column(
            "version",
            sa.Integer(),
            nullable=False,
            comment="Incremented on every recalculation",
        ),
        sa.Column("calculated_at", sa.DateTime(), nullable=True),
        sa.Column("finalized_at", sa.DateTime(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organisation_id"], ["organisations.id"]),
        sa.ForeignKeyConstraint(["reporting_period_id"], ["reporting_periods.id"]),
        sa.ForeignKeyConstraint(["facility_id"], ["facilities.id"]),
        sa.PrimaryKeyConstraint("id"),
        comment="Embedded emissions calculations",
    )
    op.create_index(
        op.f("ix_calculations_organisation_id"),
        "calculations",
        ["organisation_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_calculations_reporting_period_id"),
        "calculations",
        ["reporting_period_id"],
        unique=False,
    )
    # One open calculation per organisation and period
    op.create_index(
        "uq_calculations_open_per_period",
        "calculations",
        ["organisation_id", "reporting_period_id"],
        unique=True,
        postgresql_where=OPEN_CALCULATION_PREDICATE,
        sqlite_where=OPEN_CALCULATION_PREDICATE,
    )

    op.create_table(
        "validation_results",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("reporting_period_id", sa.Uuid(), nullable=False),
        sa.Column("calculation_id", sa.Uuid(), nullable=True),
        sa.Column(
            "status",
            sa.String(length=20),
            nullable=False,
            comment="Verdict (passed, warnings, failed)",
        ),
        sa.Column("error_count", sa.Integer(), nullable=False),
        sa.Column("warning_count", sa.Integer(), nullable=False),
        sa.Column("info_count", sa.Integer(), nullable=False),
        sa.Column("findings", sa.JSON(), nullable=False),
        sa.Column("validated_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organisation_id"], ["organisations.id"]),
        sa.ForeignKeyConstraint(["reporting_period_id"], ["reporting_periods.id"]),
        sa.ForeignKeyConstraint(["calculation_id"], ["calculations.id"]),
        sa.PrimaryKeyConstraint("id"),
        comment="Validation run history",
    )
    op.create_index(
        op.f("ix_validation_results_organisation_id"),
        "validation_results",
        ["organisation_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_validation_results_reporting_period_id"),
        "validation_results",
        ["reporting_period_id"],
        unique=False,
    )
    op.create_index(
        "ix_validation_results_org_period",
        "validation_results",
        ["organisation_id", "reporting_period_id"],
        unique=False,
    )

    op.create_table(
        "reports",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organisation_id", sa.Uuid(), nullable=False),
        sa.Column("reporting_period_id", sa.Uuid(), nullable=False),
        sa.Column("calculation_id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column(
            "status",
            sa.String(length=20),
            nullable=False,
            comment="Report status (completed, validated, submitted)",
        ),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=False),
        sa.Column(
            "file_size", sa.Integer(), nullable=True, comment="Size in bytes of xml_content"
        ),
        sa.Column("xml_content", sa.Text(), nullable=True),
        sa.Column("xsd_version", sa.String(length=10), nullable=True),
        sa.Column(
            "validation_result",
            sa.JSON(),
            nullable=True,
            comment="Self-check verdict {is_valid, errors, warnings}",
        ),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("generated_at", sa.DateTime(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organisation_id"], ["organisations.id"]),
        sa.ForeignKeyConstraint(["reporting_period_id"], ["reporting_periods.id"]),
        sa.ForeignKeyConstraint(["calculation_id"], ["calculations.id"]),
        sa.PrimaryKeyConstraint("id"),
        comment="Generated regulatory reports",
    )
    op.create_index(
        op.f("ix_reports_organisation_id"), "reports", ["organisation_id"], unique=False
    )
    op.create_index(
        op.f("ix_reports_reporting_period_id"),
        "reports",
        ["reporting_period_id"],
        unique=False,
    )
    op.create_index(
        "ix_reports_org_period",
        "reports",
        ["organisation_id", "reporting_period_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_reports_org_period", table_name="reports")
    op.drop_index(op.f("ix_reports_reporting_period_id"), table_name="reports")
    op.drop_index(op.f("ix_reports_organisation_id"), table_name="reports")
    op.drop_table("reports")

    op.drop_index("ix_validation_results_org_period", table_name="validation_results")
    op.drop_index(
        op.f("ix_validation_results_reporting_period_id"), table_name="validation_results"
    )
    op.drop_index(
        op.f("ix_validation_results_organisation_id"), table_name="validation_results"
    )
    op.drop_table("validation_results")

    op.drop_index("uq_calculations_open_per_period", table_name="calculations")
    op.drop_index(op.f("ix_calculations_reporting_period_id"), table_name="calculations")
    op.drop_index(op.f("ix_calculations_organisation_id"), table_name="calculations")
    op.drop_table("calculations")
