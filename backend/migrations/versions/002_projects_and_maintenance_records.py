"""projects_and_maintenance_records

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

MAINTENANCE_STATUSES = ("New", "Pending", "In Progress", "Follow-up required", "Closed")


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("project_name", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_projects_client_id"), "projects", ["client_id"], unique=False)

    op.add_column("contracts", sa.Column("project_id", sa.Integer(), nullable=True))
    op.create_foreign_key("fk_contracts_project_id", "contracts", "projects", ["project_id"], ["id"])
    op.create_index(op.f("ix_contracts_project_id"), "contracts", ["project_id"], unique=False)

    op.create_table(
        "maintenance_records",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*MAINTENANCE_STATUSES, name="maintenancestatus", native_enum=False, length=32),
            nullable=False,
        ),
        sa.Column("service_code", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("jobnote", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("service_date", sa.Date(), nullable=True),
        sa.Column("arrive_time", sa.Time(), nullable=True),
        sa.Column("depart_time", sa.Time(), nullable=True),
        sa.Column("completion_date", sa.Date(), nullable=True),
        sa.Column("is_warranty", sa.Boolean(), nullable=True),
        *[
            sa.Column(name, sqlmodel.sql.sqltypes.AutoString(), nullable=True)
            for name in (
                "location_district",
                "sales",
                "product_model",
                "serial_no",
                "problem_description",
                "solution_details",
                "labor_details",
                "parts_details",
                "remark",
                "service_type",
                "product_type",
                "support_method",
                "symptom_classification",
                "alias",
            )
        ],
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_maintenance_records_client_id"), "maintenance_records", ["client_id"], unique=False)
    op.create_index(op.f("ix_maintenance_records_status"), "maintenance_records", ["status"], unique=False)
    op.create_index(op.f("ix_maintenance_records_jobnote"), "maintenance_records", ["jobnote"], unique=False)

    op.create_table(
        "maintenance_record_pics",
        sa.Column("maintenance_record_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["maintenance_record_id"], ["maintenance_records.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("maintenance_record_id", "user_id"),
    )


def downgrade() -> None:
    op.drop_table("maintenance_record_pics")
    op.drop_index(op.f("ix_maintenance_records_jobnote"), table_name="maintenance_records")
    op.drop_index(op.f("ix_maintenance_records_status"), table_name="maintenance_records")
    op.drop_index(op.f("ix_maintenance_records_client_id"), table_name="maintenance_records")
    op.drop_table("maintenance_records")
    op.drop_index(op.f("ix_contracts_project_id"), table_name="contracts")
    op.drop_constraint("fk_contracts_project_id", "contracts", type_="foreignkey")
    op.drop_column("contracts", "project_id")
    op.drop_index(op.f("ix_projects_client_id"), table_name="projects")
    op.drop_table("projects")
