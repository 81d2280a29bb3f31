"""initial_schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)

    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("client_name", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("dedicated_number", sqlmodel.sql.sqltypes.AutoString(length=16), nullable=False),
        sa.Column("contact_person", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("phone", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("address", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("no_of_orders", sa.Integer(), nullable=False),
        sa.Column("no_of_renew", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        # Named so the allocator can tell its own conflicts from other integrity errors
        sa.UniqueConstraint("dedicated_number", name="uq_clients_dedicated_number"),
        sa.CheckConstraint("no_of_orders >= 0", name="ck_clients_no_of_orders"),
        sa.CheckConstraint("no_of_renew >= 0", name="ck_clients_no_of_renew"),
    )
    op.create_index(op.f("ix_clients_client_name"), "clients", ["client_name"], unique=False)

    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("renewed_from_id", sa.Integer(), nullable=True),
        sa.Column("category", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("client_code", sqlmodel.sql.sqltypes.AutoString(length=32), nullable=False),
        sa.Column("renew_code", sqlmodel.sql.sqltypes.AutoString(length=32), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        *[
            sa.Column(name, sqlmodel.sql.sqltypes.AutoString(), nullable=True)
            for name in (
                "client",
                "alias",
                "jobnote",
                "sales",
                "contract_name",
                "location",
                "t1",
                "t2",
                "t3",
                "preventive",
                "report",
                "other",
                "contract_status",
                "remarks",
                "period",
                "response_time",
                "service_time",
                "spare_parts_provider",
            )
        ],
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["renewed_from_id"], ["contracts.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("client_code", name="uq_contracts_client_code"),
        sa.UniqueConstraint("renew_code", name="uq_contracts_renew_code"),
    )
    op.create_index(op.f("ix_contracts_client_id"), "contracts", ["client_id"], unique=False)
    op.create_index(op.f("ix_contracts_user_id"), "contracts", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_contracts_user_id"), table_name="contracts")
    op.drop_index(op.f("ix_contracts_client_id"), table_name="contracts")
    op.drop_table("contracts")
    op.drop_index(op.f("ix_clients_client_name"), table_name="clients")
    op.drop_table("clients")
    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_table("users")
