"""Contract database model."""

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from servicedesk.models.timestamps import utc_now

if TYPE_CHECKING:
    from servicedesk.models.client import Client
    from servicedesk.models.project import Project


# Client codes and renew codes share one layout but live in separate columns,
# each guarded by its own unique constraint
CONTRACT_CLIENT_CODE_CONSTRAINT = UniqueConstraint("client_code", name="uq_contracts_client_code")
CONTRACT_RENEW_CODE_CONSTRAINT = UniqueConstraint("renew_code", name="uq_contracts_renew_code")

# Free-text fields copied verbatim from a predecessor when a contract is renewed
DESCRIPTIVE_FIELDS = (
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


class Contract(SQLModel, table=True):
    """Service contract with allocated client and renew codes (e.g. "MS25G0103")."""

    __tablename__ = "contracts"
    __table_args__ = (CONTRACT_CLIENT_CODE_CONSTRAINT, CONTRACT_RENEW_CODE_CONSTRAINT)

    id: int | None = Field(default=None, primary_key=True)
    client_id: int = Field(foreign_key="clients.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)  # Creator
    renewed_from_id: int | None = Field(default=None, foreign_key="contracts.id")
    project_id: int | None = Field(default=None, foreign_key="projects.id", index=True)

    category: str
    client_code: str = Field(max_length=32)
    renew_code: str = Field(max_length=32)

    start_date: date
    end_date: date

    client: str | None = None  # Display name as written on the contract
    alias: str | None = None
    jobnote: str | None = None
    sales: str | None = None
    contract_name: str | None = None
    location: str | None = None
    t1: str | None = None
    t2: str | None = None
    t3: str | None = None
    preventive: str | None = None
    report: str | None = None
    other: str | None = None
    contract_status: str | None = None
    remarks: str | None = None
    period: str | None = None
    response_time: str | None = None
    service_time: str | None = None
    spare_parts_provider: str | None = None

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))

    client_record: "Client" = Relationship(back_populates="contracts")  # noqa: UP037
    project: "Project" = Relationship(back_populates="contracts")  # noqa: UP037
