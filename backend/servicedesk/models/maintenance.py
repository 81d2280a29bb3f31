"""Maintenance record (service ticket) database models."""

from datetime import date, datetime, time
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer
from sqlmodel import Field, Relationship, SQLModel

from servicedesk.models.timestamps import utc_now

if TYPE_CHECKING:
    from servicedesk.models.client import Client
    from servicedesk.models.user import User


class MaintenanceStatus(StrEnum):
    """Workflow status of a maintenance record.

    Every record starts as NEW. Moving to another status requires:
        PENDING             -> at least one PIC
        IN_PROGRESS         -> service_date
        FOLLOW_UP_REQUIRED  -> nothing beyond the core fields
        CLOSED              -> completion_date and solution_details
    """

    NEW = "New"
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    FOLLOW_UP_REQUIRED = "Follow-up required"
    CLOSED = "Closed"


class MaintenanceRecordPic(SQLModel, table=True):
    """Person in charge (PIC) assigned to a maintenance record."""

    __tablename__ = "maintenance_record_pics"

    maintenance_record_id: int = Field(
        sa_column=Column(Integer, ForeignKey("maintenance_records.id", ondelete="CASCADE"), primary_key=True),
    )
    user_id: int = Field(foreign_key="users.id", primary_key=True)


class MaintenanceRecord(SQLModel, table=True):
    """On-site or remote service visit, tied to a contract through its job note."""

    __tablename__ = "maintenance_records"

    id: int | None = Field(default=None, primary_key=True)
    client_id: int = Field(foreign_key="clients.id", index=True)
    user_id: int = Field(foreign_key="users.id")  # Creator, then last modifier
    status: MaintenanceStatus = Field(
        default=MaintenanceStatus.NEW,
        sa_column=Column(
            Enum(
                MaintenanceStatus,
                values_callable=lambda e: [x.value for x in e],
                name="maintenancestatus",
                native_enum=False,
                length=32,
            ),
            nullable=False,
            index=True,
        ),
    )

    service_code: str
    jobnote: str = Field(index=True)  # Must match a contract's jobnote

    service_date: date | None = None
    arrive_time: time | None = None
    depart_time: time | None = None
    completion_date: date | None = None

    location_district: str | None = None
    is_warranty: bool | None = None
    sales: str | None = None
    product_model: str | None = None
    serial_no: str | None = None
    problem_description: str | None = None
    solution_details: str | None = None
    labor_details: str | None = None
    parts_details: str | None = None
    remark: str | None = None
    service_type: str | None = None
    product_type: str | None = None
    support_method: str | None = None
    symptom_classification: str | None = None
    alias: str | None = None

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))

    client_record: "Client" = Relationship()  # noqa: UP037
    user: "User" = Relationship()  # noqa: UP037
    pics: list["User"] = Relationship(link_model=MaintenanceRecordPic)  # noqa: UP037
