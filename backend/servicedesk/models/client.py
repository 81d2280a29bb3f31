"""Client database model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Column, DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from servicedesk.models.timestamps import utc_now

if TYPE_CHECKING:
    from servicedesk.models.contract import Contract


# Dedicated numbers form their own identifier space; allocated by CodeAllocator
CLIENT_DEDICATED_NUMBER_CONSTRAINT = UniqueConstraint("dedicated_number", name="uq_clients_dedicated_number")


class Client(SQLModel, table=True):
    """Client record with an allocated dedicated number (e.g. "G03")."""

    __tablename__ = "clients"
    __table_args__ = (
        CLIENT_DEDICATED_NUMBER_CONSTRAINT,
        CheckConstraint("no_of_orders >= 0", name="ck_clients_no_of_orders"),
        CheckConstraint("no_of_renew >= 0", name="ck_clients_no_of_renew"),
    )

    id: int | None = Field(default=None, primary_key=True)
    client_name: str = Field(index=True)
    # Assigned exactly once at creation, never updated afterwards
    dedicated_number: str = Field(max_length=16)

    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None

    no_of_orders: int = 0  # Incremented when a contract is created
    no_of_renew: int = 0  # Incremented when a contract is renewed

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))

    contracts: list["Contract"] = Relationship(back_populates="client_record")
