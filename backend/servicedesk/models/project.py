"""Project database model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime
from sqlmodel import Field, Relationship, SQLModel

from servicedesk.models.timestamps import utc_now

if TYPE_CHECKING:
    from servicedesk.models.client import Client
    from servicedesk.models.contract import Contract
    from servicedesk.models.user import User


class Project(SQLModel, table=True):
    """Groups contracts that belong to one engagement."""

    __tablename__ = "projects"

    id: int | None = Field(default=None, primary_key=True)
    project_name: str
    client_id: int | None = Field(default=None, foreign_key="clients.id", index=True)
    user_id: int | None = Field(default=None, foreign_key="users.id")

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))

    # (string annotations required for cross-module SQLAlchemy resolution)
    client_record: "Client" = Relationship()  # noqa: UP037
    user: "User" = Relationship()  # noqa: UP037
    contracts: list["Contract"] = Relationship(back_populates="project")
