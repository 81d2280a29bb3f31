"""Database models."""

# ruff: noqa: I001 - Import order matters for SQLAlchemy relationship resolution
from sqlmodel import SQLModel

# Referenced tables first: users and clients, then projects, then contracts
from servicedesk.models.user import User
from servicedesk.models.client import CLIENT_DEDICATED_NUMBER_CONSTRAINT, Client
from servicedesk.models.project import Project
from servicedesk.models.contract import (
    CONTRACT_CLIENT_CODE_CONSTRAINT,
    CONTRACT_RENEW_CODE_CONSTRAINT,
    Contract,
)
from servicedesk.models.maintenance import MaintenanceRecord, MaintenanceRecordPic, MaintenanceStatus

__all__ = [
    "SQLModel",
    "User",
    "Client",
    "Project",
    "Contract",
    "MaintenanceRecord",
    "MaintenanceRecordPic",
    "MaintenanceStatus",
    "CLIENT_DEDICATED_NUMBER_CONSTRAINT",
    "CONTRACT_CLIENT_CODE_CONSTRAINT",
    "CONTRACT_RENEW_CODE_CONSTRAINT",
]
