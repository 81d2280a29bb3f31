"""API schemas for project endpoints."""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_serializer

from servicedesk.models.project import Project
from servicedesk.utils.datetime_utils import to_api_timezone


class ProjectContractSummary(BaseModel):
    """Contract as listed under its project."""

    id: int
    client_code: str
    contract_name: str | None
    start_date: date
    end_date: date


class ProjectResponse(BaseModel):
    """Project with its client, creator and contracts."""

    id: int
    project_name: str
    client_id: int | None
    client_name: str | None
    user_id: int | None
    username: str | None
    contracts: list[ProjectContractSummary]
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> str:
        """Serialize datetime to API timezone."""
        localized_dt = to_api_timezone(dt)
        assert localized_dt is not None
        return localized_dt.isoformat()

    @classmethod
    def from_model(cls, project: Project) -> "ProjectResponse":
        """Create response from a Project loaded with its relations."""
        return cls(
            id=project.id,  # type: ignore[arg-type]
            project_name=project.project_name,
            client_id=project.client_id,
            client_name=project.client_record.client_name if project.client_record else None,
            user_id=project.user_id,
            username=project.user.username if project.user else None,
            contracts=[
                ProjectContractSummary(
                    id=contract.id,  # type: ignore[arg-type]
                    client_code=contract.client_code,
                    contract_name=contract.contract_name,
                    start_date=contract.start_date,
                    end_date=contract.end_date,
                )
                for contract in sorted(project.contracts, key=lambda c: c.id or 0)
            ],
            created_at=project.created_at,
        )


class ProjectListResponse(BaseModel):
    """Project list response schema."""

    projects: list[ProjectResponse]
    total: int


class ProjectCreateRequest(BaseModel):
    """Request body for project creation."""

    project_name: str = Field(min_length=1)
    client_id: int | None = None
    user_id: int | None = None
