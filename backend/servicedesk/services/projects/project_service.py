"""Project management service."""

import structlog
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.sql.expression import SelectOfScalar

from servicedesk.models.client import Client
from servicedesk.models.project import Project
from servicedesk.models.user import User
from servicedesk.services.projects.exceptions import InvalidProjectReference, ProjectNotFound

logger = structlog.get_logger(__name__)


def _with_relations(statement: SelectOfScalar[Project]) -> SelectOfScalar[Project]:
    return statement.options(
        selectinload(Project.contracts),  # type: ignore[arg-type]
        selectinload(Project.client_record),  # type: ignore[arg-type]
        selectinload(Project.user),  # type: ignore[arg-type]
    )


class ProjectService:
    """Service for projects and the contracts grouped under them."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_projects(self, *, skip: int = 0, limit: int = 50) -> tuple[list[Project], int]:
        """List projects with their client, creator and contracts. Returns (projects, total_count)."""
        statement = _with_relations(select(Project)).offset(skip).limit(limit).order_by(Project.id)
        result = await self.session.execute(statement)
        projects = list(result.scalars().all())

        count_result = await self.session.execute(select(func.count()).select_from(Project))
        total = count_result.scalar() or 0

        return projects, total

    async def get_project(self, project_id: int) -> Project:
        """Get project by ID with its client, creator and contracts loaded."""
        statement = (
            _with_relations(select(Project))
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(statement)
        project = result.scalars().first()
        if not project:
            raise ProjectNotFound()
        return project

    async def create_project(
        self, project_name: str, *, client_id: int | None = None, user_id: int | None = None
    ) -> Project:
        """Create a project, optionally owned by a client and a creator."""
        if client_id is not None and not await self.session.get(Client, client_id):
            raise InvalidProjectReference("Invalid client_id")
        if user_id is not None and not await self.session.get(User, user_id):
            raise InvalidProjectReference("Invalid user_id")

        project = Project(project_name=project_name, client_id=client_id, user_id=user_id)
        self.session.add(project)
        await self.session.commit()
        logger.info("Created project", project_id=project.id, project_name=project_name)

        return await self.get_project(project.id)  # type: ignore[arg-type]
