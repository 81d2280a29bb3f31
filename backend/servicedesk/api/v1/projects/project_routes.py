"""Project API endpoints."""

from fastapi import APIRouter, HTTPException

from servicedesk.api.v1.dependencies import ProjectServiceDep
from servicedesk.api.v1.projects.schemas import ProjectCreateRequest, ProjectListResponse, ProjectResponse
from servicedesk.services.projects.exceptions import InvalidProjectReference, ProjectNotFound

router = APIRouter(tags=["projects"])


@router.get("/projects", response_model=ProjectListResponse, operation_id="listProjects")
async def list_projects(
    service: ProjectServiceDep,
    skip: int = 0,
    limit: int = 50,
) -> ProjectListResponse:
    """List projects with their client, creator and contracts."""
    projects, total = await service.list_projects(skip=skip, limit=limit)

    return ProjectListResponse(
        projects=[ProjectResponse.from_model(project) for project in projects],
        total=total,
    )


@router.get("/projects/{project_id}", response_model=ProjectResponse, operation_id="getProject")
async def get_project(
    project_id: int,
    service: ProjectServiceDep,
) -> ProjectResponse:
    """Get a single project."""
    try:
        return ProjectResponse.from_model(await service.get_project(project_id))
    except ProjectNotFound:
        raise HTTPException(status_code=404, detail="Project not found")


@router.post("/projects", response_model=ProjectResponse, status_code=201, operation_id="createProject")
async def create_project(
    body: ProjectCreateRequest,
    service: ProjectServiceDep,
) -> ProjectResponse:
    """Create a project. Contracts join it through their project_id."""
    try:
        project = await service.create_project(body.project_name, client_id=body.client_id, user_id=body.user_id)
    except InvalidProjectReference as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return ProjectResponse.from_model(project)
