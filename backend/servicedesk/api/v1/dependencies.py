"""FastAPI dependencies for service injection."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from servicedesk.db import get_session
from servicedesk.services.clients.client_service import ClientService
from servicedesk.services.contracts.contract_service import ContractService
from servicedesk.services.maintenance.maintenance_service import MaintenanceService
from servicedesk.services.projects.project_service import ProjectService
from servicedesk.services.users.user_service import UserService


async def get_client_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ClientService:
    """Get a ClientService instance with the current session."""
    return ClientService(session)


async def get_contract_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ContractService:
    """Get a ContractService instance with the current session."""
    return ContractService(session)


async def get_user_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> UserService:
    """Get a UserService instance with the current session."""
    return UserService(session)


async def get_project_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProjectService:
    """Get a ProjectService instance with the current session."""
    return ProjectService(session)


async def get_maintenance_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MaintenanceService:
    """Get a MaintenanceService instance with the current session."""
    return MaintenanceService(session)


# Type aliases for cleaner endpoint signatures
ClientServiceDep = Annotated[ClientService, Depends(get_client_service)]
ContractServiceDep = Annotated[ContractService, Depends(get_contract_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
MaintenanceServiceDep = Annotated[MaintenanceService, Depends(get_maintenance_service)]
