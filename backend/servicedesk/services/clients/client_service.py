"""Client management service.

Dedicated numbers are allocated once, on creation, and never change.
"""

from typing import Any

import structlog
from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from servicedesk.models.client import Client
from servicedesk.models.contract import Contract
from servicedesk.models.maintenance import MaintenanceRecord
from servicedesk.models.project import Project
from servicedesk.models.timestamps import utc_now
from servicedesk.services.clients.exceptions import ClientInUse, ClientNotFound
from servicedesk.services.codes.allocator import CodeAllocator

logger = structlog.get_logger(__name__)

# Fields a caller may set; dedicated_number and the counters are managed here
EDITABLE_FIELDS = ("client_name", "contact_person", "email", "phone", "address")


class ClientService:
    """Service for client management operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_clients(self, *, skip: int = 0, limit: int = 50) -> tuple[list[Client], int]:
        """List clients with pagination. Returns (clients, total_count)."""
        statement = select(Client).offset(skip).limit(limit).order_by(Client.id)  # type: ignore[arg-type]
        result = await self.session.execute(statement)
        clients = list(result.scalars().all())

        count_result = await self.session.execute(select(func.count()).select_from(Client))
        total = count_result.scalar() or 0

        return clients, total

    async def get_client(self, client_id: int) -> Client:
        """Get client by ID."""
        client = await self.session.get(Client, client_id)
        if not client:
            raise ClientNotFound()
        return client

    async def create_client(self, client_name: str, **contact: Any) -> Client:
        """Create a client and allocate its dedicated number."""
        allocator = CodeAllocator(self.session)
        return await allocator.allocate_client(client_name, **contact)

    async def update_client(self, client_id: int, **changes: Any) -> Client:
        """Update name and contact fields. The dedicated number is left untouched."""
        client = await self.get_client(client_id)
        for field, value in changes.items():
            if field not in EDITABLE_FIELDS:
                raise ValueError(f"Field {field!r} cannot be updated")
            setattr(client, field, value)
        client.updated_at = utc_now()
        await self.session.commit()
        return client

    async def delete_client(self, client_id: int) -> None:
        """Delete a client that no contract, project or maintenance record references."""
        client = await self.get_client(client_id)

        for model in (Contract, Project, MaintenanceRecord):
            count_result = await self.session.execute(
                select(func.count()).select_from(model).where(model.client_id == client_id)  # type: ignore[attr-defined]
            )
            if count_result.scalar():
                raise ClientInUse()

        dedicated_number = client.dedicated_number
        try:
            await self.session.execute(delete(Client).where(Client.id == client_id))  # type: ignore[arg-type]
            await self.session.commit()
        except IntegrityError:
            # A referencing row was created after the check above
            await self.session.rollback()
            raise ClientInUse() from None
        logger.info("Deleted client", client_id=client_id, dedicated_number=dedicated_number)
