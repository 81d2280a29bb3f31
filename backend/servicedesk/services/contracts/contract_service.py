"""Contract management service.

Client and renew codes are allocated by CodeAllocator; this service resolves
the inputs (owning client, creator, year) and the writes that must commit
together with the new contract row.
"""

from datetime import date
from typing import Any

import structlog
from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from servicedesk.models.client import Client
from servicedesk.models.contract import DESCRIPTIVE_FIELDS, Contract
from servicedesk.models.project import Project
from servicedesk.models.timestamps import utc_now
from servicedesk.models.user import User
from servicedesk.services.codes.allocator import CodeAllocator, RelatedWrites
from servicedesk.services.contracts.exceptions import ContractNotFound, InvalidContractDates, InvalidReference
from servicedesk.utils.datetime_utils import current_year

logger = structlog.get_logger(__name__)

# Codes embed the category and the client's dedicated number, so neither can change after allocation
EDITABLE_FIELDS = ("user_id", "project_id", "start_date", "end_date", *DESCRIPTIVE_FIELDS)


def _increment_client_counter(counter: str) -> RelatedWrites:
    """Build a write that bumps ``Client.<counter>`` for the new contract's client."""

    async def write(session: AsyncSession, contract: Contract) -> None:
        column = getattr(Client, counter)
        await session.execute(
            update(Client).where(Client.id == contract.client_id).values({counter: column + 1})  # type: ignore[arg-type]
        )

    return write


def _check_dates(start_date: date, end_date: date) -> None:
    if end_date <= start_date:
        raise InvalidContractDates("End date must be after the start date.")


class ContractService:
    """Service for contract creation, renewal and queries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_contracts(self, *, skip: int = 0, limit: int = 50) -> tuple[list[Contract], int]:
        """List contracts with pagination. Returns (contracts, total_count)."""
        statement = select(Contract).offset(skip).limit(limit).order_by(Contract.id)  # type: ignore[arg-type]
        result = await self.session.execute(statement)
        contracts = list(result.scalars().all())

        count_result = await self.session.execute(select(func.count()).select_from(Contract))
        total = count_result.scalar() or 0

        return contracts, total

    async def get_contract(self, contract_id: int) -> Contract:
        """Get contract by ID."""
        contract = await self.session.get(Contract, contract_id)
        if not contract:
            raise ContractNotFound()
        return contract

    async def create_contract(
        self,
        *,
        client_id: int,
        user_id: int,
        category: str,
        start_date: date,
        end_date: date,
        year: int | None = None,
        project_id: int | None = None,
        **details: Any,
    ) -> Contract:
        """Create a contract with freshly allocated codes.

        ``year`` defaults to the current year; the owning client's
        ``no_of_orders`` is incremented in the same transaction.
        """
        _check_dates(start_date, end_date)
        dedicated_number = await self._client_dedicated_number(client_id)
        await self._check_user(user_id)
        if project_id is not None:
            await self._check_project(project_id)

        allocator = CodeAllocator(self.session)
        return await allocator.allocate_contract(
            category=category,
            client_dedicated_number=dedicated_number,
            year=year or current_year(),
            related_writes=_increment_client_counter("no_of_orders"),
            client_id=client_id,
            user_id=user_id,
            project_id=project_id,
            start_date=start_date,
            end_date=end_date,
            **details,
        )

    async def renew_contract(
        self,
        contract_id: int,
        *,
        start_date: date,
        end_date: date,
        user_id: int | None = None,
        category: str | None = None,
        year: int | None = None,
    ) -> Contract:
        """Create the successor of a contract.

        The successor copies the descriptive fields, gets its own client and
        renew codes and links back through ``renewed_from_id``. The client's
        ``no_of_renew`` is incremented in the same transaction.
        """
        _check_dates(start_date, end_date)
        predecessor = await self.get_contract(contract_id)

        # Read everything needed up front: a retried attempt rolls back and expires loaded rows
        predecessor_id = predecessor.id
        client_id = predecessor.client_id
        creator_id = user_id if user_id is not None else predecessor.user_id
        project_id = predecessor.project_id
        renewed_category = category if category is not None else predecessor.category
        details = {field: getattr(predecessor, field) for field in DESCRIPTIVE_FIELDS}

        dedicated_number = await self._client_dedicated_number(client_id)
        if user_id is not None:
            await self._check_user(user_id)

        allocator = CodeAllocator(self.session)
        successor = await allocator.allocate_contract(
            category=renewed_category,
            client_dedicated_number=dedicated_number,
            year=year or current_year(),
            related_writes=_increment_client_counter("no_of_renew"),
            client_id=client_id,
            user_id=creator_id,
            renewed_from_id=predecessor_id,
            project_id=project_id,
            start_date=start_date,
            end_date=end_date,
            **details,
        )
        logger.info("Renewed contract", contract_id=predecessor_id, successor_id=successor.id)
        return successor

    async def update_contract(self, contract_id: int, **changes: Any) -> Contract:
        """Update dates, creator, project and descriptive fields.

        Category, client, client_code and renew_code never change after allocation.
        """
        contract = await self.get_contract(contract_id)
        for field in changes:
            if field not in EDITABLE_FIELDS:
                raise ValueError(f"Field {field!r} cannot be updated")

        _check_dates(changes.get("start_date", contract.start_date), changes.get("end_date", contract.end_date))
        if "user_id" in changes:
            await self._check_user(changes["user_id"])
        if changes.get("project_id") is not None:
            await self._check_project(changes["project_id"])

        for field, value in changes.items():
            setattr(contract, field, value)
        contract.updated_at = utc_now()
        await self.session.commit()
        logger.info("Updated contract", contract_id=contract_id, fields=sorted(changes))
        return contract

    async def delete_contract(self, contract_id: int) -> None:
        """Delete a contract, unlinking any successors that were renewed from it."""
        await self.get_contract(contract_id)
        await self.session.execute(
            update(Contract).where(Contract.renewed_from_id == contract_id).values(renewed_from_id=None)  # type: ignore[arg-type]
        )
        await self.session.execute(delete(Contract).where(Contract.id == contract_id))  # type: ignore[arg-type]
        await self.session.commit()
        logger.info("Deleted contract", contract_id=contract_id)

    async def _client_dedicated_number(self, client_id: int) -> str:
        client = await self.session.get(Client, client_id)
        if not client:
            raise InvalidReference("Invalid client_id")
        return client.dedicated_number

    async def _check_user(self, user_id: int) -> None:
        if not await self.session.get(User, user_id):
            raise InvalidReference("Invalid user_id")

    async def _check_project(self, project_id: int) -> None:
        if not await self.session.get(Project, project_id):
            raise InvalidReference("Invalid project_id")
