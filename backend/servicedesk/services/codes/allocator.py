"""Code allocator for client dedicated numbers and contract codes.

The count of rows sharing a prefix only predicts the next free sequence
number. The unique constraints on the code columns decide: an insert that
collides with a concurrently committed row is rolled back and retried with a
fresh count, up to ``max_attempts`` times.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from servicedesk.config import settings
from servicedesk.models.client import CLIENT_DEDICATED_NUMBER_CONSTRAINT, Client
from servicedesk.models.contract import (
    CONTRACT_CLIENT_CODE_CONSTRAINT,
    CONTRACT_RENEW_CODE_CONSTRAINT,
    Contract,
)
from servicedesk.services.codes.categories import category_code
from servicedesk.services.codes.formatting import contract_prefix, format_sequence, name_initial
from servicedesk.services.codes.sequence import PrefixSequenceOnConflict

logger = structlog.get_logger(__name__)

# Extra writes committed atomically with a new contract (e.g. client counters)
RelatedWrites = Callable[[AsyncSession, Contract], Awaitable[None]]


class CodeAllocator:
    """Creates records carrying freshly allocated codes.

    One instance serves one request; it holds no state between calls.
    """

    def __init__(self, session: AsyncSession, *, max_attempts: int | None = None):
        self.session = session
        self.max_attempts = settings.code_allocation_max_attempts if max_attempts is None else max_attempts

    async def allocate_client(self, client_name: str, **fields: Any) -> Client:
        """Insert a client with a new dedicated number, e.g. "G03".

        Raises:
            CodeAllocationExhausted: every attempt collided with a concurrent insert
            CodeAllocationFailed: any other store error
        """
        prefix = name_initial(client_name)
        allocation = PrefixSequenceOnConflict(
            session=self.session,
            prefix=prefix,
            code_columns=(Client.dedicated_number,),
            constraints=(CLIENT_DEDICATED_NUMBER_CONSTRAINT,),
            max_attempts=self.max_attempts,
        )

        client: Client | None = None
        async for attempt in allocation:
            async with attempt:
                client = Client(
                    client_name=client_name,
                    dedicated_number=format_sequence(prefix, attempt.sequence(Client.dedicated_number)),
                    **fields,
                )
                self.session.add(client)
                await self.session.flush()
        if client is None:
            # PrefixSequenceOnConflict ends in success or raises
            raise RuntimeError(f"Allocation loop for prefix {prefix!r} ended without a client")

        logger.info(
            "Allocated dedicated number",
            client_id=client.id,
            dedicated_number=client.dedicated_number,
            attempts=allocation.current_attempt,
        )
        return client

    async def allocate_contract(
        self,
        *,
        category: str,
        client_dedicated_number: str,
        year: int,
        related_writes: RelatedWrites | None = None,
        **fields: Any,
    ) -> Contract:
        """Insert a contract with a new client code and renew code.

        ``related_writes`` runs inside each attempt's transaction after the
        contract row is flushed, so its effects are kept only if the contract is.

        Raises:
            UnknownCategory: before touching the store
            CodeAllocationExhausted: every attempt collided with a concurrent insert
            CodeAllocationFailed: any other store error
        """
        prefix = contract_prefix(category_code(category), year, client_dedicated_number)
        allocation = PrefixSequenceOnConflict(
            session=self.session,
            prefix=prefix,
            code_columns=(Contract.client_code, Contract.renew_code),
            constraints=(CONTRACT_CLIENT_CODE_CONSTRAINT, CONTRACT_RENEW_CODE_CONSTRAINT),
            max_attempts=self.max_attempts,
        )

        contract: Contract | None = None
        async for attempt in allocation:
            async with attempt:
                contract = Contract(
                    category=category.strip(),
                    client_code=format_sequence(prefix, attempt.sequence(Contract.client_code)),
                    renew_code=format_sequence(prefix, attempt.sequence(Contract.renew_code)),
                    **fields,
                )
                self.session.add(contract)
                await self.session.flush()
                if related_writes is not None:
                    await related_writes(self.session, contract)
        if contract is None:
            raise RuntimeError(f"Allocation loop for prefix {prefix!r} ended without a contract")

        logger.info(
            "Allocated contract codes",
            contract_id=contract.id,
            client_code=contract.client_code,
            renew_code=contract.renew_code,
            attempts=allocation.current_attempt,
        )
        return contract
