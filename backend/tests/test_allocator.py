import asyncio
from collections.abc import AsyncIterator
from datetime import date
from typing import Any

import pytest
from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from factories import count_rows, seed_client, seed_contract
from servicedesk.models import Client, Contract, User
from servicedesk.services.codes import sequence
from servicedesk.services.codes.allocator import CodeAllocator
from servicedesk.services.codes.exceptions import CodeAllocationExhausted, CodeAllocationFailed, UnknownCategory
from servicedesk.services.codes.sequence import PrefixSequenceOnConflict

CONTRACT_DATES = {"start_date": date(2025, 8, 1), "end_date": date(2026, 7, 31)}


@pytest.fixture
def count_calls(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Record every prefix count the allocator performs."""
    calls: list[str] = []
    real_count = sequence.count_with_prefix

    async def spy(session: AsyncSession, column: Any, prefix: str) -> int:
        calls.append(prefix)
        return await real_count(session, column, prefix)

    monkeypatch.setattr(sequence, "count_with_prefix", spy)
    return calls


# =============================================================================
# Clients
# =============================================================================


async def test_first_client_for_a_letter_gets_01(session: AsyncSession) -> None:
    client = await CodeAllocator(session).allocate_client("Global Tech Inc.")

    assert client.id is not None
    assert client.dedicated_number == "G01"


async def test_client_numbers_count_per_initial(session: AsyncSession) -> None:
    allocator = CodeAllocator(session)

    numbers = [
        (await allocator.allocate_client(name)).dedicated_number
        for name in ["Gamma", "helix", "Gizmo", "123 Corp", "Galaxy", "!Bang"]
    ]

    assert numbers == ["G01", "H01", "G02", "X01", "G03", "X02"]


async def test_client_fields_are_persisted(session: AsyncSession, session_maker: async_sessionmaker) -> None:
    client = await CodeAllocator(session).allocate_client("Global Tech Inc.", email="ops@gti.example", phone="123")

    async with session_maker() as other:
        stored = await other.get(Client, client.id)
    assert stored is not None
    assert (stored.client_name, stored.dedicated_number, stored.email) == ("Global Tech Inc.", "G01", "ops@gti.example")


async def test_conflicting_insert_is_retried_with_fresh_count(
    session_maker: async_sessionmaker, monkeypatch: pytest.MonkeyPatch
) -> None:
    async with session_maker() as session:
        allocator = CodeAllocator(session)
        await allocator.allocate_client("Gamma")
        await allocator.allocate_client("Gizmo")

    real_count = sequence.count_with_prefix
    counts: list[int] = []
    competitors: list[Client] = []
    raced = False

    async def count_then_lose_race(session: AsyncSession, column: Any, prefix: str) -> int:
        nonlocal raced
        count = await real_count(session, column, prefix)
        counts.append(count)
        if not raced:
            raced = True
            # A second request counts the same N=2 and commits before this one writes
            async with session_maker() as other:
                competitors.append(await CodeAllocator(other).allocate_client("Galaxy"))
        return count

    monkeypatch.setattr(sequence, "count_with_prefix", count_then_lose_race)

    async with session_maker() as session:
        client = await CodeAllocator(session).allocate_client("Genome")

    assert competitors[0].dedicated_number == "G03"
    assert client.dedicated_number == "G04"
    assert counts == [2, 2, 3]
    assert await count_rows(session_maker, Client) == 4


async def test_exhausted_after_max_attempts(
    session: AsyncSession, session_maker: async_sessionmaker, monkeypatch: pytest.MonkeyPatch
) -> None:
    for number, name in enumerate(["Gamma", "Gizmo", "Galaxy"], start=1):
        await seed_client(session, name, f"G{number:02d}")
    calls: list[str] = []

    async def stale_count(session: AsyncSession, column: Any, prefix: str) -> int:
        calls.append(prefix)
        return 0  # Predicts G01, then each retry steps to the next taken number

    async def stale_highest(session: AsyncSession, column: Any, prefix: str) -> int:
        return 0

    monkeypatch.setattr(sequence, "count_with_prefix", stale_count)
    monkeypatch.setattr(sequence, "highest_sequence", stale_highest)

    with pytest.raises(CodeAllocationExhausted) as exc_info:
        await CodeAllocator(session, max_attempts=3).allocate_client("Genome")

    assert exc_info.value.attempts == 3
    assert exc_info.value.prefix == "G"
    assert calls == ["G", "G", "G"]
    assert await count_rows(session_maker, Client) == 3


async def test_other_integrity_error_is_a_hard_failure(
    session: AsyncSession, session_maker: async_sessionmaker, count_calls: list[str]
) -> None:
    with pytest.raises(CodeAllocationFailed) as exc_info:
        await CodeAllocator(session).allocate_client("Gamma", no_of_orders=-1)

    assert isinstance(exc_info.value.__cause__, IntegrityError)
    assert count_calls == ["G"]  # Not retried
    assert await count_rows(session_maker, Client) == 0


async def test_store_timeout_is_not_retried(session: AsyncSession, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    async def timing_out_count(session: AsyncSession, column: Any, prefix: str) -> int:
        calls.append(prefix)
        raise TimeoutError("statement timeout")

    monkeypatch.setattr(sequence, "count_with_prefix", timing_out_count)

    with pytest.raises(CodeAllocationFailed) as exc_info:
        await CodeAllocator(session).allocate_client("Gamma")

    assert isinstance(exc_info.value.__cause__, TimeoutError)
    assert calls == ["G"]


async def test_cancellation_propagates_unchanged(session: AsyncSession, monkeypatch: pytest.MonkeyPatch) -> None:
    async def cancelled_count(session: AsyncSession, column: Any, prefix: str) -> int:
        raise asyncio.CancelledError()

    monkeypatch.setattr(sequence, "count_with_prefix", cancelled_count)

    with pytest.raises(asyncio.CancelledError):
        await CodeAllocator(session).allocate_client("Gamma")


async def test_concurrent_clients_get_distinct_numbers(session_maker: async_sessionmaker) -> None:
    requests = 6

    async def create(index: int) -> Client:
        async with session_maker() as session:
            return await CodeAllocator(session, max_attempts=requests).allocate_client(f"Gadget {index}")

    clients = await asyncio.gather(*(create(i) for i in range(requests)))

    assert sorted(c.dedicated_number for c in clients) == [f"G{n:02d}" for n in range(1, requests + 1)]


async def test_concurrent_clients_succeed_or_exhaust(session_maker: async_sessionmaker) -> None:
    requests = 6

    async def create(index: int) -> Client:
        async with session_maker() as session:
            return await CodeAllocator(session, max_attempts=1).allocate_client(f"Gadget {index}")

    results = await asyncio.gather(*(create(i) for i in range(requests)), return_exceptions=True)

    created = [r for r in results if isinstance(r, Client)]
    exhausted = [r for r in results if isinstance(r, CodeAllocationExhausted)]
    assert len(created) + len(exhausted) == requests
    assert len({c.dedicated_number for c in created}) == len(created)
    assert await count_rows(session_maker, Client) == len(created)


async def test_deleted_client_does_not_block_its_prefix(session: AsyncSession) -> None:
    allocator = CodeAllocator(session)
    clients = [await allocator.allocate_client(name) for name in ["Gamma", "Gizmo", "Galaxy"]]
    await session.execute(delete(Client).where(Client.id == clients[1].id))  # type: ignore[arg-type]
    await session.commit()

    numbers = [(await allocator.allocate_client(name)).dedicated_number for name in ["Genome", "Gecko", "Garnet"]]

    # The count (2) lags behind G03; each request needs one retry, none exhausts
    assert numbers == ["G04", "G05", "G06"]


async def test_retry_never_reuses_the_losing_candidate(
    session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    await seed_client(session, "Gamma", "G01")
    await seed_client(session, "Gizmo", "G02")

    async def stale_count(session: AsyncSession, column: Any, prefix: str) -> int:
        return 0

    async def stale_highest(session: AsyncSession, column: Any, prefix: str) -> int:
        return 0

    monkeypatch.setattr(sequence, "count_with_prefix", stale_count)
    monkeypatch.setattr(sequence, "highest_sequence", stale_highest)

    client = await CodeAllocator(session, max_attempts=3).allocate_client("Genome")

    assert client.dedicated_number == "G03"


async def test_zero_max_attempts_is_rejected(session: AsyncSession) -> None:
    with pytest.raises(ValueError):
        await CodeAllocator(session, max_attempts=0).allocate_client("Gamma")


async def test_allocation_loop_ending_without_a_record_raises(
    session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def no_attempts(self: PrefixSequenceOnConflict) -> AsyncIterator[PrefixSequenceOnConflict]:
        for attempt in ():
            yield attempt

    monkeypatch.setattr(PrefixSequenceOnConflict, "__aiter__", no_attempts)

    with pytest.raises(RuntimeError):
        await CodeAllocator(session).allocate_client("Gamma")


# =============================================================================
# Contracts
# =============================================================================


async def test_contract_code_counts_prior_contracts(session: AsyncSession, user: User) -> None:
    client = await seed_client(session, "Global Tech Inc.", "G01")
    await seed_contract(session, client, user, "MS25G0101")
    await seed_contract(session, client, user, "MS25G0102")

    contract = await CodeAllocator(session).allocate_contract(
        category="SVR",
        client_dedicated_number="G01",
        year=2025,
        client_id=client.id,
        user_id=user.id,
        **CONTRACT_DATES,
    )

    assert contract.client_code == "MS25G0103"
    assert contract.renew_code == "MS25G0103"
    assert contract.category == "SVR"


async def test_contract_codes_are_scoped_by_category_year_and_client(session: AsyncSession, user: User) -> None:
    gti = await seed_client(session, "Global Tech Inc.", "G01")
    helix = await seed_client(session, "Helix", "H01")
    await seed_contract(session, gti, user, "MS25G0101")
    allocator = CodeAllocator(session)

    async def allocate(category: str, client: Client, year: int) -> str:
        contract = await allocator.allocate_contract(
            category=category,
            client_dedicated_number=client.dedicated_number,
            year=year,
            client_id=client.id,
            user_id=user.id,
            **CONTRACT_DATES,
        )
        return contract.client_code

    assert await allocate("NET", gti, 2025) == "MN25G0101"
    assert await allocate("SVR", gti, 2026) == "MS26G0101"
    assert await allocate("SVR", helix, 2025) == "MS25H0101"
    assert await allocate("SVR", gti, 2025) == "MS25G0102"


@pytest.mark.parametrize("category", ["", "BOGUS", None])
async def test_unknown_category_writes_nothing(
    session: AsyncSession,
    session_maker: async_sessionmaker,
    user: User,
    count_calls: list[str],
    category: str | None,
) -> None:
    client = await seed_client(session, "Global Tech Inc.", "G01")

    with pytest.raises(UnknownCategory):
        await CodeAllocator(session).allocate_contract(
            category=category,  # type: ignore[arg-type]
            client_dedicated_number="G01",
            year=2025,
            client_id=client.id,
            user_id=user.id,
            **CONTRACT_DATES,
        )

    assert count_calls == []
    assert await count_rows(session_maker, Contract) == 0


async def test_contract_foreign_key_violation_is_a_hard_failure(
    session: AsyncSession, session_maker: async_sessionmaker, user: User, count_calls: list[str]
) -> None:
    with pytest.raises(CodeAllocationFailed):
        await CodeAllocator(session).allocate_contract(
            category="SVR",
            client_dedicated_number="G01",
            year=2025,
            client_id=999,
            user_id=user.id,
            **CONTRACT_DATES,
        )

    assert count_calls == ["MS25G01", "MS25G01"]  # One attempt, client and renew columns
    assert await count_rows(session_maker, Contract) == 0


async def test_related_writes_commit_with_the_contract(
    session: AsyncSession, session_maker: async_sessionmaker, user: User
) -> None:
    client = await seed_client(session, "Global Tech Inc.", "G01")

    async def bump_orders(session: AsyncSession, contract: Contract) -> None:
        await session.execute(
            update(Client).where(Client.id == contract.client_id).values(no_of_orders=Client.no_of_orders + 1)
        )

    await CodeAllocator(session).allocate_contract(
        category="SVR",
        client_dedicated_number="G01",
        year=2025,
        related_writes=bump_orders,
        client_id=client.id,
        user_id=user.id,
        **CONTRACT_DATES,
    )

    async with session_maker() as other:
        stored = await other.get(Client, client.id)
    assert stored is not None
    assert stored.no_of_orders == 1


async def test_failed_related_write_leaves_no_contract(
    session: AsyncSession, session_maker: async_sessionmaker, user: User
) -> None:
    client = await seed_client(session, "Global Tech Inc.", "G01")

    async def break_counter(session: AsyncSession, contract: Contract) -> None:
        await session.execute(update(Client).where(Client.id == contract.client_id).values(no_of_orders=-1))

    with pytest.raises(CodeAllocationFailed):
        await CodeAllocator(session).allocate_contract(
            category="SVR",
            client_dedicated_number="G01",
            year=2025,
            related_writes=break_counter,
            client_id=client.id,
            user_id=user.id,
            **CONTRACT_DATES,
        )

    assert await count_rows(session_maker, Contract) == 0


async def test_concurrent_contracts_get_distinct_codes(session_maker: async_sessionmaker, user: User) -> None:
    async with session_maker() as session:
        client = await seed_client(session, "Global Tech Inc.", "G01")
    requests = 4

    async def create() -> Contract:
        async with session_maker() as session:
            return await CodeAllocator(session, max_attempts=requests).allocate_contract(
                category="SVR",
                client_dedicated_number="G01",
                year=2025,
                client_id=client.id,
                user_id=user.id,
                **CONTRACT_DATES,
            )

    contracts = await asyncio.gather(*(create() for _ in range(requests)))

    assert sorted(c.client_code for c in contracts) == [f"MS25G01{n:02d}" for n in range(1, requests + 1)]
    assert len({c.renew_code for c in contracts}) == requests


async def test_deleted_contract_does_not_block_its_prefix(session: AsyncSession, user: User) -> None:
    client = await seed_client(session, "Global Tech Inc.", "G01")
    await seed_contract(session, client, user, "MS25G0101")
    middle = await seed_contract(session, client, user, "MS25G0102")
    await seed_contract(session, client, user, "MS25G0103")
    await session.execute(delete(Contract).where(Contract.id == middle.id))  # type: ignore[arg-type]
    await session.commit()

    contract = await CodeAllocator(session).allocate_contract(
        category="SVR",
        client_dedicated_number="G01",
        year=2025,
        client_id=client.id,
        user_id=user.id,
        **CONTRACT_DATES,
    )

    assert (contract.client_code, contract.renew_code) == ("MS25G0104", "MS25G0104")
