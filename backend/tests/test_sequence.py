from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from factories import seed_client, seed_contract
from servicedesk.models import (
    CLIENT_DEDICATED_NUMBER_CONSTRAINT,
    CONTRACT_CLIENT_CODE_CONSTRAINT,
    CONTRACT_RENEW_CODE_CONSTRAINT,
    Client,
    Contract,
    User,
)
from servicedesk.services.codes.sequence import count_with_prefix, highest_sequence, violated_constraint


def _integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT INTO ...", {}, Exception(message))


async def test_count_with_prefix_matches_exact_prefix(session: AsyncSession) -> None:
    for name, number in [("Gamma", "G01"), ("Gizmo", "G02"), ("Helix", "H01"), ("Other", "XG01")]:
        await seed_client(session, name, number)

    assert await count_with_prefix(session, Client.dedicated_number, "G") == 2
    assert await count_with_prefix(session, Client.dedicated_number, "H") == 1
    assert await count_with_prefix(session, Client.dedicated_number, "Q") == 0


async def test_count_with_prefix_on_contract_codes(session: AsyncSession, user: User) -> None:
    client = await seed_client(session, "Global Tech Inc.", "G01")
    for code in ["MS25G0101", "MS25G0102", "MS24G0101", "MN25G0101"]:
        await seed_contract(session, client, user, code)

    assert await count_with_prefix(session, Contract.client_code, "MS25G01") == 2
    assert await count_with_prefix(session, Contract.renew_code, "MS25G01") == 2
    assert await count_with_prefix(session, Contract.client_code, "MS26G01") == 0


async def test_count_with_prefix_escapes_like_wildcards(session: AsyncSession) -> None:
    await seed_client(session, "Gamma", "G01")

    assert await count_with_prefix(session, Client.dedicated_number, "%") == 0
    assert await count_with_prefix(session, Client.dedicated_number, "_") == 0


async def test_highest_sequence_skips_gaps(session: AsyncSession) -> None:
    for name, number in [("Gamma", "G01"), ("Gizmo", "G07"), ("Galaxy", "G100"), ("Other", "XG99")]:
        await seed_client(session, name, number)

    assert await highest_sequence(session, Client.dedicated_number, "G") == 100
    assert await highest_sequence(session, Client.dedicated_number, "H") == 0


async def test_highest_sequence_on_contract_codes(session: AsyncSession, user: User) -> None:
    client = await seed_client(session, "Global Tech Inc.", "G01")
    for code in ["MS25G0101", "MS25G0104", "MS24G0109"]:
        await seed_contract(session, client, user, code)

    assert await highest_sequence(session, Contract.client_code, "MS25G01") == 4


def test_violated_constraint_postgresql_message() -> None:
    exc = _integrity_error(
        'duplicate key value violates unique constraint "uq_clients_dedicated_number"\n'
        "DETAIL:  Key (dedicated_number)=(G03) already exists."
    )
    assert violated_constraint(exc, [CLIENT_DEDICATED_NUMBER_CONSTRAINT]) is CLIENT_DEDICATED_NUMBER_CONSTRAINT


def test_violated_constraint_sqlite_message() -> None:
    exc = _integrity_error("UNIQUE constraint failed: contracts.renew_code")
    owned = [CONTRACT_CLIENT_CODE_CONSTRAINT, CONTRACT_RENEW_CODE_CONSTRAINT]
    assert violated_constraint(exc, owned) is CONTRACT_RENEW_CODE_CONSTRAINT


def test_violated_constraint_ignores_other_integrity_errors() -> None:
    owned = [CLIENT_DEDICATED_NUMBER_CONSTRAINT]
    for message in [
        'insert or update on table "contracts" violates foreign key constraint "contracts_client_id_fkey"',
        'duplicate key value violates unique constraint "ix_users_username"',
        "UNIQUE constraint failed: users.username",
        "NOT NULL constraint failed: clients.client_name",
        "CHECK constraint failed: ck_clients_no_of_orders",
    ]:
        assert violated_constraint(_integrity_error(message), owned) is None
