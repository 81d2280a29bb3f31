"""Prefix-counted sequence numbers with retry on unique constraint conflict."""

from collections.abc import AsyncIterator, Sequence
from typing import Any

import structlog
from sqlalchemy import UniqueConstraint, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from servicedesk.services.codes.exceptions import CodeAllocationExhausted, CodeAllocationFailed

logger = structlog.get_logger(__name__)

# Errors raised by the store or the driver below it; anything else is a bug
STORE_ERRORS: tuple[type[BaseException], ...] = (SQLAlchemyError, TimeoutError, OSError)


async def count_with_prefix(session: AsyncSession, column: Any, prefix: str) -> int:
    """Count persisted rows whose ``column`` starts with ``prefix``.

    Reads committed state only. A concurrent insert may land right after this
    returns, so the result is a hint for the next sequence number.
    """
    stmt = select(func.count()).select_from(column.class_).where(column.startswith(prefix, autoescape=True))
    result = await session.execute(stmt)
    count: int = result.scalar_one()
    return count


async def highest_sequence(session: AsyncSession, column: Any, prefix: str) -> int:
    """Highest numeric suffix among codes in ``column`` starting with ``prefix``, 0 if none.

    Unlike the count, this stays correct after rows under the prefix are deleted.
    """
    stmt = select(column).where(column.startswith(prefix, autoescape=True))
    result = await session.execute(stmt)
    suffixes = (code[len(prefix) :] for code in result.scalars())
    return max((int(suffix) for suffix in suffixes if suffix.isascii() and suffix.isdigit()), default=0)


def violated_constraint(exc: IntegrityError, constraints: Sequence[UniqueConstraint]) -> UniqueConstraint | None:
    """Return the owned unique constraint an IntegrityError reports, if any.

    Understands PostgreSQL (``violates unique constraint "<name>"``) and
    SQLite (``UNIQUE constraint failed: <table>.<column>``) messages.
    """
    error_str = str(exc.orig if exc.orig is not None else exc).lower()
    for constraint in constraints:
        if constraint.name and f'"{constraint.name}"'.lower() in error_str:
            return constraint
        if "unique constraint failed" in error_str and constraint.table is not None:
            columns = ", ".join(f"{constraint.table.name}.{column.name}" for column in constraint.columns)
            if f"unique constraint failed: {columns}".lower() in error_str:
                return constraint
    return None


class PrefixSequenceOnConflict:
    """Async iterator with per-attempt transactions, retried on unique constraint conflict.

    Each iteration counts the rows whose code columns already start with
    ``prefix`` and offers ``count + 1`` per column as the candidate sequence.
    After a conflict the candidate also moves past the one that lost and past
    the highest sequence already stored, so gaps left by deletes are skipped.
    The ``async with attempt`` body performs the insert (plus any tightly
    coupled writes) and flushes:

    - clean exit commits the transaction and ends the loop
    - a unique violation on one of ``constraints`` rolls back and recounts
    - any other store error rolls back and raises CodeAllocationFailed
    - running out of attempts raises CodeAllocationExhausted

    The session's transaction belongs to the attempt: work pending before the
    loop is committed or rolled back with it.

    Usage:
        async for attempt in PrefixSequenceOnConflict(
            session=self.session,
            prefix="G",
            code_columns=(Client.dedicated_number,),
            constraints=(CLIENT_DEDICATED_NUMBER_CONSTRAINT,),
        ):
            async with attempt:
                client = Client(
                    client_name=name,
                    dedicated_number=format_sequence("G", attempt.sequence(Client.dedicated_number)),
                )
                session.add(client)
                await session.flush()
    """

    def __init__(
        self,
        session: AsyncSession,
        prefix: str,
        code_columns: Sequence[Any],  # InstrumentedAttribute at runtime
        constraints: Sequence[UniqueConstraint],
        max_attempts: int = 5,
    ):
        self.session = session
        self.prefix = prefix
        self.code_columns = tuple(code_columns)
        self.constraints = tuple(constraints)
        self.max_attempts = max_attempts
        self.current_attempt = 0
        self._sequences: dict[str, int] | None = None
        self._success = False

        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        if not self.code_columns:
            raise ValueError("At least one code column is required.")
        if any(not constraint.name for constraint in self.constraints):
            raise ValueError("UniqueConstraint must have a name for conflict detection.")

    async def __aiter__(self) -> AsyncIterator["PrefixSequenceOnConflict"]:
        while self.current_attempt < self.max_attempts and not self._success:
            self.current_attempt += 1
            self._sequences = await self._next_sequences()
            yield self
        if not self._success:
            logger.error(
                "Code allocation exhausted",
                prefix=self.prefix,
                attempts=self.current_attempt,
            )
            raise CodeAllocationExhausted(self.prefix, self.current_attempt)

    def sequence(self, column: Any) -> int:
        """Candidate sequence number for ``column`` in the current attempt."""
        if self._sequences is None:
            raise RuntimeError("Sequence not yet calculated for this attempt.")
        return self._sequences[column.key]

    async def _next_sequences(self) -> dict[str, int]:
        previous = self._sequences
        sequences: dict[str, int] = {}
        try:
            for column in self.code_columns:
                candidate = await count_with_prefix(self.session, column, self.prefix) + 1
                if previous is not None:
                    # The last candidate lost; the count lags behind when codes under the prefix were deleted
                    highest = await highest_sequence(self.session, column, self.prefix)
                    candidate = max(candidate, previous[column.key] + 1, highest + 1)
                sequences[column.key] = candidate
        except STORE_ERRORS as exc:
            await self._rollback()
            raise CodeAllocationFailed(self.prefix, f"counting existing codes failed: {exc}") from exc
        return sequences

    async def __aenter__(self) -> "PrefixSequenceOnConflict":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> bool:
        if exc_val is None:
            try:
                await self.session.commit()
            except STORE_ERRORS as exc:
                # Without an explicit flush the insert only reaches the store here
                return await self._handle_store_error(exc)
            self._success = True
            return False
        if isinstance(exc_val, STORE_ERRORS):
            return await self._handle_store_error(exc_val)
        await self._rollback()
        return False  # Re-raise validation errors, bugs and cancellation untouched

    async def _handle_store_error(self, exc: BaseException) -> bool:
        await self._rollback()
        if isinstance(exc, IntegrityError):
            constraint = violated_constraint(exc, self.constraints)
            if constraint is not None:
                logger.warning(
                    "Unique constraint conflict, retrying",
                    attempt=self.current_attempt,
                    max_attempts=self.max_attempts,
                    constraint=constraint.name,
                    prefix=self.prefix,
                )
                return True  # Suppress exception, allow retry
        raise CodeAllocationFailed(self.prefix, str(exc)) from exc

    async def _rollback(self) -> None:
        try:
            await self.session.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback after failed allocation attempt failed", prefix=self.prefix)
