"""Maintenance record service.

Records move through MaintenanceStatus; each target status has field
requirements that are checked against the record as it would look after the
update, not just against the fields being sent.
"""

from collections.abc import Sequence
from datetime import date, time
from typing import Any, Literal

import structlog
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.sql.expression import SelectOfScalar

from servicedesk.models.client import Client
from servicedesk.models.contract import Contract
from servicedesk.models.maintenance import MaintenanceRecord, MaintenanceRecordPic, MaintenanceStatus
from servicedesk.models.timestamps import utc_now
from servicedesk.models.user import User
from servicedesk.services.maintenance.exceptions import InvalidMaintenanceRecord, MaintenanceRecordNotFound

logger = structlog.get_logger(__name__)

# Fields a caller may change; status, PICs and the modifier go through dedicated arguments
EDITABLE_FIELDS = (
    "client_id",
    "jobnote",
    "service_code",
    "service_date",
    "arrive_time",
    "depart_time",
    "completion_date",
    "location_district",
    "is_warranty",
    "sales",
    "product_model",
    "serial_no",
    "problem_description",
    "solution_details",
    "labor_details",
    "parts_details",
    "remark",
    "service_type",
    "product_type",
    "support_method",
    "symptom_classification",
    "alias",
)

SORTABLE_COLUMNS = {
    "id": MaintenanceRecord.id,
    "status": MaintenanceRecord.status,
    "service_date": MaintenanceRecord.service_date,
    "created_at": MaintenanceRecord.created_at,
    "updated_at": MaintenanceRecord.updated_at,
}
SortColumn = Literal["id", "status", "service_date", "created_at", "updated_at"]


def status_requirements(
    status: MaintenanceStatus,
    *,
    pic_count: int,
    service_date: date | None,
    completion_date: date | None,
    solution_details: str | None,
) -> list[str]:
    """Return the unmet requirements for a record to hold ``status``."""
    errors = []
    if status is MaintenanceStatus.PENDING and pic_count < 1:
        errors.append("At least one PIC is required for Pending")
    elif status is MaintenanceStatus.IN_PROGRESS and service_date is None:
        errors.append("service_date is required for In Progress")
    elif status is MaintenanceStatus.CLOSED:
        if completion_date is None:
            errors.append("completion_date is required for Closed")
        if not solution_details:
            errors.append("solution_details is required for Closed")
    return errors


def visit_time_errors(arrive_time: time | None, depart_time: time | None) -> list[str]:
    if arrive_time is not None and depart_time is not None and arrive_time > depart_time:
        return ["arrive_time must be <= depart_time"]
    return []


def _with_relations(statement: SelectOfScalar[MaintenanceRecord]) -> SelectOfScalar[MaintenanceRecord]:
    return statement.options(
        selectinload(MaintenanceRecord.pics),  # type: ignore[arg-type]
        selectinload(MaintenanceRecord.client_record),  # type: ignore[arg-type]
        selectinload(MaintenanceRecord.user),  # type: ignore[arg-type]
    )


class MaintenanceService:
    """Service for maintenance record CRUD and status workflow."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_records(
        self,
        *,
        skip: int = 0,
        limit: int = 50,
        statuses: Sequence[MaintenanceStatus] = (),
        service_code: str | None = None,
        client_name: str | None = None,
        jobnote: str | None = None,
        location_district: str | None = None,
        pic_name: str | None = None,
        sort_by: SortColumn = "id",
        descending: bool = True,
    ) -> tuple[list[MaintenanceRecord], int]:
        """List records matching all given filters. Text filters are case-insensitive substrings.

        Returns (records, total_count).
        """
        filters: list[Any] = []
        if statuses:
            filters.append(MaintenanceRecord.status.in_(statuses))  # type: ignore[attr-defined]
        if service_code:
            filters.append(MaintenanceRecord.service_code.icontains(service_code, autoescape=True))  # type: ignore[attr-defined]
        if jobnote:
            filters.append(MaintenanceRecord.jobnote.icontains(jobnote, autoescape=True))  # type: ignore[attr-defined]
        if location_district:
            filters.append(
                MaintenanceRecord.location_district.icontains(location_district, autoescape=True)  # type: ignore[union-attr]
            )
        if client_name:
            matching_clients = select(Client.id).where(
                Client.client_name.icontains(client_name, autoescape=True)  # type: ignore[attr-defined]
            )
            filters.append(MaintenanceRecord.client_id.in_(matching_clients))  # type: ignore[attr-defined]
        if pic_name:
            assigned = (
                select(MaintenanceRecordPic.maintenance_record_id)
                .join(User, User.id == MaintenanceRecordPic.user_id)  # type: ignore[arg-type]
                .where(User.username.icontains(pic_name, autoescape=True))  # type: ignore[attr-defined]
            )
            filters.append(MaintenanceRecord.id.in_(assigned))  # type: ignore[union-attr]

        column = SORTABLE_COLUMNS[sort_by]
        order = column.desc() if descending else column.asc()  # type: ignore[union-attr]
        statement = (
            _with_relations(select(MaintenanceRecord))
            .where(*filters)
            .order_by(order, MaintenanceRecord.id)  # type: ignore[arg-type]
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(statement)
        records = list(result.scalars().all())

        count_result = await self.session.execute(
            select(func.count()).select_from(MaintenanceRecord).where(*filters)
        )
        total = count_result.scalar() or 0

        return records, total

    async def get_record(self, record_id: int) -> MaintenanceRecord:
        """Get a record with its PICs, client and creator loaded."""
        statement = (
            _with_relations(select(MaintenanceRecord))
            .where(MaintenanceRecord.id == record_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(statement)
        record = result.scalars().first()
        if not record:
            raise MaintenanceRecordNotFound()
        return record

    async def create_record(
        self,
        *,
        user_id: int,
        client_id: int,
        jobnote: str,
        service_code: str,
        pic_ids: Sequence[int] = (),
        **fields: Any,
    ) -> MaintenanceRecord:
        """Create a record in status NEW, assigning the given PICs."""
        errors = visit_time_errors(fields.get("arrive_time"), fields.get("depart_time"))
        if errors:
            raise InvalidMaintenanceRecord("; ".join(errors))

        await self._check_client(client_id)
        await self._check_user(user_id)
        await self._check_jobnote(jobnote)
        pics = await self._load_pics(pic_ids)

        record = MaintenanceRecord(
            user_id=user_id,
            client_id=client_id,
            jobnote=jobnote,
            service_code=service_code,
            status=MaintenanceStatus.NEW,
            **fields,
        )
        record.pics = pics
        self.session.add(record)
        await self.session.commit()
        logger.info("Created maintenance record", record_id=record.id, client_id=client_id, pics=len(pics))

        return await self.get_record(record.id)  # type: ignore[arg-type]

    async def update_record(
        self,
        record_id: int,
        *,
        user_id: int | None = None,
        status: MaintenanceStatus | None = None,
        pic_ids: Sequence[int] | None = None,
        **changes: Any,
    ) -> MaintenanceRecord:
        """Apply changes, optionally moving the record to ``status`` and replacing its PICs.

        ``user_id`` is recorded as the last modifier. Requirements of the
        resulting status are enforced even when the status itself is unchanged.
        """
        record = await self.get_record(record_id)
        for field in changes:
            if field not in EDITABLE_FIELDS:
                raise ValueError(f"Field {field!r} cannot be updated")

        def after(field: str) -> Any:
            return changes[field] if field in changes else getattr(record, field)

        target_status = status if status is not None else record.status
        errors = visit_time_errors(after("arrive_time"), after("depart_time"))
        errors += status_requirements(
            target_status,
            pic_count=len(set(pic_ids)) if pic_ids is not None else len(record.pics),
            service_date=after("service_date"),
            completion_date=after("completion_date"),
            solution_details=after("solution_details"),
        )
        if errors:
            raise InvalidMaintenanceRecord("; ".join(errors))

        if "client_id" in changes:
            await self._check_client(changes["client_id"])
        if "jobnote" in changes:
            await self._check_jobnote(changes["jobnote"])
        if user_id is not None:
            await self._check_user(user_id)
        pics = await self._load_pics(pic_ids) if pic_ids is not None else None

        previous_status = record.status
        for field, value in changes.items():
            setattr(record, field, value)
        record.status = target_status
        if user_id is not None:
            record.user_id = user_id
        if pics is not None:
            record.pics = pics
        record.updated_at = utc_now()
        await self.session.commit()

        if target_status != previous_status:
            logger.info(
                "Maintenance record status changed",
                record_id=record_id,
                from_status=previous_status,
                to_status=target_status,
            )
        return await self.get_record(record_id)

    async def delete_record(self, record_id: int) -> None:
        """Delete a record and its PIC assignments."""
        await self.get_record(record_id)
        await self.session.execute(
            delete(MaintenanceRecordPic).where(MaintenanceRecordPic.maintenance_record_id == record_id)  # type: ignore[arg-type]
        )
        await self.session.execute(delete(MaintenanceRecord).where(MaintenanceRecord.id == record_id))  # type: ignore[arg-type]
        await self.session.commit()
        logger.info("Deleted maintenance record", record_id=record_id)

    async def _check_client(self, client_id: int) -> None:
        if not await self.session.get(Client, client_id):
            raise InvalidMaintenanceRecord("Invalid client_id")

    async def _check_user(self, user_id: int) -> None:
        if not await self.session.get(User, user_id):
            raise InvalidMaintenanceRecord("Invalid user_id")

    async def _check_jobnote(self, jobnote: str) -> None:
        result = await self.session.execute(select(Contract.id).where(Contract.jobnote == jobnote).limit(1))
        if result.first() is None:
            raise InvalidMaintenanceRecord(f'Job note "{jobnote}" not found in any existing contract.')

    async def _load_pics(self, pic_ids: Sequence[int]) -> list[User]:
        unique_ids = list(dict.fromkeys(pic_ids))
        if not unique_ids:
            return []
        result = await self.session.execute(select(User).where(User.id.in_(unique_ids)))  # type: ignore[union-attr]
        users = {user.id: user for user in result.scalars().all()}
        missing = [pic_id for pic_id in unique_ids if pic_id not in users]
        if missing:
            raise InvalidMaintenanceRecord(f"Invalid pic_ids: {', '.join(map(str, missing))}")
        return [users[pic_id] for pic_id in unique_ids]
