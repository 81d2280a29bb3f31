"""Maintenance record API endpoints."""

from typing import Annotated, Literal

from fastapi import APIRouter, HTTPException, Query, Response

from servicedesk.api.v1.dependencies import MaintenanceServiceDep
from servicedesk.api.v1.maintenance.schemas import (
    MaintenanceRecordCreateRequest,
    MaintenanceRecordListResponse,
    MaintenanceRecordResponse,
    MaintenanceRecordUpdateRequest,
)
from servicedesk.models.maintenance import MaintenanceStatus
from servicedesk.services.maintenance.exceptions import InvalidMaintenanceRecord, MaintenanceRecordNotFound
from servicedesk.services.maintenance.maintenance_service import SortColumn

router = APIRouter(tags=["maintenance"])


@router.get("/maintenance-records", response_model=MaintenanceRecordListResponse, operation_id="listMaintenanceRecords")
async def list_maintenance_records(
    service: MaintenanceServiceDep,
    statuses: Annotated[list[MaintenanceStatus], Query()] = [],  # noqa: B006
    service_code: str | None = None,
    client_name: str | None = None,
    jobnote: str | None = None,
    location_district: str | None = None,
    pic_name: str | None = None,
    sort_by: SortColumn = "id",
    sort_dir: Literal["asc", "desc"] = "desc",
    skip: int = 0,
    limit: int = 50,
) -> MaintenanceRecordListResponse:
    """List maintenance records. Text filters match case-insensitive substrings."""
    records, total = await service.list_records(
        skip=skip,
        limit=limit,
        statuses=statuses,
        service_code=service_code,
        client_name=client_name,
        jobnote=jobnote,
        location_district=location_district,
        pic_name=pic_name,
        sort_by=sort_by,
        descending=sort_dir == "desc",
    )

    return MaintenanceRecordListResponse(
        records=[MaintenanceRecordResponse.from_model(record) for record in records],
        total=total,
    )


@router.get(
    "/maintenance-records/{record_id}",
    response_model=MaintenanceRecordResponse,
    operation_id="getMaintenanceRecord",
)
async def get_maintenance_record(
    record_id: int,
    service: MaintenanceServiceDep,
) -> MaintenanceRecordResponse:
    """Get a single maintenance record with its PICs."""
    try:
        return MaintenanceRecordResponse.from_model(await service.get_record(record_id))
    except MaintenanceRecordNotFound:
        raise HTTPException(status_code=404, detail="Maintenance record not found")


@router.post(
    "/maintenance-records",
    response_model=MaintenanceRecordResponse,
    status_code=201,
    operation_id="createMaintenanceRecord",
)
async def create_maintenance_record(
    body: MaintenanceRecordCreateRequest,
    service: MaintenanceServiceDep,
) -> MaintenanceRecordResponse:
    """Create a maintenance record in status "New"."""
    try:
        record = await service.create_record(**body.model_dump())
    except InvalidMaintenanceRecord as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return MaintenanceRecordResponse.from_model(record)


@router.put(
    "/maintenance-records/{record_id}",
    response_model=MaintenanceRecordResponse,
    operation_id="updateMaintenanceRecord",
)
async def update_maintenance_record(
    record_id: int,
    body: MaintenanceRecordUpdateRequest,
    service: MaintenanceServiceDep,
) -> MaintenanceRecordResponse:
    """Update a record, optionally moving it to another status or replacing its PICs."""
    try:
        record = await service.update_record(record_id, **body.model_dump(exclude_unset=True))
        return MaintenanceRecordResponse.from_model(record)
    except MaintenanceRecordNotFound:
        raise HTTPException(status_code=404, detail="Maintenance record not found")
    except InvalidMaintenanceRecord as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/maintenance-records/{record_id}", status_code=204, operation_id="deleteMaintenanceRecord")
async def delete_maintenance_record(
    record_id: int,
    service: MaintenanceServiceDep,
) -> Response:
    """Delete a maintenance record."""
    try:
        await service.delete_record(record_id)
    except MaintenanceRecordNotFound:
        raise HTTPException(status_code=404, detail="Maintenance record not found")
    return Response(status_code=204)
