"""API schemas for maintenance record endpoints."""

from datetime import date, datetime, time

from pydantic import BaseModel, Field, field_serializer, field_validator

from servicedesk.models.maintenance import MaintenanceRecord, MaintenanceStatus
from servicedesk.utils.datetime_utils import to_api_timezone

# =============================================================================
# Response Schemas
# =============================================================================


class PicResponse(BaseModel):
    """Person in charge of a maintenance record."""

    user_id: int
    username: str


class MaintenanceRecordResponse(BaseModel):
    """Maintenance record response schema."""

    id: int
    status: MaintenanceStatus
    client_id: int
    client_name: str | None
    user_id: int
    creator_username: str | None
    pics: list[PicResponse]

    service_code: str
    jobnote: str
    service_date: date | None
    arrive_time: time | None
    depart_time: time | None
    completion_date: date | None

    location_district: str | None
    is_warranty: bool | None
    sales: str | None
    product_model: str | None
    serial_no: str | None
    problem_description: str | None
    solution_details: str | None
    labor_details: str | None
    parts_details: str | None
    remark: str | None
    service_type: str | None
    product_type: str | None
    support_method: str | None
    symptom_classification: str | None
    alias: str | None

    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_timestamps(self, dt: datetime) -> str:
        """Serialize datetime to API timezone."""
        localized_dt = to_api_timezone(dt)
        assert localized_dt is not None
        return localized_dt.isoformat()

    @classmethod
    def from_model(cls, record: MaintenanceRecord) -> "MaintenanceRecordResponse":
        """Create response from a MaintenanceRecord loaded with its relations."""
        return cls.model_validate(
            {
                **record.model_dump(),
                "client_name": record.client_record.client_name if record.client_record else None,
                "creator_username": record.user.username if record.user else None,
                "pics": [PicResponse(user_id=pic.id, username=pic.username) for pic in record.pics],  # type: ignore[arg-type]
            }
        )


class MaintenanceRecordListResponse(BaseModel):
    """Maintenance record list response schema."""

    records: list[MaintenanceRecordResponse]
    total: int


# =============================================================================
# Request Schemas
# =============================================================================


class MaintenanceDetails(BaseModel):
    """Optional descriptive fields of a maintenance record."""

    service_date: date | None = None
    arrive_time: time | None = None
    depart_time: time | None = None
    completion_date: date | None = None
    location_district: str | None = None
    is_warranty: bool | None = None
    sales: str | None = None
    product_model: str | None = None
    serial_no: str | None = None
    problem_description: str | None = None
    solution_details: str | None = None
    labor_details: str | None = None
    parts_details: str | None = None
    remark: str | None = None
    service_type: str | None = None
    product_type: str | None = None
    support_method: str | None = None
    symptom_classification: str | None = None
    alias: str | None = None


class MaintenanceRecordCreateRequest(MaintenanceDetails):
    """Request body for record creation. New records always start in status "New"."""

    user_id: int  # Creator
    client_id: int
    jobnote: str = Field(min_length=1)
    service_code: str = Field(min_length=1)
    pic_ids: list[int] = Field(default_factory=list)


class MaintenanceRecordUpdateRequest(MaintenanceDetails):
    """Request body for record updates. Only the fields sent are changed.

    ``pic_ids``, when sent, replaces the whole PIC list.
    """

    user_id: int | None = None  # Modifier
    status: MaintenanceStatus | None = None
    pic_ids: list[int] | None = None
    client_id: int | None = None
    jobnote: str | None = Field(default=None, min_length=1)
    service_code: str | None = Field(default=None, min_length=1)

    @field_validator("user_id", "status", "pic_ids", "client_id", "jobnote", "service_code")
    @classmethod
    def reject_null(cls, v: object) -> object:
        """Explicit null would clear a required column."""
        if v is None:
            raise ValueError("value cannot be null")
        return v
