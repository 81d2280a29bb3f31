"""API schemas for contract endpoints."""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_serializer, field_validator

from servicedesk.models.contract import Contract
from servicedesk.utils.datetime_utils import to_api_timezone

# =============================================================================
# Response Schemas
# =============================================================================


class ContractResponse(BaseModel):
    """Contract response schema."""

    id: int
    client_id: int
    user_id: int
    renewed_from_id: int | None
    project_id: int | None
    category: str
    client_code: str
    renew_code: str
    start_date: date
    end_date: date

    client: str | None = None
    alias: str | None = None
    jobnote: str | None = None
    sales: str | None = None
    contract_name: str | None = None
    location: str | None = None
    t1: str | None = None
    t2: str | None = None
    t3: str | None = None
    preventive: str | None = None
    report: str | None = None
    other: str | None = None
    contract_status: str | None = None
    remarks: str | None = None
    period: str | None = None
    response_time: str | None = None
    service_time: str | None = None
    spare_parts_provider: str | None = None

    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> str:
        """Serialize datetime to API timezone."""
        localized_dt = to_api_timezone(dt)
        assert localized_dt is not None
        return localized_dt.isoformat()

    @classmethod
    def from_model(cls, contract: Contract) -> "ContractResponse":
        """Create response from Contract model."""
        return cls.model_validate(contract, from_attributes=True)


class ContractListResponse(BaseModel):
    """Contract list response schema."""

    contracts: list[ContractResponse]
    total: int


# =============================================================================
# Request Schemas
# =============================================================================


class ContractDetails(BaseModel):
    """Free-text contract fields, copied to the successor on renewal."""

    client: str | None = None
    alias: str | None = None
    sales: str | None = None
    contract_name: str | None = None
    location: str | None = None
    t1: str | None = None
    t2: str | None = None
    t3: str | None = None
    preventive: str | None = None
    report: str | None = None
    other: str | None = None
    contract_status: str | None = None
    remarks: str | None = None
    period: str | None = None
    response_time: str | None = None
    service_time: str | None = None
    spare_parts_provider: str | None = None


class ContractCreateRequest(ContractDetails):
    """Request body for contract creation. Codes are allocated, never supplied."""

    client_id: int
    user_id: int
    start_date: date
    end_date: date
    category: str
    jobnote: str = Field(min_length=1)
    year: int | None = Field(default=None, ge=2000, le=2099)
    project_id: int | None = None


class ContractRenewRequest(BaseModel):
    """Request body for renewing a contract into a successor record."""

    start_date: date
    end_date: date
    user_id: int | None = None
    category: str | None = None
    year: int | None = Field(default=None, ge=2000, le=2099)


class ContractUpdateRequest(ContractDetails):
    """Request body for contract updates. Only the fields sent are changed.

    Category, client and the allocated codes are not part of this body; they
    are fixed once the codes are allocated.
    """

    user_id: int | None = None
    project_id: int | None = None  # Explicit null detaches the contract from its project
    start_date: date | None = None
    end_date: date | None = None
    jobnote: str | None = Field(default=None, min_length=1)

    @field_validator("user_id", "start_date", "end_date", "jobnote")
    @classmethod
    def reject_null(cls, v: object) -> object:
        """Explicit null would clear a required column."""
        if v is None:
            raise ValueError("value cannot be null")
        return v
