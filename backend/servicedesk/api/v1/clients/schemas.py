"""API schemas for client endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, field_serializer, field_validator

from servicedesk.models.client import Client
from servicedesk.utils.datetime_utils import to_api_timezone

# =============================================================================
# Response Schemas
# =============================================================================


class ClientResponse(BaseModel):
    """Client response schema."""

    id: int
    client_name: str
    dedicated_number: str
    contact_person: str | None
    email: str | None
    phone: str | None
    address: str | None
    no_of_orders: int
    no_of_renew: int
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> str:
        """Serialize datetime to API timezone."""
        localized_dt = to_api_timezone(dt)
        assert localized_dt is not None
        return localized_dt.isoformat()

    @classmethod
    def from_model(cls, client: Client) -> "ClientResponse":
        """Create response from Client model."""
        return cls(
            id=client.id,  # type: ignore[arg-type]
            client_name=client.client_name,
            dedicated_number=client.dedicated_number,
            contact_person=client.contact_person,
            email=client.email,
            phone=client.phone,
            address=client.address,
            no_of_orders=client.no_of_orders,
            no_of_renew=client.no_of_renew,
            created_at=client.created_at,
        )


class ClientListResponse(BaseModel):
    """Client list response schema."""

    clients: list[ClientResponse]
    total: int


# =============================================================================
# Request Schemas
# =============================================================================


class ClientCreateRequest(BaseModel):
    """Request body for client creation. The dedicated number is allocated, never supplied."""

    client_name: str = Field(min_length=1)
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None


class ClientUpdateRequest(BaseModel):
    """Request body for client updates. Only the fields sent are changed."""

    client_name: str | None = Field(default=None, min_length=1)
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None

    @field_validator("client_name")
    @classmethod
    def reject_null_name(cls, v: str | None) -> str:
        """Explicit null would clear a required column."""
        if v is None:
            raise ValueError("client_name cannot be null")
        return v
