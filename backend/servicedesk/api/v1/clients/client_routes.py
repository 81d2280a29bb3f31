"""Client CRUD API endpoints."""

from fastapi import APIRouter, HTTPException, Response

from servicedesk.api.v1.clients.schemas import (
    ClientCreateRequest,
    ClientListResponse,
    ClientResponse,
    ClientUpdateRequest,
)
from servicedesk.api.v1.dependencies import ClientServiceDep
from servicedesk.api.v1.errors import allocation_http_error
from servicedesk.services.clients.exceptions import ClientInUse, ClientNotFound
from servicedesk.services.codes.exceptions import CodeAllocationExhausted, CodeAllocationFailed

router = APIRouter(tags=["clients"])


@router.get("/clients", response_model=ClientListResponse, operation_id="listClients")
async def list_clients(
    service: ClientServiceDep,
    skip: int = 0,
    limit: int = 50,
) -> ClientListResponse:
    """List all clients with pagination."""
    clients, total = await service.list_clients(skip=skip, limit=limit)

    return ClientListResponse(
        clients=[ClientResponse.from_model(client) for client in clients],
        total=total,
    )


@router.get("/clients/{client_id}", response_model=ClientResponse, operation_id="getClient")
async def get_client(
    client_id: int,
    service: ClientServiceDep,
) -> ClientResponse:
    """Get a single client."""
    try:
        client = await service.get_client(client_id)
        return ClientResponse.from_model(client)
    except ClientNotFound:
        raise HTTPException(status_code=404, detail="Client not found")


@router.post("/clients", response_model=ClientResponse, status_code=201, operation_id="createClient")
async def create_client(
    body: ClientCreateRequest,
    service: ClientServiceDep,
) -> ClientResponse:
    """Create a client. Its dedicated number is allocated from the client name."""
    contact = body.model_dump(exclude={"client_name"})
    try:
        client = await service.create_client(body.client_name, **contact)
    except (CodeAllocationExhausted, CodeAllocationFailed) as exc:
        raise allocation_http_error(exc) from exc
    return ClientResponse.from_model(client)


@router.put("/clients/{client_id}", response_model=ClientResponse, operation_id="updateClient")
async def update_client(
    client_id: int,
    body: ClientUpdateRequest,
    service: ClientServiceDep,
) -> ClientResponse:
    """Update client name and contact details. The dedicated number cannot change."""
    try:
        client = await service.update_client(client_id, **body.model_dump(exclude_unset=True))
        return ClientResponse.from_model(client)
    except ClientNotFound:
        raise HTTPException(status_code=404, detail="Client not found")


@router.delete("/clients/{client_id}", status_code=204, operation_id="deleteClient")
async def delete_client(
    client_id: int,
    service: ClientServiceDep,
) -> Response:
    """Delete a client nothing else references."""
    try:
        await service.delete_client(client_id)
    except ClientNotFound:
        raise HTTPException(status_code=404, detail="Client not found")
    except ClientInUse:
        raise HTTPException(status_code=400, detail="Cannot delete client with associated contracts, projects or maintenance records")
    return Response(status_code=204)
