"""Contract API endpoints: CRUD and renewal."""

from fastapi import APIRouter, HTTPException, Response

from servicedesk.api.v1.contracts.schemas import (
    ContractCreateRequest,
    ContractListResponse,
    ContractRenewRequest,
    ContractResponse,
    ContractUpdateRequest,
)
from servicedesk.api.v1.dependencies import ContractServiceDep
from servicedesk.api.v1.errors import allocation_http_error
from servicedesk.services.codes.exceptions import CodeAllocationExhausted, CodeAllocationFailed
from servicedesk.services.contracts.exceptions import ContractNotFound
from servicedesk.services.exceptions import ValidationError

router = APIRouter(tags=["contracts"])


@router.get("/contracts", response_model=ContractListResponse, operation_id="listContracts")
async def list_contracts(
    service: ContractServiceDep,
    skip: int = 0,
    limit: int = 50,
) -> ContractListResponse:
    """List all contracts with pagination."""
    contracts, total = await service.list_contracts(skip=skip, limit=limit)

    return ContractListResponse(
        contracts=[ContractResponse.from_model(contract) for contract in contracts],
        total=total,
    )


@router.get("/contracts/{contract_id}", response_model=ContractResponse, operation_id="getContract")
async def get_contract(
    contract_id: int,
    service: ContractServiceDep,
) -> ContractResponse:
    """Get a single contract."""
    try:
        contract = await service.get_contract(contract_id)
        return ContractResponse.from_model(contract)
    except ContractNotFound:
        raise HTTPException(status_code=404, detail="Contract not found")


@router.post("/contracts", response_model=ContractResponse, status_code=201, operation_id="createContract")
async def create_contract(
    body: ContractCreateRequest,
    service: ContractServiceDep,
) -> ContractResponse:
    """Create a contract. Client and renew codes are allocated from category, year and client."""
    try:
        contract = await service.create_contract(**body.model_dump())
    except ValidationError as exc:
        # Unknown category, end date before start date, missing client or user
        raise HTTPException(status_code=400, detail=str(exc))
    except (CodeAllocationExhausted, CodeAllocationFailed) as exc:
        raise allocation_http_error(exc) from exc
    return ContractResponse.from_model(contract)


@router.post(
    "/contracts/{contract_id}/renew",
    response_model=ContractResponse,
    status_code=201,
    operation_id="renewContract",
)
async def renew_contract(
    contract_id: int,
    body: ContractRenewRequest,
    service: ContractServiceDep,
) -> ContractResponse:
    """Renew a contract into a successor record with freshly allocated codes."""
    try:
        contract = await service.renew_contract(contract_id, **body.model_dump())
    except ContractNotFound:
        raise HTTPException(status_code=404, detail="Contract not found")
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except (CodeAllocationExhausted, CodeAllocationFailed) as exc:
        raise allocation_http_error(exc) from exc
    return ContractResponse.from_model(contract)


@router.put("/contracts/{contract_id}", response_model=ContractResponse, operation_id="updateContract")
async def update_contract(
    contract_id: int,
    body: ContractUpdateRequest,
    service: ContractServiceDep,
) -> ContractResponse:
    """Update a contract. Category, client and the allocated codes cannot change."""
    try:
        contract = await service.update_contract(contract_id, **body.model_dump(exclude_unset=True))
        return ContractResponse.from_model(contract)
    except ContractNotFound:
        raise HTTPException(status_code=404, detail="Contract not found")
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/contracts/{contract_id}", status_code=204, operation_id="deleteContract")
async def delete_contract(
    contract_id: int,
    service: ContractServiceDep,
) -> Response:
    """Delete a contract."""
    try:
        await service.delete_contract(contract_id)
    except ContractNotFound:
        raise HTTPException(status_code=404, detail="Contract not found")
    return Response(status_code=204)
