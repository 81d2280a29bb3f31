"""User API endpoints (contract creators)."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from servicedesk.api.v1.dependencies import UserServiceDep
from servicedesk.models.user import User
from servicedesk.services.users.exceptions import UsernameTaken, UserNotFound

router = APIRouter(tags=["users"])


class UserCreateRequest(BaseModel):
    """Request body for user creation."""

    username: str = Field(min_length=1)
    email: str | None = None


class UserResponse(BaseModel):
    """User response schema."""

    id: int
    username: str
    email: str | None

    @classmethod
    def from_model(cls, user: User) -> "UserResponse":
        """Create response from User model."""
        return cls(id=user.id, username=user.username, email=user.email)  # type: ignore[arg-type]


@router.post("/users", response_model=UserResponse, status_code=201, operation_id="createUser")
async def create_user(body: UserCreateRequest, service: UserServiceDep) -> UserResponse:
    """Create a user."""
    try:
        user = await service.create_user(body.username, body.email)
    except UsernameTaken:
        raise HTTPException(status_code=400, detail="Username already exists")
    return UserResponse.from_model(user)


@router.get("/users/{user_id}", response_model=UserResponse, operation_id="getUser")
async def get_user(user_id: int, service: UserServiceDep) -> UserResponse:
    """Get a single user."""
    try:
        return UserResponse.from_model(await service.get_user(user_id))
    except UserNotFound:
        raise HTTPException(status_code=404, detail="User not found")
