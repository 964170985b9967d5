"""Router for user registration."""

from fastapi import APIRouter, status

from secretsanta.domain.entities import User
from secretsanta.infrastructure.api.dependencies import GroupServiceDep
from secretsanta.infrastructure.api.schemas import UserCreate, UserResponse

router = APIRouter(tags=["Users"])


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
)
async def register_user(user_data: UserCreate, service: GroupServiceDep) -> User:
    """Register a new user. Names are unique."""
    return await service.register_user(user_data.name)
