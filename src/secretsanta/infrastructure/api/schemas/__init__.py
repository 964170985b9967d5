"""API Schemas for request/response validation."""

from secretsanta.infrastructure.api.schemas.group_schemas import (
    AdminPromote,
    CloseGroupResponse,
    GroupCreate,
    GroupResponse,
    MemberListResponse,
    MembershipResponse,
    RecipientResponse,
)
from secretsanta.infrastructure.api.schemas.user_schemas import UserCreate, UserResponse

__all__ = [
    "AdminPromote",
    "CloseGroupResponse",
    "GroupCreate",
    "GroupResponse",
    "MemberListResponse",
    "MembershipResponse",
    "RecipientResponse",
    "UserCreate",
    "UserResponse",
]
