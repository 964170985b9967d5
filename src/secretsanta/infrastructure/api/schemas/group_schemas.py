"""Pydantic schemas for Group operations."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from secretsanta.domain.entities import Role
from secretsanta.infrastructure.api.schemas.user_schemas import check_username


class GroupCreate(BaseModel):
    """Schema for creating a group."""

    name: str = Field(..., min_length=1, max_length=100, description="Group name")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Keep the name usable as a single URL path segment."""
        if v != v.strip():
            raise ValueError("Group name cannot start or end with whitespace")
        if "/" in v:
            raise ValueError("Group name cannot contain '/'")
        if v in (".", ".."):
            raise ValueError("Group name cannot be '.' or '..'")
        return v


class GroupResponse(BaseModel):
    """Schema for group response."""

    id: str = Field(..., description="Group ID")
    name: str = Field(..., description="Group name")
    is_closed: bool = Field(..., description="Whether assignments have been drawn")

    model_config = ConfigDict(from_attributes=True)


class MembershipResponse(BaseModel):
    """Schema for a user's membership in a group."""

    username: str = Field(..., description="Member's username")
    group_name: str = Field(..., description="Group name")
    role: Role = Field(..., description="Role in the group")

    model_config = ConfigDict(from_attributes=True)


class MemberListResponse(BaseModel):
    """Schema for the member list of a group."""

    group: str = Field(..., description="Group name")
    members: list[str] = Field(default_factory=list, description="Member usernames")


class AdminPromote(BaseModel):
    """Schema for promoting a member to admin."""

    username: str = Field(..., min_length=1, max_length=100, description="Member to promote")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return check_username(v)


class CloseGroupResponse(BaseModel):
    """Schema for the result of closing a group.

    Only the number of drawn pairs is returned; each santa looks up their own
    recipient separately.
    """

    group: str = Field(..., description="Group name")
    is_closed: bool = Field(True, description="Always true once closed")
    assignments: int = Field(..., description="Number of drawn santa pairs")


class RecipientResponse(BaseModel):
    """Schema for a santa's recipient."""

    recipient: str = Field(..., description="Recipient's username")
