"""Pydantic schemas for User operations."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


def check_username(value: str) -> str:
    """Accept only names that can be sent back in the actor header.

    Header values are ASCII and lose surrounding whitespace, so a name outside
    printable ASCII, or with leading or trailing spaces, could never act.
    """
    if value != value.strip():
        raise ValueError("Username cannot start or end with whitespace")
    if not all(" " <= char <= "~" for char in value):
        raise ValueError("Username must contain printable ASCII characters only")
    return value


class UserCreate(BaseModel):
    """Schema for registering a user."""

    name: str = Field(..., min_length=1, max_length=100, description="Unique username")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return check_username(v)


class UserResponse(BaseModel):
    """Schema for user response."""

    id: str = Field(..., description="User ID")
    name: str = Field(..., description="Username")

    model_config = ConfigDict(from_attributes=True)
