"""User entity.

Users are identified by a unique, immutable name. They are created on
registration and never mutated afterwards.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """A registered participant.

    Attributes:
        id: Unique identifier (UUID string), assigned by storage.
        name: Unique username.
    """

    id: str
    name: str

    def __post_init__(self) -> None:
        """Validate user data after initialization."""
        if not self.id:
            raise ValueError("User ID is required")
        if not self.name:
            raise ValueError("User name is required")
