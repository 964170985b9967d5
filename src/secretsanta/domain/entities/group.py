"""Group entity for running one gift exchange.

A group starts open, collects memberships, and is closed exactly once by an
admin. Closing a group generates its santa assignments.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Group:
    """Group entity.

    Attributes:
        id: Unique identifier (UUID string).
        name: Unique group name.
        is_closed: Whether assignments have been drawn. Never reverts to False.
    """

    id: str
    name: str
    is_closed: bool = False

    def __post_init__(self) -> None:
        """Validate group data after initialization."""
        if not self.id:
            raise ValueError("Group ID is required")
        if not self.name:
            raise ValueError("Group name is required")
