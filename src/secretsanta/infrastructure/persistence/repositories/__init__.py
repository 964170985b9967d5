"""Persistence repositories for database operations."""

from secretsanta.infrastructure.persistence.repositories.assignment_repository import (
    AssignmentRepository,
)
from secretsanta.infrastructure.persistence.repositories.group_repository import (
    GroupRepository,
)
from secretsanta.infrastructure.persistence.repositories.membership_repository import (
    MembershipRepository,
)
from secretsanta.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)

__all__ = [
    "AssignmentRepository",
    "GroupRepository",
    "MembershipRepository",
    "UserRepository",
]
