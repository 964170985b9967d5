"""Domain entities for SecretSanta.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from secretsanta.domain.entities.assignment import Assignment
from secretsanta.domain.entities.group import Group
from secretsanta.domain.entities.membership import Membership, Role
from secretsanta.domain.entities.user import User

__all__ = [
    "Assignment",
    "Group",
    "Membership",
    "Role",
    "User",
]
