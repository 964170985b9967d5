"""Domain services for SecretSanta.

Services hold the business rules for groups, memberships and the santa draw.
"""

from secretsanta.domain.services.assignment_engine import AssignmentEngine, build_santa_cycle
from secretsanta.domain.services.group_locks import GroupLocks, get_group_locks
from secretsanta.domain.services.group_service import GroupService

__all__ = [
    "AssignmentEngine",
    "GroupLocks",
    "GroupService",
    "build_santa_cycle",
    "get_group_locks",
]
