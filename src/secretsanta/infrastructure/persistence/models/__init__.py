"""SQLAlchemy models for SecretSanta tables.

All models inherit from the Base class defined in database.py and are
automatically created on application startup in development mode.
"""

from secretsanta.infrastructure.persistence.models.assignment import AssignmentModel
from secretsanta.infrastructure.persistence.models.group import GroupModel
from secretsanta.infrastructure.persistence.models.membership import MembershipModel
from secretsanta.infrastructure.persistence.models.user import UserModel

__all__ = [
    "AssignmentModel",
    "GroupModel",
    "MembershipModel",
    "UserModel",
]
