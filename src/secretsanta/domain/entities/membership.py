"""Membership entity and group roles."""

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Role of a user inside one group."""

    MEMBER = "member"
    ADMIN = "admin"


@dataclass(frozen=True)
class Membership:
    """Relation between a user and a group.

    Attributes:
        user_id: Member's user ID.
        group_id: Group ID.
        role: Member or Admin.
        username: Member's name, resolved for convenience.
        group_name: Group name, resolved for convenience.
    """

    user_id: str
    group_id: str
    role: Role
    username: str = ""
    group_name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
