"""Authorization and state rules for group operations.

Every rule is a pure decision over the actor's role and the group state.
``ensure_*`` helpers raise the matching domain error when a rule denies.
"""

from secretsanta.domain.entities.membership import Role
from secretsanta.domain.exceptions import (
    ForbiddenError,
    InvalidStateError,
    PreconditionFailedError,
)

MIN_GROUP_MEMBERS = 2


def can_manage_group(role: Role) -> bool:
    """Whether a role may delete, close, list or promote within a group."""
    return role is Role.ADMIN


def can_join_group(is_closed: bool) -> bool:
    """Whether new members may join a group."""
    return not is_closed


def can_reveal_recipient(is_closed: bool) -> bool:
    """Whether recipients of a group may be revealed."""
    return is_closed


def can_demote_admin(admin_count: int) -> bool:
    """Whether one admin may step down without leaving the group admin-less."""
    return admin_count > 1


def has_enough_members(member_count: int) -> bool:
    """Whether a group has enough members to draw assignments."""
    return member_count >= MIN_GROUP_MEMBERS


def ensure_admin(role: Role) -> None:
    """Raise ForbiddenError unless ``role`` is Admin."""
    if not can_manage_group(role):
        raise ForbiddenError("Not enough rights")


def ensure_open(is_closed: bool) -> None:
    """Raise InvalidStateError if the group is closed."""
    if not can_join_group(is_closed):
        raise InvalidStateError("Group is closed")


def ensure_closed(is_closed: bool) -> None:
    """Raise InvalidStateError if the group is still open."""
    if not can_reveal_recipient(is_closed):
        raise InvalidStateError("It's too early to recognize Santa")


def ensure_can_demote(admin_count: int) -> None:
    """Raise PreconditionFailedError if the actor is the last admin."""
    if not can_demote_admin(admin_count):
        raise PreconditionFailedError("Not enough admins")


def ensure_enough_members(member_count: int) -> None:
    """Raise PreconditionFailedError if too few members to draw."""
    if not has_enough_members(member_count):
        raise PreconditionFailedError("Not enough members")
