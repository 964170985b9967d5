"""Santa assignment drawing.

Members are shuffled uniformly at random and each one gives to the next
member in the shuffled order, the last giving to the first. The result is a
single cycle through every member, so nobody draws themselves.
"""

import random
import uuid
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from secretsanta.core.logging import get_logger
from secretsanta.domain.entities.assignment import Assignment
from secretsanta.domain.exceptions import InvalidStateError
from secretsanta.domain.services.authorization import ensure_enough_members
from secretsanta.infrastructure.persistence.models import AssignmentModel, GroupModel
from secretsanta.infrastructure.persistence.repositories import (
    AssignmentRepository,
    GroupRepository,
)

logger = get_logger(__name__)

_system_random = random.SystemRandom()


def build_santa_cycle(
    member_ids: Sequence[str],
    rng: random.Random | None = None,
) -> list[tuple[str, str]]:
    """Draw santa/recipient pairs forming one cycle over all members.

    Args:
        member_ids: Distinct user IDs of the group members.
        rng: Random source; defaults to the OS-backed ``SystemRandom``.

    Returns:
        List of ``(santa_id, recipient_id)`` pairs, one per member.

    Raises:
        PreconditionFailedError: If there are fewer than two members.
        ValueError: If ``member_ids`` contains duplicates.
    """
    ensure_enough_members(len(member_ids))
    if len(set(member_ids)) != len(member_ids):
        raise ValueError("Member IDs must be unique")

    order = list(member_ids)
    (rng or _system_random).shuffle(order)
    return [(santa, order[(i + 1) % len(order)]) for i, santa in enumerate(order)]


class AssignmentEngine:
    """Draws and stores the assignments of a group.

    The engine never commits: the caller owns the transaction, so either
    every assignment row and the closed flag are committed together or
    nothing is.
    """

    def __init__(self, session: AsyncSession, rng: random.Random | None = None) -> None:
        """Initialize the engine.

        Args:
            session: SQLAlchemy async session.
            rng: Optional random source, mainly for tests.
        """
        self.session = session
        self.rng = rng
        self.assignment_repo = AssignmentRepository(session)
        self.group_repo = GroupRepository(session)

    async def draw(self, group: GroupModel, member_ids: Sequence[str]) -> list[Assignment]:
        """Draw assignments for ``group`` and mark it closed.

        Args:
            group: Open group to close.
            member_ids: User IDs of all members of the group.

        Returns:
            The stored assignments.

        Raises:
            PreconditionFailedError: If the group has fewer than two members.
            InvalidStateError: If the group was closed concurrently.
        """
        pairs = build_santa_cycle(member_ids, self.rng)

        await self.assignment_repo.create_many(
            [
                AssignmentModel(
                    id=str(uuid.uuid4()),
                    group_id=group.id,
                    santa_id=santa_id,
                    recipient_id=recipient_id,
                )
                for santa_id, recipient_id in pairs
            ]
        )

        if not await self.group_repo.mark_closed(group):
            raise InvalidStateError("Group is closed")

        logger.debug("Assignments drawn", group_id=group.id, count=len(pairs))
        return [
            Assignment(group_id=group.id, santa_user_id=santa_id, recipient_user_id=recipient_id)
            for santa_id, recipient_id in pairs
        ]
