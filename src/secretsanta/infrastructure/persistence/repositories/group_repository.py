"""Repository for group database operations."""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from secretsanta.infrastructure.persistence.models import (
    AssignmentModel,
    GroupModel,
    MembershipModel,
)


class GroupRepository:
    """Repository for group database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, group: GroupModel) -> GroupModel:
        """Create a new group.

        Args:
            group: Group model to create.

        Returns:
            Created group model.

        Raises:
            IntegrityError: If the name is already taken.
        """
        self.session.add(group)
        await self.session.flush()
        return group

    async def get_by_name(self, name: str) -> GroupModel | None:
        """Get a group by name.

        Args:
            name: Group name.

        Returns:
            Group model if found, None otherwise.
        """
        result = await self.session.execute(select(GroupModel).where(GroupModel.name == name))
        return result.scalar_one_or_none()

    async def list_open(self) -> list[GroupModel]:
        """List groups that have not been closed, ordered by name."""
        result = await self.session.execute(
            select(GroupModel).where(GroupModel.is_closed.is_(False)).order_by(GroupModel.name)
        )
        return list(result.scalars().all())

    async def mark_closed(self, group: GroupModel) -> bool:
        """Flip a group to closed if it is still open.

        The flip is a single conditional UPDATE, so of two transactions
        closing the same group only one sees an affected row.

        Args:
            group: Group model to close.

        Returns:
            True if this call closed the group, False if it was already closed.
        """
        result = await self.session.execute(
            update(GroupModel)
            .where(GroupModel.id == group.id, GroupModel.is_closed.is_(False))
            .values(is_closed=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        set_committed_value(group, "is_closed", True)
        return True

    async def delete(self, group: GroupModel) -> None:
        """Delete a group together with its memberships and assignments.

        Args:
            group: Group model to delete.
        """
        await self.session.execute(
            delete(AssignmentModel).where(AssignmentModel.group_id == group.id)
        )
        await self.session.execute(
            delete(MembershipModel).where(MembershipModel.group_id == group.id)
        )
        await self.session.delete(group)
        await self.session.flush()
