"""Repository for assignment database operations."""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from secretsanta.infrastructure.persistence.models import AssignmentModel, UserModel


class AssignmentRepository:
    """Repository for assignment database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create_many(self, assignments: Sequence[AssignmentModel]) -> list[AssignmentModel]:
        """Insert all assignments of a group in one flush.

        Args:
            assignments: Assignment models to insert.

        Returns:
            The inserted assignment models.
        """
        self.session.add_all(assignments)
        await self.session.flush()
        return list(assignments)

    async def list_for_group(self, group_id: str) -> list[AssignmentModel]:
        """List all assignments of a group."""
        result = await self.session.execute(
            select(AssignmentModel).where(AssignmentModel.group_id == group_id)
        )
        return list(result.scalars().all())

    async def get_recipient(self, group_id: str, santa_id: str) -> UserModel | None:
        """Get the recipient drawn for a santa.

        Args:
            group_id: Group ID.
            santa_id: Santa's user ID.

        Returns:
            Recipient user model if the santa has an assignment, None otherwise.
        """
        result = await self.session.execute(
            select(UserModel)
            .join(AssignmentModel, AssignmentModel.recipient_id == UserModel.id)
            .where(
                (AssignmentModel.group_id == group_id) & (AssignmentModel.santa_id == santa_id)
            )
        )
        return result.scalar_one_or_none()
