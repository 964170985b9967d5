"""Repository for membership database operations."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from secretsanta.domain.entities.membership import Role
from secretsanta.infrastructure.persistence.models import MembershipModel, UserModel


class MembershipRepository:
    """Repository for membership database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, membership: MembershipModel) -> MembershipModel:
        """Create a membership.

        Raises:
            IntegrityError: If the user is already a member of the group.
        """
        self.session.add(membership)
        await self.session.flush()
        return membership

    async def get(self, user_id: str, group_id: str) -> MembershipModel | None:
        """Get the membership of a user in a group.

        Args:
            user_id: User ID.
            group_id: Group ID.

        Returns:
            Membership model if found, None otherwise.
        """
        result = await self.session.execute(
            select(MembershipModel).where(
                (MembershipModel.user_id == user_id) & (MembershipModel.group_id == group_id)
            )
        )
        return result.scalar_one_or_none()

    async def list_for_group(self, group_id: str) -> list[MembershipModel]:
        """List all memberships of a group, ordered by username.

        Args:
            group_id: Group ID.

        Returns:
            List of membership models with their users loaded.
        """
        result = await self.session.execute(
            select(MembershipModel)
            .join(UserModel, MembershipModel.user_id == UserModel.id)
            .where(MembershipModel.group_id == group_id)
            .order_by(UserModel.name)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().unique().all())

    async def update(self, membership: MembershipModel) -> MembershipModel:
        """Persist changes to a membership."""
        if membership not in self.session:
            self.session.add(membership)
        await self.session.flush()
        return membership

    async def count_admins(self, group_id: str) -> int:
        """Count the admins of a group.

        Args:
            group_id: Group ID.

        Returns:
            Number of memberships with the admin role.
        """
        result = await self.session.execute(
            select(func.count())
            .select_from(MembershipModel)
            .where(
                (MembershipModel.group_id == group_id) & (MembershipModel.role == Role.ADMIN)
            )
        )
        return result.scalar_one()
