"""Repository for user database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from secretsanta.infrastructure.persistence.models import UserModel


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        """Create a new user.

        Args:
            user: User model to create.

        Returns:
            Created user model.

        Raises:
            IntegrityError: If the name is already taken.
        """
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_name(self, name: str) -> UserModel | None:
        """Get a user by name.

        Args:
            name: Username.

        Returns:
            User model if found, None otherwise.
        """
        result = await self.session.execute(select(UserModel).where(UserModel.name == name))
        return result.scalar_one_or_none()
