"""Group service for business logic.

Provides registration, group lifecycle, membership and role management, and
the closing of groups with their santa draw. Each public method is one
transaction: it commits on success and rolls back on any error. Mutations of
a group are serialized per group name through ``GroupLocks``.
"""

import random
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from secretsanta.core.logging import LoggingContext, get_logger
from secretsanta.domain.entities import Assignment, Group, Membership, Role, User
from secretsanta.domain.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    SecretSantaError,
    StorageError,
)
from secretsanta.domain.services.assignment_engine import AssignmentEngine
from secretsanta.domain.services.authorization import (
    ensure_admin,
    ensure_can_demote,
    ensure_closed,
    ensure_enough_members,
    ensure_open,
)
from secretsanta.domain.services.group_locks import GroupLocks, get_group_locks
from secretsanta.infrastructure.persistence.models import (
    GroupModel,
    MembershipModel,
    UserModel,
)
from secretsanta.infrastructure.persistence.repositories import (
    AssignmentRepository,
    GroupRepository,
    MembershipRepository,
    UserRepository,
)

logger = get_logger(__name__)


class GroupService:
    """Service for users, groups, memberships and santa assignments."""

    def __init__(
        self,
        session: AsyncSession,
        locks: GroupLocks | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the group service.

        Args:
            session: SQLAlchemy async session.
            locks: Lock registry; defaults to the process-wide one.
            rng: Random source for the santa draw; defaults to SystemRandom.
        """
        self.session = session
        self.locks = locks or get_group_locks()
        self.user_repo = UserRepository(session)
        self.group_repo = GroupRepository(session)
        self.membership_repo = MembershipRepository(session)
        self.assignment_repo = AssignmentRepository(session)
        self.engine = AssignmentEngine(session, rng)

    @asynccontextmanager
    async def _transaction(
        self,
        conflict_detail: str = "Already exists",
        on_conflict: type[SecretSantaError] = ConflictError,
    ) -> AsyncIterator[None]:
        """Run a block as one transaction, mapping storage errors.

        Args:
            conflict_detail: Detail of the error raised when storage reports a
                uniqueness violation.
            on_conflict: Error type raised for a uniqueness violation.
        """
        try:
            yield
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise on_conflict(conflict_detail) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Storage failure", error=str(e), exc_type=type(e).__name__)
            raise StorageError("Storage failure") from e
        except Exception:
            await self.session.rollback()
            raise

    async def _get_user(self, name: str) -> UserModel:
        user = await self.user_repo.get_by_name(name)
        if user is None:
            raise NotFoundError(f"User '{name}' not found")
        return user

    async def _get_group(self, name: str) -> GroupModel:
        group = await self.group_repo.get_by_name(name)
        if group is None:
            raise NotFoundError(f"Group '{name}' not found")
        return group

    async def _get_membership(self, user: UserModel, group: GroupModel) -> MembershipModel:
        membership = await self.membership_repo.get(user.id, group.id)
        if membership is None:
            raise NotFoundError(f"User '{user.name}' is not a member of group '{group.name}'")
        return membership

    @staticmethod
    def _to_group(group: GroupModel) -> Group:
        return Group(id=group.id, name=group.name, is_closed=group.is_closed)

    @staticmethod
    def _to_membership(membership: MembershipModel, user: UserModel, group: GroupModel) -> Membership:
        return Membership(
            user_id=membership.user_id,
            group_id=membership.group_id,
            role=membership.role,
            username=user.name,
            group_name=group.name,
        )

    async def register_user(self, name: str) -> User:
        """Register a new user.

        Args:
            name: Unique username.

        Returns:
            The registered user.

        Raises:
            ConflictError: If the name is already taken.
        """
        user = User(id=str(uuid.uuid4()), name=name)

        async with self._transaction(f"User '{name}' already exists"):
            if await self.user_repo.get_by_name(name) is not None:
                raise ConflictError(f"User '{name}' already exists")
            await self.user_repo.create(UserModel(id=user.id, name=user.name))

        logger.info("User registered", user_id=user.id, username=name)
        return user

    async def create_group(self, actor_name: str, group_name: str) -> Group:
        """Create an open group with the actor as its first admin.

        Raises:
            NotFoundError: If the actor is unknown.
            ConflictError: If the group name is already taken.
        """
        async with self.locks.hold(group_name), self._transaction(
            f"Group '{group_name}' already exists"
        ):
            actor = await self._get_user(actor_name)
            if await self.group_repo.get_by_name(group_name) is not None:
                raise ConflictError(f"Group '{group_name}' already exists")

            group = await self.group_repo.create(
                GroupModel(id=str(uuid.uuid4()), name=group_name, is_closed=False)
            )
            await self.membership_repo.create(
                MembershipModel(user_id=actor.id, group_id=group.id, role=Role.ADMIN)
            )
            created = self._to_group(group)

        logger.info("Group created", group_id=created.id, group=group_name, actor=actor_name)
        return created

    async def join_group(self, actor_name: str, group_name: str) -> Membership:
        """Add the actor to a group as a member.

        Raises:
            NotFoundError: If the actor or group is unknown.
            InvalidStateError: If the group is closed.
            ConflictError: If the actor already belongs to the group.
        """
        conflict = f"User '{actor_name}' is already a member of group '{group_name}'"
        async with self.locks.hold(group_name), self._transaction(conflict):
            actor = await self._get_user(actor_name)
            group = await self._get_group(group_name)
            ensure_open(group.is_closed)
            if await self.membership_repo.get(actor.id, group.id) is not None:
                raise ConflictError(conflict)

            membership = await self.membership_repo.create(
                MembershipModel(user_id=actor.id, group_id=group.id, role=Role.MEMBER)
            )
            joined = self._to_membership(membership, actor, group)

        logger.info("Member joined", group=group_name, actor=actor_name)
        return joined

    async def delete_group(self, actor_name: str, group_name: str) -> None:
        """Delete a group with its memberships and assignments.

        Closed groups may be deleted too; their assignments are lost.

        Raises:
            NotFoundError: If the actor, group or membership is missing.
            ForbiddenError: If the actor is not an admin of the group.
        """
        async with self.locks.hold(group_name), self._transaction():
            actor = await self._get_user(actor_name)
            group = await self._get_group(group_name)
            membership = await self._get_membership(actor, group)
            ensure_admin(membership.role)

            if group.is_closed:
                logger.warning(
                    "Deleting closed group, assignments are discarded",
                    group=group_name,
                    actor=actor_name,
                )
            await self.group_repo.delete(group)

        logger.info("Group deleted", group=group_name, actor=actor_name)

    async def list_members(self, actor_name: str, group_name: str) -> list[str]:
        """List member usernames of a group, sorted by name.

        Raises:
            NotFoundError: If the actor, group or membership is missing.
            ForbiddenError: If the actor is not an admin of the group.
        """
        async with self._transaction():
            actor = await self._get_user(actor_name)
            group = await self._get_group(group_name)
            membership = await self._get_membership(actor, group)
            ensure_admin(membership.role)
            names = [m.user.name for m in await self.membership_repo.list_for_group(group.id)]

        return names

    async def promote_admin(self, actor_name: str, target_name: str, group_name: str) -> Membership:
        """Give the admin role to another member of the group.

        Promoting someone who is already an admin changes nothing.

        Raises:
            NotFoundError: If any user, the group or either membership is missing.
            ForbiddenError: If the actor is not an admin of the group.
        """
        async with self.locks.hold(group_name), self._transaction():
            group = await self._get_group(group_name)
            actor = await self._get_user(actor_name)
            actor_membership = await self._get_membership(actor, group)
            target = await self._get_user(target_name)
            target_membership = await self._get_membership(target, group)
            ensure_admin(actor_membership.role)

            if target_membership.role is not Role.ADMIN:
                target_membership.role = Role.ADMIN
                await self.membership_repo.update(target_membership)
                logger.info("Admin promoted", group=group_name, actor=actor_name, target=target_name)
            promoted = self._to_membership(target_membership, target, group)

        return promoted

    async def demote_self(self, actor_name: str, group_name: str) -> Membership:
        """Revoke the actor's own admin rights.

        Raises:
            NotFoundError: If the actor, group or membership is missing.
            ForbiddenError: If the actor is not an admin.
            PreconditionFailedError: If the actor is the last admin.
        """
        async with self.locks.hold(group_name), self._transaction():
            actor = await self._get_user(actor_name)
            group = await self._get_group(group_name)
            membership = await self._get_membership(actor, group)
            ensure_admin(membership.role)
            ensure_can_demote(await self.membership_repo.count_admins(group.id))

            membership.role = Role.MEMBER
            await self.membership_repo.update(membership)
            demoted = self._to_membership(membership, actor, group)

        logger.info("Admin stepped down", group=group_name, actor=actor_name)
        return demoted

    async def list_open_groups(self) -> list[Group]:
        """List groups that are still open, ordered by name."""
        async with self._transaction():
            groups = [self._to_group(group) for group in await self.group_repo.list_open()]
        return groups

    async def close_group(self, actor_name: str, group_name: str) -> list[Assignment]:
        """Close a group and draw its santa assignments.

        Validation runs existence, role, state, then member count. The
        assignments and the closed flag are committed together.

        Returns:
            The drawn assignments, one per member.

        Raises:
            NotFoundError: If the actor, group or membership is missing.
            ForbiddenError: If the actor is not an admin.
            InvalidStateError: If the group is already closed.
            PreconditionFailedError: If the group has fewer than two members.
        """
        async with self.locks.hold(group_name), self._transaction(
            f"Group '{group_name}' is already closed", InvalidStateError
        ):
            actor = await self._get_user(actor_name)
            group = await self._get_group(group_name)
            membership = await self._get_membership(actor, group)
            ensure_admin(membership.role)
            ensure_open(group.is_closed)

            memberships = await self.membership_repo.list_for_group(group.id)
            ensure_enough_members(len(memberships))
            with LoggingContext(group=group_name, actor=actor_name):
                assignments = await self.engine.draw(group, [m.user_id for m in memberships])

        logger.info(
            "Group closed",
            group_id=group.id,
            group=group_name,
            actor=actor_name,
            members=len(assignments),
        )
        return assignments

    async def get_recipient(self, santa_name: str, group_name: str) -> str:
        """Get the name of the recipient drawn for a santa.

        Raises:
            NotFoundError: If the santa or group is unknown, or the santa has
                no assignment in the group.
            InvalidStateError: If the group is still open.
        """
        async with self._transaction():
            santa = await self._get_user(santa_name)
            group = await self._get_group(group_name)
            ensure_closed(group.is_closed)
            recipient = await self.assignment_repo.get_recipient(group.id, santa.id)
            if recipient is None:
                raise NotFoundError(
                    f"User '{santa_name}' has no recipient in group '{group_name}'"
                )
            recipient_name = recipient.name

        return recipient_name
