"""Unit tests for GroupService."""

import asyncio
import random
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError

from secretsanta.domain.entities import Role
from secretsanta.domain.exceptions import (
    ConflictError,
    ErrorKind,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PreconditionFailedError,
    StorageError,
)
from secretsanta.domain.services import GroupLocks, GroupService
from secretsanta.infrastructure.persistence.models import AssignmentModel, MembershipModel


async def open_group(service: GroupService, admin: str, group: str, *members: str) -> None:
    """Register everyone, create ``group`` as ``admin`` and let ``members`` join."""
    for name in (admin, *members):
        await service.register_user(name)
    await service.create_group(admin, group)
    for name in members:
        await service.join_group(name, group)


class TestRegisterUser:
    @pytest.mark.asyncio
    async def test_register_user(self, group_service):
        user = await group_service.register_user("alice")

        assert user.name == "alice"
        assert user.id

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts(self, group_service):
        await group_service.register_user("alice")

        with pytest.raises(ConflictError, match="already exists") as exc_info:
            await group_service.register_user("alice")

        assert exc_info.value.kind is ErrorKind.CONFLICT


class TestCreateGroup:
    @pytest.mark.asyncio
    async def test_creator_becomes_admin(self, group_service, db_session):
        await group_service.register_user("alice")

        group = await group_service.create_group("alice", "xmas")

        assert group.name == "xmas"
        assert group.is_closed is False
        memberships = (await db_session.execute(select(MembershipModel))).scalars().all()
        assert len(memberships) == 1
        assert memberships[0].role is Role.ADMIN

    @pytest.mark.asyncio
    async def test_unknown_actor(self, group_service):
        with pytest.raises(NotFoundError, match="User 'ghost' not found"):
            await group_service.create_group("ghost", "xmas")

    @pytest.mark.asyncio
    async def test_duplicate_group_conflicts(self, group_service):
        await group_service.register_user("alice")
        await group_service.register_user("bob")
        await group_service.create_group("alice", "xmas")

        with pytest.raises(ConflictError, match="Group 'xmas' already exists"):
            await group_service.create_group("bob", "xmas")


class TestJoinGroup:
    @pytest.mark.asyncio
    async def test_join_as_member(self, group_service):
        await open_group(group_service, "alice", "xmas")
        await group_service.register_user("bob")

        membership = await group_service.join_group("bob", "xmas")

        assert membership.role is Role.MEMBER
        assert membership.username == "bob"
        assert membership.group_name == "xmas"

    @pytest.mark.asyncio
    async def test_join_twice_conflicts(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")

        with pytest.raises(ConflictError, match="already a member"):
            await group_service.join_group("bob", "xmas")

    @pytest.mark.asyncio
    async def test_join_unknown_group(self, group_service):
        await group_service.register_user("bob")

        with pytest.raises(NotFoundError, match="Group 'xmas' not found"):
            await group_service.join_group("bob", "xmas")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("joiner", ["dave", "alice", "bob"])
    async def test_join_closed_group_rejected_for_anyone(self, group_service, joiner):
        await open_group(group_service, "alice", "xmas", "bob")
        await group_service.register_user("dave")
        await group_service.close_group("alice", "xmas")

        with pytest.raises(InvalidStateError):
            await group_service.join_group(joiner, "xmas")


class TestDeleteGroup:
    @pytest.mark.asyncio
    async def test_admin_deletes_group(self, group_service, db_session):
        await open_group(group_service, "alice", "xmas", "bob")

        await group_service.delete_group("alice", "xmas")

        assert await group_service.list_open_groups() == []
        memberships = (await db_session.execute(select(MembershipModel))).scalars().all()
        assert memberships == []

    @pytest.mark.asyncio
    async def test_member_cannot_delete(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")

        with pytest.raises(ForbiddenError, match="Not enough rights"):
            await group_service.delete_group("bob", "xmas")

        assert [g.name for g in await group_service.list_open_groups()] == ["xmas"]

    @pytest.mark.asyncio
    async def test_non_member_cannot_delete(self, group_service):
        await open_group(group_service, "alice", "xmas")
        await group_service.register_user("mallory")

        with pytest.raises(NotFoundError, match="not a member"):
            await group_service.delete_group("mallory", "xmas")

    @pytest.mark.asyncio
    async def test_delete_closed_group_discards_assignments(self, group_service, db_session):
        await open_group(group_service, "alice", "xmas", "bob", "carol")
        await group_service.close_group("alice", "xmas")

        await group_service.delete_group("alice", "xmas")

        rows = (await db_session.execute(select(AssignmentModel))).scalars().all()
        assert rows == []
        with pytest.raises(NotFoundError):
            await group_service.get_recipient("bob", "xmas")

    @pytest.mark.asyncio
    async def test_name_reusable_after_delete(self, group_service):
        await open_group(group_service, "alice", "xmas")
        await group_service.delete_group("alice", "xmas")

        group = await group_service.create_group("alice", "xmas")

        assert group.is_closed is False


class TestListMembers:
    @pytest.mark.asyncio
    async def test_admin_lists_members_sorted(self, group_service):
        await open_group(group_service, "carol", "xmas", "bob", "alice")

        assert await group_service.list_members("carol", "xmas") == ["alice", "bob", "carol"]

    @pytest.mark.asyncio
    async def test_member_cannot_list(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")

        with pytest.raises(ForbiddenError):
            await group_service.list_members("bob", "xmas")


class TestAdminRoles:
    @pytest.mark.asyncio
    async def test_promote_member(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")

        membership = await group_service.promote_admin("alice", "bob", "xmas")

        assert membership.role is Role.ADMIN
        assert membership.username == "bob"
        # bob can now act as admin
        assert await group_service.list_members("bob", "xmas") == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_promote_admin_is_noop(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")
        await group_service.promote_admin("alice", "bob", "xmas")

        membership = await group_service.promote_admin("alice", "bob", "xmas")

        assert membership.is_admin

    @pytest.mark.asyncio
    async def test_member_cannot_promote(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob", "carol")

        with pytest.raises(ForbiddenError):
            await group_service.promote_admin("bob", "carol", "xmas")

    @pytest.mark.asyncio
    async def test_promote_non_member(self, group_service):
        await open_group(group_service, "alice", "xmas")
        await group_service.register_user("dave")

        with pytest.raises(NotFoundError, match="'dave' is not a member"):
            await group_service.promote_admin("alice", "dave", "xmas")

    @pytest.mark.asyncio
    async def test_promote_unknown_user(self, group_service):
        await open_group(group_service, "alice", "xmas")

        with pytest.raises(NotFoundError, match="User 'ghost' not found"):
            await group_service.promote_admin("alice", "ghost", "xmas")

    @pytest.mark.asyncio
    async def test_sole_admin_cannot_step_down(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")

        with pytest.raises(PreconditionFailedError, match="Not enough admins"):
            await group_service.demote_self("alice", "xmas")

        # alice is still an admin
        assert await group_service.list_members("alice", "xmas") == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_step_down_with_second_admin(self, group_service, db_session):
        await open_group(group_service, "alice", "xmas", "bob")
        await group_service.promote_admin("alice", "bob", "xmas")

        membership = await group_service.demote_self("alice", "xmas")

        assert membership.role is Role.MEMBER
        roles = (await db_session.execute(select(MembershipModel.role))).scalars().all()
        assert sorted(role.value for role in roles) == ["admin", "member"]
        with pytest.raises(PreconditionFailedError):
            await group_service.demote_self("bob", "xmas")

    @pytest.mark.asyncio
    async def test_member_cannot_step_down(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")

        with pytest.raises(ForbiddenError):
            await group_service.demote_self("bob", "xmas")


class TestListOpenGroups:
    @pytest.mark.asyncio
    async def test_only_open_groups_sorted(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")
        await group_service.create_group("alice", "easter")
        await group_service.create_group("bob", "birthday")
        await group_service.close_group("alice", "xmas")

        groups = await group_service.list_open_groups()

        assert [g.name for g in groups] == ["birthday", "easter"]
        assert all(not g.is_closed for g in groups)

    @pytest.mark.asyncio
    async def test_empty(self, group_service):
        assert await group_service.list_open_groups() == []


class TestCloseGroup:
    @pytest.mark.asyncio
    async def test_close_forms_single_cycle(self, group_service, db_session):
        names = ["alice", "bob", "carol", "dave", "erin"]
        await open_group(group_service, names[0], "xmas", *names[1:])

        assignments = await group_service.close_group("alice", "xmas")

        assert len(assignments) == len(names)
        links = {a.santa_user_id: a.recipient_user_id for a in assignments}
        assert len(set(links.values())) == len(names)
        assert all(santa != recipient for santa, recipient in links.items())

        start = next(iter(links))
        seen = {start}
        current = links[start]
        while current != start:
            seen.add(current)
            current = links[current]
        assert len(seen) == len(names)

        rows = (await db_session.execute(select(AssignmentModel))).scalars().all()
        assert {(r.santa_id, r.recipient_id) for r in rows} == set(links.items())

    @pytest.mark.asyncio
    async def test_member_cannot_close(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")

        with pytest.raises(ForbiddenError):
            await group_service.close_group("bob", "xmas")

    @pytest.mark.asyncio
    async def test_close_twice_rejected(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")
        await group_service.close_group("alice", "xmas")

        with pytest.raises(InvalidStateError):
            await group_service.close_group("alice", "xmas")

    @pytest.mark.asyncio
    async def test_single_member_group_stays_open(self, group_service, db_session):
        await open_group(group_service, "alice", "xmas")

        with pytest.raises(PreconditionFailedError, match="Not enough members"):
            await group_service.close_group("alice", "xmas")

        assert [g.name for g in await group_service.list_open_groups()] == ["xmas"]
        rows = (await db_session.execute(select(AssignmentModel))).scalars().all()
        assert rows == []

    @pytest.mark.asyncio
    async def test_storage_failure_rolls_back(self, group_service, db_session):
        await open_group(group_service, "alice", "xmas", "bob")

        with patch.object(
            group_service.engine.group_repo,
            "mark_closed",
            side_effect=OperationalError("UPDATE groups", {}, Exception("disk I/O error")),
        ):
            with pytest.raises(StorageError) as exc_info:
                await group_service.close_group("alice", "xmas")

        assert exc_info.value.kind is ErrorKind.INTERNAL
        assert [g.name for g in await group_service.list_open_groups()] == ["xmas"]
        rows = (await db_session.execute(select(AssignmentModel))).scalars().all()
        assert rows == []

    @pytest.mark.asyncio
    async def test_assignments_already_drawn_elsewhere(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")

        with patch.object(
            group_service.engine.assignment_repo,
            "create_many",
            side_effect=IntegrityError(
                "INSERT INTO assignments", {}, Exception("UNIQUE constraint failed")
            ),
        ):
            with pytest.raises(InvalidStateError, match="already closed") as exc_info:
                await group_service.close_group("alice", "xmas")

        assert exc_info.value.kind is ErrorKind.INVALID_STATE
        assert [g.name for g in await group_service.list_open_groups()] == ["xmas"]

    @pytest.mark.asyncio
    async def test_concurrent_close_draws_once(self, db_session):
        service = GroupService(db_session, locks=GroupLocks(), rng=random.Random(5))
        await open_group(service, "alice", "xmas", "bob", "carol")

        results = await asyncio.gather(
            service.close_group("alice", "xmas"),
            service.close_group("alice", "xmas"),
            return_exceptions=True,
        )

        drawn = [r for r in results if isinstance(r, list)]
        rejected = [r for r in results if isinstance(r, InvalidStateError)]
        assert len(drawn) == 1
        assert len(rejected) == 1
        rows = (await db_session.execute(select(AssignmentModel))).scalars().all()
        assert len(rows) == 3


class TestGetRecipient:
    @pytest.mark.asyncio
    async def test_too_early(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")

        with pytest.raises(InvalidStateError, match="too early to recognize Santa"):
            await group_service.get_recipient("bob", "xmas")

    @pytest.mark.asyncio
    async def test_matches_persisted_assignment(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob", "carol")
        assignments = await group_service.close_group("alice", "xmas")

        ids = {}
        for name in ("alice", "bob", "carol"):
            user = await group_service.user_repo.get_by_name(name)
            ids[user.id] = name

        for assignment in assignments:
            santa = ids[assignment.santa_user_id]
            assert await group_service.get_recipient(santa, "xmas") == ids[assignment.recipient_user_id]

    @pytest.mark.asyncio
    async def test_non_member_has_no_recipient(self, group_service):
        await open_group(group_service, "alice", "xmas", "bob")
        await group_service.register_user("dave")
        await group_service.close_group("alice", "xmas")

        with pytest.raises(NotFoundError, match="no recipient"):
            await group_service.get_recipient("dave", "xmas")

    @pytest.mark.asyncio
    async def test_unknown_santa(self, group_service):
        with pytest.raises(NotFoundError):
            await group_service.get_recipient("ghost", "xmas")


class TestScenarios:
    @pytest.mark.asyncio
    async def test_alice_bob_carol(self, group_service):
        """Full exchange: create, join, close, and everyone sees a recipient."""
        await open_group(group_service, "alice", "xmas", "bob", "carol")

        assignments = await group_service.close_group("alice", "xmas")

        assert len(assignments) == 3
        assert await group_service.list_members("alice", "xmas") == ["alice", "bob", "carol"]
        with pytest.raises(ForbiddenError):
            await group_service.list_members("bob", "xmas")
        recipients = {
            name: await group_service.get_recipient(name, "xmas")
            for name in ("alice", "bob", "carol")
        }
        assert sorted(recipients.values()) == ["alice", "bob", "carol"]
        assert all(name != recipient for name, recipient in recipients.items())
        assert await group_service.list_open_groups() == []

    @pytest.mark.asyncio
    async def test_single_member_xmas(self, group_service):
        """A lone admin can neither draw nor step down."""
        await open_group(group_service, "alice", "xmas")

        with pytest.raises(PreconditionFailedError):
            await group_service.close_group("alice", "xmas")
        with pytest.raises(PreconditionFailedError):
            await group_service.demote_self("alice", "xmas")
        with pytest.raises(InvalidStateError):
            await group_service.get_recipient("alice", "xmas")

        groups = await group_service.list_open_groups()
        assert [(g.name, g.is_closed) for g in groups] == [("xmas", False)]
