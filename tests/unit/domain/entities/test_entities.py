"""Unit tests for domain entities."""

import pytest

from secretsanta.domain.entities import Assignment, Group, Membership, Role, User


class TestUser:
    def test_create_user(self):
        user = User(id="u1", name="alice")

        assert user.id == "u1"
        assert user.name == "alice"

    def test_user_requires_name(self):
        with pytest.raises(ValueError, match="User name is required"):
            User(id="u1", name="")

    def test_user_is_immutable(self):
        user = User(id="u1", name="alice")

        with pytest.raises(AttributeError):
            user.name = "bob"


class TestGroup:
    def test_group_starts_open(self):
        assert Group(id="g1", name="xmas").is_closed is False

    def test_group_requires_id(self):
        with pytest.raises(ValueError, match="Group ID is required"):
            Group(id="", name="xmas")


class TestMembership:
    def test_is_admin(self):
        admin = Membership(user_id="u1", group_id="g1", role=Role.ADMIN)
        member = Membership(user_id="u2", group_id="g1", role=Role.MEMBER)

        assert admin.is_admin is True
        assert member.is_admin is False

    def test_role_values(self):
        """Roles are stored by their string value."""
        assert Role("admin") is Role.ADMIN
        assert Role.MEMBER.value == "member"


class TestAssignment:
    def test_create_assignment(self):
        assignment = Assignment(group_id="g1", santa_user_id="u1", recipient_user_id="u2")

        assert assignment.recipient_user_id == "u2"

    def test_self_assignment_rejected(self):
        with pytest.raises(ValueError, match="own recipient"):
            Assignment(group_id="g1", santa_user_id="u1", recipient_user_id="u1")
