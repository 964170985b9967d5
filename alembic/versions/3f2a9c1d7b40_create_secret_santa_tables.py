"""create_secret_santa_tables

Revision ID: 3f2a9c1d7b40
Revises:
Create Date: 2026-10-18 10:12:31.204871

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7b40'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), nullable=False, comment="User ID (UUID)"),
        sa.Column("name", sa.String(length=100), nullable=False, comment="Username"),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_name"), "users", ["name"], unique=True)

    op.create_table(
        "groups",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Group ID (UUID)"),
        sa.Column("name", sa.String(length=100), nullable=False, comment="Group name"),
        sa.Column(
            "is_closed",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
            comment="Whether assignments have been drawn",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_groups_name"), "groups", ["name"], unique=True)
    op.create_index(op.f("ix_groups_is_closed"), "groups", ["is_closed"], unique=False)

    op.create_table(
        "memberships",
        sa.Column(
            "user_id",
            sa.String(length=36),
            nullable=False,
            comment="Foreign key to users table",
        ),
        sa.Column(
            "group_id",
            sa.String(length=36),
            nullable=False,
            comment="Foreign key to groups table",
        ),
        sa.Column(
            "role",
            sa.String(length=16),
            nullable=False,
            comment="Role of the user in the group",
        ),
        sa.Column(
            "joined_at",
            sa.DateTime(),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "group_id"),
    )
    op.create_index("ix_memberships_group_role", "memberships", ["group_id", "role"], unique=False)

    op.create_table(
        "assignments",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Assignment ID (UUID)"),
        sa.Column(
            "group_id",
            sa.String(length=36),
            nullable=False,
            comment="Foreign key to groups table",
        ),
        sa.Column("santa_id", sa.String(length=36), nullable=False, comment="User giving the gift"),
        sa.Column(
            "recipient_id",
            sa.String(length=36),
            nullable=False,
            comment="User receiving the gift",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["recipient_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["santa_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("group_id", "recipient_id", name="uq_assignments_group_recipient"),
        sa.UniqueConstraint("group_id", "santa_id", name="uq_assignments_group_santa"),
    )
    op.create_index(op.f("ix_assignments_group_id"), "assignments", ["group_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_assignments_group_id"), table_name="assignments")
    op.drop_table("assignments")
    op.drop_index("ix_memberships_group_role", table_name="memberships")
    op.drop_table("memberships")
    op.drop_index(op.f("ix_groups_is_closed"), table_name="groups")
    op.drop_index(op.f("ix_groups_name"), table_name="groups")
    op.drop_table("groups")
    op.drop_index(op.f("ix_users_name"), table_name="users")
    op.drop_table("users")
