"""SQLAlchemy model for the memberships table.

Associates a user with a group and carries the user's role in that group.
"""

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from secretsanta.domain.entities.membership import Role
from secretsanta.infrastructure.persistence.database import Base


class MembershipModel(Base):
    """Membership of a user in a group.

    The composite primary key makes a user a member of a group at most once.

    Attributes:
        user_id: Foreign key to users table.
        group_id: Foreign key to groups table.
        role: Role of the user in the group, stored by value.
        joined_at: Timestamp when the membership was created.
    """

    __tablename__ = "memberships"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        comment="Foreign key to users table",
    )
    group_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("groups.id", ondelete="CASCADE"),
        primary_key=True,
        comment="Foreign key to groups table",
    )
    role: Mapped[Role] = mapped_column(
        Enum(
            Role,
            name="membership_role",
            native_enum=False,
            length=16,
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
        default=Role.MEMBER,
        comment="Role of the user in the group",
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    user: Mapped["UserModel"] = relationship(  # noqa: F821
        "UserModel",
        lazy="joined",
    )

    __table_args__ = (
        Index("ix_memberships_group_role", "group_id", "role"),
    )

    def __repr__(self) -> str:
        return f"<Membership(user_id={self.user_id}, group_id={self.group_id}, role={self.role})>"
