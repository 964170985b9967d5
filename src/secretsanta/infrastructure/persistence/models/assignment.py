"""SQLAlchemy model for the assignments table.

One row per santa in a closed group. The unique constraints guarantee that
every member gives and receives at most once per group.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from secretsanta.infrastructure.persistence.database import Base


class AssignmentModel(Base):
    """Santa to recipient pairing.

    Attributes:
        id: Primary key (UUID string).
        group_id: Foreign key to groups table.
        santa_id: User giving the gift.
        recipient_id: User receiving the gift.
        created_at: Timestamp when the pairing was drawn.
    """

    __tablename__ = "assignments"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Assignment ID (UUID)",
    )
    group_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to groups table",
    )
    santa_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="User giving the gift",
    )
    recipient_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="User receiving the gift",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("group_id", "santa_id", name="uq_assignments_group_santa"),
        UniqueConstraint("group_id", "recipient_id", name="uq_assignments_group_recipient"),
    )

    def __repr__(self) -> str:
        return (
            f"<Assignment(group_id={self.group_id}, santa_id={self.santa_id}, "
            f"recipient_id={self.recipient_id})>"
        )
