"""Assignment entity: one santa to recipient pairing inside a closed group."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Assignment:
    """A santa's recipient within a group.

    Attributes:
        group_id: Group the pairing belongs to.
        santa_user_id: User who gives the gift.
        recipient_user_id: User who receives it.
    """

    group_id: str
    santa_user_id: str
    recipient_user_id: str

    def __post_init__(self) -> None:
        """Reject self-assignment."""
        if self.santa_user_id == self.recipient_user_id:
            raise ValueError("A santa cannot be their own recipient")
