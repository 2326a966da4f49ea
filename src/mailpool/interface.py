from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from automail.mail_item import MailItem
    from automail.robot import Robot


class MailSource(Protocol):
    """What a robot needs from the mail room it is attached to."""

    def add_to_pool(self, item: "MailItem") -> None:
        """Take back an item a robot returned undelivered."""
        ...

    def register_waiting(self, robot: "Robot") -> None:
        """Mark ``robot`` as idle in the mailroom and ready for loading."""
        ...

    def get_robots_remaining(self, item: "MailItem") -> int:
        """Number of robots still carrying ``item``, including the caller."""
        ...

    def decrement_robots_remaining(self, item: "MailItem") -> None:
        ...

    def get_current_hand_weight_ceiling(self) -> int:
        """
        Heaviest item a robot may currently take in hand.

        The value depends on how large a team could be formed right now,
        so callers must query it at load time rather than cache it.
        """
        ...
