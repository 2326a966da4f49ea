from __future__ import annotations


class AutomailError(Exception):
    """Base class for simulation errors."""


class ItemTooHeavyError(AutomailError):
    """A mail item exceeds the weight ceiling of the slot it was loaded into."""

    def __init__(self, weight: int, ceiling: int) -> None:
        super().__init__(f"Item weight {weight} exceeds ceiling {ceiling}")
        self.weight = weight
        self.ceiling = ceiling


class ExcessiveDeliveryError(AutomailError):
    """A robot delivered more legs in one run than its two slots can hold."""

    def __init__(self, robot_id: str, legs: int) -> None:
        super().__init__(f"Robot {robot_id} attempted delivery leg {legs} in a single run")
        self.robot_id = robot_id
        self.legs = legs


class MailAlreadyDeliveredError(AutomailError):
    def __init__(self, item_id: str) -> None:
        super().__init__(f"Mail item {item_id} was already delivered")
        self.item_id = item_id


class RobotError(AutomailError):
    """Misuse of a robot's hand or tube slots."""


class SlotOccupiedError(RobotError):
    pass


class EmptyHandError(RobotError):
    pass
