from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MailItem:
    """A piece of mail waiting for, or undergoing, delivery."""

    item_id: str
    destination_floor: int
    weight: int
    arrival_time: int = 0

    def __post_init__(self) -> None:
        if self.weight <= 0:
            raise ValueError(f"Mail item {self.item_id} must have a positive weight")

    def __str__(self) -> str:
        return (
            f"Mail Item:: ID: {self.item_id:>6} | Arrival: {self.arrival_time:4d}"
            f" | Destination: {self.destination_floor:2d} | Weight: {self.weight:4d}"
        )
