from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass
class Building:
    """Single-shaft building served by the mail robots."""

    num_floors: int
    mailroom_floor: int = 1
    lowest_floor: int = 1

    def __post_init__(self) -> None:
        if self.num_floors < 1:
            raise ValueError("A building needs at least one floor")
        if not self.contains(self.mailroom_floor):
            raise ValueError(
                f"Mailroom floor {self.mailroom_floor} lies outside floors "
                f"{self.lowest_floor}..{self.top_floor}"
            )

    @property
    def top_floor(self) -> int:
        return self.lowest_floor + self.num_floors - 1

    @property
    def floors(self) -> List[int]:
        return list(range(self.lowest_floor, self.top_floor + 1))

    def contains(self, floor: int) -> bool:
        return self.lowest_floor <= floor <= self.top_floor


@dataclass
class Clock:
    """Simulated time, measured in ticks."""

    time: int = 0

    def now(self) -> int:
        return self.time

    def tick(self) -> int:
        self.time += 1
        return self.time
