from __future__ import annotations

from enum import Enum
from typing import Optional

INDIVIDUAL_MAX_WEIGHT = 2000
PAIR_MAX_WEIGHT = 2600
TRIPLE_MAX_WEIGHT = 3000

_CEILINGS = {1: INDIVIDUAL_MAX_WEIGHT, 2: PAIR_MAX_WEIGHT, 3: TRIPLE_MAX_WEIGHT}


class CapacityTier(Enum):
    """Largest robot team the mail pool may form for a single item."""

    ONE = 1
    TWO = 2
    THREE = 3

    @property
    def team_size(self) -> int:
        return self.value

    @property
    def max_weight(self) -> int:
        return _CEILINGS[self.value]

    @classmethod
    def parse(cls, value: object) -> "CapacityTier":
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).upper()]
        except KeyError:
            raise ValueError(
                f"Unknown capacity tier '{value}'. Available: {', '.join(t.name for t in cls)}"
            ) from None


def weight_ceiling(team_size: int) -> int:
    """Hand-carry ceiling for a team of ``team_size`` robots."""
    return _CEILINGS[max(1, min(team_size, 3))]


def required_team_size(weight: int) -> Optional[int]:
    """Smallest team able to carry ``weight``, or ``None`` if no team can."""
    for size in sorted(_CEILINGS):
        if weight <= _CEILINGS[size]:
            return size
    return None
