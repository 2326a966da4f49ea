from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from mailpool.capacity import (
    INDIVIDUAL_MAX_WEIGHT,
    PAIR_MAX_WEIGHT,
    TRIPLE_MAX_WEIGHT,
    CapacityTier,
    required_team_size,
    weight_ceiling,
)

__all__ = [
    "INDIVIDUAL_MAX_WEIGHT",
    "PAIR_MAX_WEIGHT",
    "TRIPLE_MAX_WEIGHT",
    "CapacityTier",
    "SimulationConfig",
    "required_team_size",
    "weight_ceiling",
]


@dataclass
class SimulationConfig:
    """Tunables for a single simulation run."""

    num_floors: int = 10
    mailroom_floor: int = 1
    robot_count: int = 3
    mail_to_create: int = 80
    mail_max_weight: int = INDIVIDUAL_MAX_WEIGHT
    arrival_window: int = 60
    capacity_tier: CapacityTier = CapacityTier.THREE
    pool_ordering: str = "floor"
    penalty: float = 1.2
    random_seed: Optional[int] = None
    metrics_hook_interval: int = 1

    def __post_init__(self) -> None:
        self.capacity_tier = CapacityTier.parse(self.capacity_tier)
        if self.num_floors < 1:
            raise ValueError("num_floors must be at least 1")
        if self.robot_count < 1:
            raise ValueError("robot_count must be at least 1")
        if self.mail_to_create < 0:
            raise ValueError("mail_to_create cannot be negative")
        if self.mail_max_weight < 1:
            raise ValueError("mail_max_weight must be positive")
        if self.mail_max_weight > self.capacity_tier.max_weight:
            raise ValueError(
                f"mail_max_weight {self.mail_max_weight} exceeds the "
                f"{self.capacity_tier.name} tier ceiling {self.capacity_tier.max_weight}"
            )
        if required_team_size(self.mail_max_weight) > self.robot_count:
            raise ValueError("Not enough robots to form the teams heavy mail requires")
        self.arrival_window = max(1, self.arrival_window)
        self.metrics_hook_interval = max(1, self.metrics_hook_interval)
