from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Optional

from .capacity import INDIVIDUAL_MAX_WEIGHT, CapacityTier, required_team_size, weight_ceiling
from .ordering import get_ordering

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from automail.mail_item import MailItem
    from automail.robot import Robot

logger = logging.getLogger(__name__)


class MailPool:
    """Holds undelivered mail and loads it onto robots waiting in the mailroom."""

    def __init__(self, capacity_tier: CapacityTier = CapacityTier.THREE, ordering: str = "floor") -> None:
        self.capacity_tier = CapacityTier.parse(capacity_tier)
        self.ordering_name = ordering
        self._ordering = get_ordering(ordering)
        self.items: List["MailItem"] = []
        self.waiting: List["Robot"] = []
        self.teams: Dict[str, int] = {}

    def set_ordering(self, name: str) -> None:
        self._ordering = get_ordering(name)
        self.ordering_name = name
        self.items.sort(key=self._ordering)

    def add_to_pool(self, item: "MailItem") -> None:
        team_size = required_team_size(item.weight)
        if team_size is None or team_size > self.capacity_tier.team_size:
            raise ValueError(
                f"Item {item.item_id} weighs {item.weight}, above the "
                f"{self.capacity_tier.name} tier ceiling {self.capacity_tier.max_weight}"
            )
        self.items.append(item)
        self.items.sort(key=self._ordering)

    def register_waiting(self, robot: "Robot") -> None:
        if robot not in self.waiting:
            self.waiting.append(robot)

    def unregister_waiting(self, robot: "Robot") -> None:
        if robot in self.waiting:
            self.waiting.remove(robot)

    def get_robots_remaining(self, item: "MailItem") -> int:
        return self.teams.get(item.item_id, 1)

    def decrement_robots_remaining(self, item: "MailItem") -> None:
        remaining = self.get_robots_remaining(item) - 1
        if remaining <= 1:
            self.teams.pop(item.item_id, None)
        else:
            self.teams[item.item_id] = remaining

    def get_current_hand_weight_ceiling(self) -> int:
        return weight_ceiling(self._max_team_size())

    def step(self) -> None:
        """Load as many waiting robots as the pool's contents allow and dispatch them."""
        while self.waiting and self.items:
            item = self._next_loadable()
            if item is None:
                break
            team_size = required_team_size(item.weight)
            team = self.waiting[:team_size]
            self.items.remove(item)

            for robot in team:
                robot.load_hand(item)
            if team_size > 1:
                self.teams[item.item_id] = team_size
                logger.info(
                    "Team of %d (%s) assigned to %s",
                    team_size,
                    ", ".join(robot.robot_id for robot in team),
                    item.item_id,
                )
            else:
                tube_item = self._next_individual()
                if tube_item is not None:
                    self.items.remove(tube_item)
                    team[0].load_tube(tube_item)

            for robot in team:
                self.waiting.remove(robot)
                robot.dispatch()

    def snapshot(self) -> dict:
        return {
            "ordering": self.ordering_name,
            "capacity_tier": self.capacity_tier.name,
            "pending": len(self.items),
            "waiting": [robot.robot_id for robot in self.waiting],
            "teams": dict(self.teams),
        }

    def stranded(self, fleet_size: int) -> List["MailItem"]:
        """Pending items needing a larger team than ``fleet_size`` robots can form."""
        limit = min(self.capacity_tier.team_size, fleet_size)
        return [item for item in self.items if required_team_size(item.weight) > limit]

    def _max_team_size(self) -> int:
        return max(1, min(self.capacity_tier.team_size, len(self.waiting)))

    def _next_loadable(self) -> Optional["MailItem"]:
        limit = self._max_team_size()
        for item in self.items:
            if required_team_size(item.weight) <= limit:
                return item
        return None

    def _next_individual(self) -> Optional["MailItem"]:
        for item in self.items:
            if item.weight <= INDIVIDUAL_MAX_WEIGHT:
                return item
        return None
