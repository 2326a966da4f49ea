from __future__ import annotations

import random
from collections import defaultdict
from typing import TYPE_CHECKING, DefaultDict, List, Optional

from .building import Building
from .mail_item import MailItem

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from mailpool import MailPool

MIN_WEIGHT = 200
WEIGHT_SPREAD = 700


class MailGenerator:
    """Produces a seeded batch of mail and releases it into the pool as it arrives."""

    def __init__(
        self,
        building: Building,
        mail_to_create: int,
        max_weight: int,
        arrival_window: int = 60,
        random_seed: Optional[int] = None,
    ) -> None:
        self.building = building
        self.mail_to_create = mail_to_create
        self.max_weight = max_weight
        self.arrival_window = max(1, arrival_window)
        self.random = random.Random(random_seed)
        self.schedule: DefaultDict[int, List[MailItem]] = defaultdict(list)
        self._generate()

    def release(self, time_step: int, pool: "MailPool") -> int:
        arrivals = self.schedule.pop(time_step, [])
        for item in arrivals:
            pool.add_to_pool(item)
        return len(arrivals)

    @property
    def pending(self) -> int:
        return sum(len(items) for items in self.schedule.values())

    def _generate(self) -> None:
        floors = self.building.floors
        for index in range(self.mail_to_create):
            arrival = self.random.randrange(self.arrival_window)
            item = MailItem(
                item_id=f"M{index:04d}",
                destination_floor=self.random.choice(floors),
                weight=self._weight(),
                arrival_time=arrival,
            )
            self.schedule[arrival].append(item)

    def _weight(self) -> int:
        # Mostly light mail with a long tail of heavy parcels.
        weight = MIN_WEIGHT + abs(self.random.gauss(0.0, 1.0)) * WEIGHT_SPREAD
        return max(1, min(self.max_weight, int(weight)))
