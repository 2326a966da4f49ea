from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol

from .errors import MailAlreadyDeliveredError
from .mail_item import MailItem

logger = logging.getLogger(__name__)


class DeliverySink(Protocol):
    """Final destination for items whose delivery has completed."""

    def record_delivered(self, item: MailItem) -> None:
        ...


@dataclass
class DeliverySnapshot:
    time_step: int
    delivered: int
    average_delivery_time: float
    delivery_time_p95: float
    total_score: float
    last_delivery_time: Optional[int]


class DeliveryReport:
    """Records completed deliveries and scores them by how long they waited."""

    def __init__(self, clock: Callable[[], int], penalty: float = 1.2) -> None:
        self.clock = clock
        self.penalty = penalty
        self.delivered: Dict[str, int] = {}
        self.delivery_times: List[int] = []
        self.total_score: float = 0.0
        self.last_delivery_time: Optional[int] = None

    def record_delivered(self, item: MailItem) -> None:
        if item.item_id in self.delivered:
            raise MailAlreadyDeliveredError(item.item_id)
        now = self.clock()
        elapsed = max(0, now - item.arrival_time)
        self.delivered[item.item_id] = now
        self.delivery_times.append(elapsed)
        self.total_score += math.pow(elapsed, self.penalty)
        self.last_delivery_time = now
        logger.info("T: %3d > Delivered(%4d) [%s]", now, len(self.delivered), item)

    def is_delivered(self, item: MailItem) -> bool:
        return item.item_id in self.delivered

    def __len__(self) -> int:
        return len(self.delivered)

    def _average(self, values: List[int]) -> float:
        if not values:
            return 0.0
        return sum(values) / len(values)

    def _percentile(self, values: List[int], percentile: float) -> float:
        if not values:
            return 0.0
        ordered = sorted(values)
        k = (len(ordered) - 1) * percentile
        f = math.floor(k)
        c = math.ceil(k)
        if f == c:
            return float(ordered[int(k)])
        return float(ordered[f] * (c - k) + ordered[c] * (k - f))

    def snapshot(self, time_step: int) -> DeliverySnapshot:
        return DeliverySnapshot(
            time_step=time_step,
            delivered=len(self.delivered),
            average_delivery_time=self._average(self.delivery_times),
            delivery_time_p95=self._percentile(self.delivery_times, 0.95),
            total_score=self.total_score,
            last_delivery_time=self.last_delivery_time,
        )
