from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Callable, Dict, List, Optional

from mailpool import MailPool

from .building import Building, Clock
from .config import SimulationConfig, required_team_size
from .delivery import DeliveryReport, DeliverySnapshot
from .errors import ExcessiveDeliveryError
from .generator import MailGenerator
from .mail_item import MailItem
from .robot import DeliveryStarted, Robot, RobotEvent, StateTransition

logger = logging.getLogger(__name__)


class Simulation:
    """Tick-driven mail delivery simulation for analytics and UI consumption."""

    def __init__(self, config: Optional[SimulationConfig] = None) -> None:
        self.config = config or SimulationConfig()
        self.building = Building(num_floors=self.config.num_floors, mailroom_floor=self.config.mailroom_floor)
        self.clock = Clock()
        self.mail_pool = MailPool(self.config.capacity_tier, self.config.pool_ordering)
        self.report = DeliveryReport(self.clock.now, penalty=self.config.penalty)
        self.generator = MailGenerator(
            self.building,
            mail_to_create=self.config.mail_to_create,
            max_weight=self.config.mail_max_weight,
            arrival_window=self.config.arrival_window,
            random_seed=self.config.random_seed,
        )
        self.robots: List[Robot] = [
            Robot(
                robot_id=f"R{index}",
                mail_source=self.mail_pool,
                delivery=self,
                mailroom_floor=self.building.mailroom_floor,
                clock=self.clock.now,
                listener=self._on_robot_event,
            )
            for index in range(self.config.robot_count)
        ]
        self.event_hooks: Dict[str, List[Callable[[object], None]]] = {}
        self.faults: List[dict] = []
        self._injected = 0

    @property
    def current_time(self) -> int:
        return self.clock.now()

    @property
    def total_mail(self) -> int:
        return self.config.mail_to_create + self._injected

    def is_complete(self) -> bool:
        return len(self.report) >= self.total_mail

    def in_service_count(self) -> int:
        return sum(1 for robot in self.robots if robot.in_service())

    def run(self, max_ticks: Optional[int] = None) -> DeliverySnapshot:
        """Step until all mail is delivered or ``max_ticks`` have elapsed."""
        ticks = 0
        while not self.is_complete():
            if not self.in_service_count():
                logger.error("No robots left in service at T: %d", self.current_time)
                break
            if self._is_stalled():
                logger.error(
                    "T: %3d > %d item(s) need a larger team than the %d robot(s) in service",
                    self.current_time,
                    len(self.mail_pool.stranded(self.in_service_count())),
                    self.in_service_count(),
                )
                break
            if max_ticks is not None and ticks >= max_ticks:
                logger.warning(
                    "Stopped after %d ticks with %d of %d items delivered",
                    ticks,
                    len(self.report),
                    self.total_mail,
                )
                break
            self.step()
            ticks += 1
        return self.report.snapshot(self.current_time)

    def step(self) -> None:
        arrivals = self.generator.release(self.current_time, self.mail_pool)
        if arrivals:
            self._emit("arrival", {"time": self.current_time, "count": arrivals})
        self.mail_pool.step()
        for robot in self.robots:
            try:
                robot.step()
            except ExcessiveDeliveryError as exc:
                logger.error("T: %3d > %s", self.current_time, exc)
                self.trigger_robot_fault(robot.robot_id, str(exc))

        if self.current_time % self.config.metrics_hook_interval == 0:
            self._emit_metrics()

        self.clock.tick()

    def record_delivered(self, item: MailItem) -> None:
        self.report.record_delivered(item)
        self._emit("delivered", {"time": self.current_time, "item": asdict(item)})

    def inject_mail(self, destination: int, weight: int) -> MailItem:
        if not self.building.contains(destination):
            raise ValueError(
                f"Destination {destination} lies outside floors "
                f"{self.building.lowest_floor}..{self.building.top_floor}"
            )
        fleet = self.in_service_count()
        if (required_team_size(weight) or 0) > fleet:
            raise ValueError(f"Weight {weight} needs a larger team than the {fleet} robot(s) in service")
        item = MailItem(
            item_id=f"X{self._injected:04d}",
            destination_floor=destination,
            weight=weight,
            arrival_time=self.current_time,
        )
        self.mail_pool.add_to_pool(item)
        self._injected += 1
        return item

    def set_pool_ordering(self, name: str) -> None:
        self.mail_pool.set_ordering(name)

    def on_event(self, event: str, callback: Callable[[object], None]) -> None:
        self.event_hooks.setdefault(event, []).append(callback)

    def trigger_robot_fault(self, robot_id: str, reason: Optional[str] = None) -> None:
        robot = self._get_robot(robot_id)
        if not robot:
            return
        self.mail_pool.unregister_waiting(robot)
        robot.trigger_fault(reason)
        fault = {"robot_id": robot_id, "reason": reason, "time": self.current_time}
        self.faults.append(fault)
        self._emit("fault", fault)

    def snapshot(self) -> dict:
        return {
            "time": self.current_time,
            "building": {
                "floors": self.building.num_floors,
                "mailroom": self.building.mailroom_floor,
            },
            "robots": [robot.snapshot() for robot in self.robots],
            "pool": self.mail_pool.snapshot(),
            "upcoming_mail": self.generator.pending,
            "metrics": asdict(self.report.snapshot(self.current_time)),
            "faults": list(self.faults),
            "complete": self.is_complete(),
        }

    def _is_stalled(self) -> bool:
        # Everything not yet delivered sits in the pool and no remaining team can carry it.
        if self.generator.pending:
            return False
        stranded = self.mail_pool.stranded(self.in_service_count())
        return bool(stranded) and len(self.report) + len(stranded) >= self.total_mail

    def _on_robot_event(self, event: RobotEvent) -> None:
        if isinstance(event, StateTransition):
            self._emit("transition", event)
        elif isinstance(event, DeliveryStarted):
            self._emit("delivering", event)

    def _emit_metrics(self) -> None:
        self._emit("metrics", {"metrics": self.report.snapshot(self.current_time), "pool": self.mail_pool.snapshot()})

    def _emit(self, event: str, payload: object) -> None:
        for callback in self.event_hooks.get(event, []):
            callback(payload)

    def _get_robot(self, robot_id: str) -> Optional[Robot]:
        for robot in self.robots:
            if robot.robot_id == robot_id:
                return robot
        return None
