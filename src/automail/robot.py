from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Union

from .config import INDIVIDUAL_MAX_WEIGHT
from .errors import EmptyHandError, ExcessiveDeliveryError, ItemTooHeavyError, SlotOccupiedError
from .mail_item import MailItem

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from mailpool import MailSource

    from .delivery import DeliverySink

logger = logging.getLogger(__name__)


class RobotState(Enum):
    RETURNING = "returning"
    WAITING = "waiting"
    DELIVERING = "delivering"


@dataclass(frozen=True)
class StateTransition:
    time: int
    robot_id: str
    old_state: RobotState
    new_state: RobotState
    tube_occupied: bool


@dataclass(frozen=True)
class DeliveryStarted:
    """Emitted whenever a robot begins a leg with ``item`` in hand."""

    time: int
    robot_id: str
    item: MailItem
    tube_occupied: bool


RobotEvent = Union[StateTransition, DeliveryStarted]


@dataclass(eq=False)
class Robot:
    """A mail robot carrying one item in hand and one in its tube.

    The robot is stepped once per tick. It walks back to the mailroom,
    waits there until the mail pool has loaded and dispatched it, then
    delivers its hand item and (if present) its tube item before returning.
    """

    MAX_LEGS_PER_RUN = 2

    robot_id: str
    mail_source: "MailSource" = field(repr=False)
    delivery: "DeliverySink" = field(repr=False)
    mailroom_floor: int = 1
    clock: Optional[Callable[[], int]] = field(default=None, repr=False)
    listener: Optional[Callable[[RobotEvent], None]] = field(default=None, repr=False)
    state: RobotState = RobotState.RETURNING
    current_floor: int = field(init=False)
    destination_floor: Optional[int] = None
    hand: Optional[MailItem] = None
    tube: Optional[MailItem] = None
    dispatch_requested: bool = False
    delivery_leg_count: int = 0
    status: str = "in_service"  # in_service, faulted

    def __post_init__(self) -> None:
        self.current_floor = self.mailroom_floor

    def in_service(self) -> bool:
        return self.status == "in_service"

    def is_empty(self) -> bool:
        return self.hand is None and self.tube is None

    def get_tube_item(self) -> Optional[MailItem]:
        return self.tube

    def dispatch(self) -> None:
        self.dispatch_requested = True

    def load_hand(self, item: MailItem) -> None:
        if self.hand is not None:
            raise SlotOccupiedError(f"Robot {self.robot_id} already holds {self.hand.item_id}")
        ceiling = self.mail_source.get_current_hand_weight_ceiling()
        if item.weight > ceiling:
            raise ItemTooHeavyError(item.weight, ceiling)
        self.hand = item

    def load_tube(self, item: MailItem) -> None:
        if self.tube is not None:
            raise SlotOccupiedError(f"Robot {self.robot_id} tube already holds {self.tube.item_id}")
        if self.hand is None:
            raise EmptyHandError(f"Robot {self.robot_id} must be holding an item before loading its tube")
        if item.weight > INDIVIDUAL_MAX_WEIGHT:
            raise ItemTooHeavyError(item.weight, INDIVIDUAL_MAX_WEIGHT)
        self.tube = item

    def step(self) -> None:
        """Advance the robot by one tick.

        Raises ``ExcessiveDeliveryError`` if the current run attempts more
        legs than the hand and tube can supply.
        """
        if not self.in_service():
            return

        if self.state is RobotState.RETURNING:
            if self.current_floor != self.mailroom_floor:
                self._move_towards(self.mailroom_floor)
                return
            self._register_at_mailroom()
            # Fall through: a robot reaching the mailroom may start its run this tick.

        if self.state is RobotState.WAITING:
            self._start_run_if_dispatched()
        elif self.state is RobotState.DELIVERING:
            self._advance_delivery()

    def trigger_fault(self, reason: Optional[str] = None) -> None:
        self.status = "faulted"
        self.dispatch_requested = False
        if self.tube is not None:
            self.mail_source.add_to_pool(self.tube)
            self.tube = None
        if self.hand is not None:
            # Team mates still carry a shared item; only a sole carrier gives it back.
            if self.mail_source.get_robots_remaining(self.hand) > 1:
                self.mail_source.decrement_robots_remaining(self.hand)
            else:
                self.mail_source.add_to_pool(self.hand)
            self.hand = None
        logger.warning("Robot %s faulted: %s", self.robot_id, reason or "unspecified")

    def snapshot(self) -> dict:
        return {
            "id": self.robot_id,
            "state": self.state.value,
            "status": self.status,
            "floor": self.current_floor,
            "destination": self.destination_floor if self.state is RobotState.DELIVERING else None,
            "hand": self.hand.item_id if self.hand else None,
            "tube": self.tube.item_id if self.tube else None,
        }

    def _register_at_mailroom(self) -> None:
        if self.tube is not None:
            logger.debug("T: %3d > old addToPool [%s]", self._now(), self.tube)
            self.mail_source.add_to_pool(self.tube)
            self.tube = None
        self.mail_source.register_waiting(self)
        self._change_state(RobotState.WAITING)

    def _start_run_if_dispatched(self) -> None:
        if self.is_empty() or not self.dispatch_requested:
            return
        self.dispatch_requested = False
        self.delivery_leg_count = 0
        self._set_route()
        self._change_state(RobotState.DELIVERING)

    def _advance_delivery(self) -> None:
        if self.current_floor != self.destination_floor:
            self._move_towards(self.destination_floor)
            return

        self.delivery_leg_count += 1
        if self.delivery_leg_count > self.MAX_LEGS_PER_RUN:
            # Slots are left as they were so the caller can reclaim them.
            raise ExcessiveDeliveryError(self.robot_id, self.delivery_leg_count)

        item = self.hand
        if self.mail_source.get_robots_remaining(item) == 1:
            self.delivery.record_delivered(item)
        else:
            self.mail_source.decrement_robots_remaining(item)
        self.hand = None

        if self.tube is None:
            self._change_state(RobotState.RETURNING)
        else:
            self.hand, self.tube = self.tube, None
            self._set_route()
            self._change_state(RobotState.DELIVERING)

    def _set_route(self) -> None:
        self.destination_floor = self.hand.destination_floor

    def _move_towards(self, target: int) -> None:
        if self.current_floor < target:
            self.current_floor += 1
        elif self.current_floor > target:
            self.current_floor -= 1

    def _now(self) -> int:
        return self.clock() if self.clock else 0

    def _tag(self) -> str:
        # R3(1) means the tube is also filled
        return f"{self.robot_id}({1 if self.tube else 0})"

    def _change_state(self, next_state: RobotState) -> None:
        assert not (self.hand is None and self.tube is not None)
        previous = self.state
        self.state = next_state
        now = self._now()
        tube_occupied = self.tube is not None
        if previous is not next_state:
            logger.info("T: %3d > %7s changed from %s to %s", now, self._tag(), previous.name, next_state.name)
            self._emit(StateTransition(now, self.robot_id, previous, next_state, tube_occupied))
        if next_state is RobotState.DELIVERING:
            logger.info("T: %3d > %7s-> [%s]", now, self._tag(), self.hand)
            self._emit(DeliveryStarted(now, self.robot_id, self.hand, tube_occupied))

    def _emit(self, event: RobotEvent) -> None:
        if self.listener is not None:
            self.listener(event)
