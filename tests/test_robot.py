"""
Tests for the robot state machine: movement, loading rules, tube promotion,
team hand-offs and the per-run leg guard. The mail source and delivery sink
are small in-memory fakes.
"""

import pytest

from automail import (
    DeliveryStarted,
    EmptyHandError,
    ExcessiveDeliveryError,
    ItemTooHeavyError,
    MailItem,
    Robot,
    RobotState,
    SlotOccupiedError,
    StateTransition,
)


# -- Helpers ----------------------------------------------------------

class FakeSource:
    def __init__(self, ceiling=2000, remaining=None):
        self.ceiling = ceiling
        self.remaining = dict(remaining or {})
        self.pool = []
        self.waiting = []
        self.decremented = []

    def add_to_pool(self, item):
        self.pool.append(item)

    def register_waiting(self, robot):
        self.waiting.append(robot)

    def get_robots_remaining(self, item):
        return self.remaining.get(item.item_id, 1)

    def decrement_robots_remaining(self, item):
        self.decremented.append(item)
        self.remaining[item.item_id] -= 1

    def get_current_hand_weight_ceiling(self):
        return self.ceiling


class FakeSink:
    def __init__(self):
        self.delivered = []

    def record_delivered(self, item):
        self.delivered.append(item)


def _item(item_id="M1", dest=5, weight=500):
    return MailItem(item_id=item_id, destination_floor=dest, weight=weight)


def _robot(source=None, sink=None, events=None, mailroom=1):
    return Robot(
        robot_id="R0",
        mail_source=source or FakeSource(),
        delivery=sink or FakeSink(),
        mailroom_floor=mailroom,
        listener=events.append if events is not None else None,
    )


def _slots_consistent(robot):
    return not (robot.hand is None and robot.tube is not None)


# -- State machine ----------------------------------------------------

def test_new_robot_starts_returning_at_mailroom():
    robot = _robot(mailroom=2)
    assert robot.state == RobotState.RETURNING
    assert robot.current_floor == 2
    assert robot.is_empty()


def test_first_step_registers_robot_as_waiting():
    source = FakeSource()
    robot = _robot(source=source)
    robot.step()
    assert robot.state == RobotState.WAITING
    assert source.waiting == [robot]


def test_arrival_at_mailroom_starts_run_in_same_tick():
    robot = _robot()
    robot.load_hand(_item(dest=5))
    robot.dispatch()
    robot.step()
    assert robot.state == RobotState.DELIVERING
    assert robot.destination_floor == 5
    assert robot.current_floor == 1
    assert robot.dispatch_requested is False


def test_empty_robot_never_leaves_even_when_dispatched():
    robot = _robot()
    robot.step()
    for _ in range(5):
        robot.dispatch()
        robot.step()
    assert robot.state == RobotState.WAITING
    assert robot.current_floor == 1


def test_loaded_robot_waits_for_dispatch():
    robot = _robot()
    robot.step()
    robot.load_hand(_item())
    robot.step()
    robot.step()
    assert robot.state == RobotState.WAITING
    robot.dispatch()
    robot.step()
    assert robot.state == RobotState.DELIVERING


def test_single_item_delivery_and_return():
    sink = FakeSink()
    robot = _robot(sink=sink)
    item = _item(dest=5, weight=500)
    robot.load_hand(item)
    robot.dispatch()

    robot.step()  # registers, starts the run
    for expected in (2, 3, 4, 5):
        robot.step()
        assert robot.current_floor == expected
        assert sink.delivered == []

    robot.step()
    assert sink.delivered == [item]
    assert robot.state == RobotState.RETURNING
    assert robot.hand is None
    assert robot.delivery_leg_count == 1

    for expected in (4, 3, 2, 1):
        robot.step()
        assert robot.current_floor == expected
        assert robot.state == RobotState.RETURNING

    robot.step()
    assert robot.state == RobotState.WAITING


def test_tube_item_is_promoted_after_first_leg():
    sink = FakeSink()
    events = []
    robot = _robot(sink=sink, events=events)
    first = _item("M1", dest=3)
    second = _item("M2", dest=6)
    robot.load_hand(first)
    robot.load_tube(second)
    robot.dispatch()

    robot.step()
    robot.step()
    robot.step()
    assert robot.current_floor == 3

    robot.step()
    assert sink.delivered == [first]
    assert robot.state == RobotState.DELIVERING
    assert robot.hand == second
    assert robot.tube is None
    assert robot.destination_floor == 6
    assert robot.delivery_leg_count == 1

    for _ in range(3):
        robot.step()
    robot.step()
    assert sink.delivered == [first, second]
    assert robot.state == RobotState.RETURNING
    assert robot.delivery_leg_count == 2

    transitions = [(e.old_state, e.new_state) for e in events if isinstance(e, StateTransition)]
    assert transitions == [
        (RobotState.RETURNING, RobotState.WAITING),
        (RobotState.WAITING, RobotState.DELIVERING),
        (RobotState.DELIVERING, RobotState.RETURNING),
    ]
    started = [e for e in events if isinstance(e, DeliveryStarted)]
    assert [e.item for e in started] == [first, second]
    assert started[0].tube_occupied is True
    assert started[1].tube_occupied is False


def test_slot_invariant_holds_through_a_two_leg_run():
    robot = _robot()
    robot.load_hand(_item("M1", dest=4))
    robot.load_tube(_item("M2", dest=2))
    robot.dispatch()
    for _ in range(20):
        robot.step()
        assert _slots_consistent(robot)
    assert robot.state == RobotState.WAITING


def test_movement_is_one_floor_per_tick_without_overshoot():
    robot = _robot()
    robot.load_hand(_item(dest=4))
    robot.dispatch()
    previous = robot.current_floor
    for _ in range(15):
        robot.step()
        assert abs(robot.current_floor - previous) <= 1
        assert 1 <= robot.current_floor <= 4
        previous = robot.current_floor


def test_robot_below_mailroom_moves_up():
    robot = _robot(mailroom=3)
    robot.current_floor = 1
    robot.step()
    assert robot.current_floor == 2
    assert robot.state == RobotState.RETURNING


def test_team_member_that_is_not_last_only_decrements():
    item = _item(weight=2400)
    source = FakeSource(ceiling=2600, remaining={item.item_id: 2})
    sink = FakeSink()
    robot = _robot(source=source, sink=sink)
    robot.load_hand(item)
    robot.dispatch()
    for _ in range(6):
        robot.step()
    assert sink.delivered == []
    assert source.decremented == [item]
    assert source.remaining[item.item_id] == 1
    assert robot.state == RobotState.RETURNING


def test_returning_robot_hands_tube_back_to_pool():
    source = FakeSource()
    robot = _robot(source=source)
    robot.hand = _item("M1")
    robot.tube = _item("M2")
    robot.step()
    assert source.pool == [_item("M2")]
    assert robot.tube is None
    assert robot.state == RobotState.WAITING


def test_third_leg_raises_excessive_delivery():
    sink = FakeSink()
    robot = _robot(sink=sink)
    item = _item(dest=1)
    robot.state = RobotState.DELIVERING
    robot.hand = item
    robot.destination_floor = 1
    robot.delivery_leg_count = 2
    with pytest.raises(ExcessiveDeliveryError) as excinfo:
        robot.step()
    assert excinfo.value.legs == 3
    assert sink.delivered == []
    assert robot.hand == item


def test_third_leg_keeps_slots_consistent_with_tube_loaded():
    robot = _robot()
    robot.state = RobotState.DELIVERING
    robot.hand = _item("M1", dest=1)
    robot.tube = _item("M2", dest=4)
    robot.destination_floor = 1
    robot.delivery_leg_count = 2
    with pytest.raises(ExcessiveDeliveryError):
        robot.step()
    assert _slots_consistent(robot)
    assert robot.hand.item_id == "M1"
    assert robot.tube.item_id == "M2"


def test_fault_returns_both_slots_to_the_pool():
    source = FakeSource()
    robot = _robot(source=source)
    robot.load_hand(_item("M1"))
    robot.load_tube(_item("M2"))
    robot.trigger_fault("jammed")
    assert robot.is_empty()
    assert sorted(item.item_id for item in source.pool) == ["M1", "M2"]
    assert robot.status == "faulted"


def test_fault_during_team_delivery_hands_off_to_team_mates():
    item = _item(weight=2400)
    source = FakeSource(ceiling=2600, remaining={item.item_id: 2})
    robot = _robot(source=source)
    robot.load_hand(item)
    robot.trigger_fault("jammed")
    assert robot.hand is None
    assert source.pool == []
    assert source.decremented == [item]


def test_faulted_robot_is_not_stepped():
    source = FakeSource()
    robot = _robot(source=source)
    robot.trigger_fault("test")
    robot.step()
    assert robot.state == RobotState.RETURNING
    assert source.waiting == []


# -- Loading ----------------------------------------------------------

def test_load_hand_above_ceiling_fails_and_leaves_robot_unchanged():
    robot = _robot(source=FakeSource(ceiling=2000))
    with pytest.raises(ItemTooHeavyError):
        robot.load_hand(_item(weight=2100))
    assert robot.hand is None
    assert robot.state == RobotState.RETURNING


def test_load_hand_uses_ceiling_at_call_time():
    source = FakeSource(ceiling=2000)
    robot = _robot(source=source)
    source.ceiling = 2600
    robot.load_hand(_item(weight=2500))
    assert robot.hand.weight == 2500


def test_load_tube_rejects_items_above_individual_max():
    robot = _robot(source=FakeSource(ceiling=3000))
    robot.load_hand(_item("M1", weight=100))
    with pytest.raises(ItemTooHeavyError) as excinfo:
        robot.load_tube(_item("M2", weight=2500))
    assert excinfo.value.ceiling == 2000
    assert robot.tube is None


def test_load_tube_requires_hand_item():
    robot = _robot()
    with pytest.raises(EmptyHandError):
        robot.load_tube(_item())
    assert robot.is_empty()


def test_loading_an_occupied_slot_fails():
    robot = _robot()
    robot.load_hand(_item("M1"))
    with pytest.raises(SlotOccupiedError):
        robot.load_hand(_item("M2"))
    robot.load_tube(_item("M3"))
    with pytest.raises(SlotOccupiedError):
        robot.load_tube(_item("M4"))
    assert robot.hand.item_id == "M1"
    assert robot.get_tube_item().item_id == "M3"


def test_dispatch_is_idempotent():
    robot = _robot()
    robot.dispatch()
    robot.dispatch()
    assert robot.dispatch_requested is True
