"""Mail robot simulation primitives."""

from .building import Building, Clock
from .config import CapacityTier, SimulationConfig
from .delivery import DeliveryReport, DeliverySink, DeliverySnapshot
from .errors import (
    AutomailError,
    EmptyHandError,
    ExcessiveDeliveryError,
    ItemTooHeavyError,
    MailAlreadyDeliveredError,
    RobotError,
    SlotOccupiedError,
)
from .generator import MailGenerator
from .mail_item import MailItem
from .robot import DeliveryStarted, Robot, RobotState, StateTransition
from .simulation import Simulation

__all__ = [
    "AutomailError",
    "Building",
    "CapacityTier",
    "Clock",
    "DeliveryReport",
    "DeliverySink",
    "DeliverySnapshot",
    "DeliveryStarted",
    "EmptyHandError",
    "ExcessiveDeliveryError",
    "ItemTooHeavyError",
    "MailAlreadyDeliveredError",
    "MailGenerator",
    "MailItem",
    "Robot",
    "RobotError",
    "RobotState",
    "Simulation",
    "SimulationConfig",
    "SlotOccupiedError",
    "StateTransition",
]
