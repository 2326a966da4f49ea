from __future__ import annotations

from .capacity import CapacityTier, required_team_size, weight_ceiling
from .interface import MailSource
from .ordering import ORDERING_REGISTRY, get_ordering
from .pool import MailPool

__all__ = [
    "CapacityTier",
    "MailPool",
    "MailSource",
    "ORDERING_REGISTRY",
    "get_ordering",
    "required_team_size",
    "weight_ceiling",
]
