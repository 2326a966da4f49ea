from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Tuple

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from automail.mail_item import MailItem

OrderingKey = Callable[["MailItem"], Tuple]


def by_floor(item: "MailItem") -> Tuple:
    """Highest destination first, earliest arrival breaking ties."""
    return (-item.destination_floor, item.arrival_time, item.item_id)


def by_arrival(item: "MailItem") -> Tuple:
    return (item.arrival_time, item.item_id)


ORDERING_REGISTRY: Dict[str, OrderingKey] = {
    "floor": by_floor,
    "arrival": by_arrival,
}


def get_ordering(name: str) -> OrderingKey:
    key = ORDERING_REGISTRY.get(name.lower())
    if key is None:
        raise ValueError(f"Unknown pool ordering '{name}'. Available: {', '.join(ORDERING_REGISTRY)}")
    return key
