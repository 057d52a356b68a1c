"""Per-color counters for the consumable tile kinds.

An inventory is a plain ``{"red": {kind: int}, "blue": {kind: int}}`` mapping
that always carries exactly :data:`INVENTORY_KEYS` for both colors. The
:class:`InventoryLedger` wraps one such mapping together with the flag that
says whether play is inventory-limited at all.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from .coerce import to_number
from .constants import INVENTORY_KEYS, PLAYER_COLORS

Inventory = Dict[str, Dict[str, int]]


def empty_inventory() -> Inventory:
    return {color: {key: 0 for key in INVENTORY_KEYS} for color in PLAYER_COLORS}


def sanitize_count(value: Any) -> int:
    number = to_number(value)
    if not math.isfinite(number) or number < 0:
        return 0
    return int(math.floor(number))


def sanitize_inventory(raw: Any) -> Inventory:
    """Build a complete inventory from untrusted input.

    Missing, negative or non-numeric values become 0, fractions are floored and
    unknown colors or kinds are dropped.
    """
    inventory = empty_inventory()
    if not isinstance(raw, Mapping):
        return inventory
    for color in PLAYER_COLORS:
        supplied = raw.get(color)
        if not isinstance(supplied, Mapping):
            continue
        for key in INVENTORY_KEYS:
            inventory[color][key] = sanitize_count(supplied.get(key))
    return inventory


def clone_inventory(inventory: Optional[Inventory]) -> Inventory:
    if inventory is None:
        return empty_inventory()
    return {color: dict(inventory[color]) for color in PLAYER_COLORS}


class InventoryLedger:
    """Consumable counters for one room (or one client's local view of it)."""

    def __init__(self, counts: Optional[Inventory] = None, enabled: bool = False):
        self.counts: Inventory = sanitize_inventory(counts) if counts is not None else empty_inventory()
        self.enabled: bool = enabled

    def tracks(self, color: str) -> bool:
        return self.enabled and color in PLAYER_COLORS

    def consume(self, color: str, kind: str) -> bool:
        """Take one *kind* from *color*. Fails (and changes nothing) when none are left."""
        if not self.tracks(color):
            return True
        if self.counts[color].get(kind, 0) <= 0:
            return False
        self.counts[color][kind] -= 1
        return True

    def reset(self, values: Any) -> None:
        self.counts = sanitize_inventory(values)

    def remaining(self, color: str) -> int:
        return sum(self.counts.get(color, {}).values())

    def total(self) -> int:
        return sum(self.remaining(color) for color in PLAYER_COLORS)

    def is_exhausted(self) -> bool:
        return self.enabled and self.total() == 0

    def snapshot(self) -> Inventory:
        return clone_inventory(self.counts)


__all__ = [
    "Inventory",
    "empty_inventory",
    "sanitize_count",
    "sanitize_inventory",
    "clone_inventory",
    "InventoryLedger",
]
