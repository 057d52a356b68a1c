"""Pydantic data schemas for everything the server sends over the wire.

Field names are snake_case in Python and camelCase on the wire; always dump
with ``model_dump(by_alias=True)`` (see :func:`dump`).
"""
from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .constants import DEFAULT_COLOR, DEFAULT_TILE_ID
from .inventory import Inventory, empty_inventory


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------
# Room state
# -----------------------------

class Cell(WireModel):
    """One grid square. ``rotation`` is always one of 0/90/180/270."""

    row: int
    col: int
    tile_id: str = DEFAULT_TILE_ID
    color: str = DEFAULT_COLOR
    rotation: int = 0


class RoomSnapshot(WireModel):
    """Full room state, sent only to a socket that just joined."""

    grid: List[Cell]
    inventory: Inventory = Field(default_factory=empty_inventory)
    inventory_enabled: bool = False


# -----------------------------
# Broadcast payloads
# -----------------------------

class InventoryState(WireModel):
    inventory: Inventory
    inventory_enabled: bool


class TilePlaced(InventoryState):
    # Relayed exactly as the sender supplied them.
    cells: List[Any]


class ActionUndone(TilePlaced):
    pass


class GameRestarted(InventoryState):
    pass


class InventoryUpdated(InventoryState):
    pass


class GridReset(WireModel):
    pass


class RoomOccupancy(WireModel):
    room_id: str
    count: int


def dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(by_alias=True)


__all__ = [
    "WireModel",
    "Cell",
    "RoomSnapshot",
    "InventoryState",
    "TilePlaced",
    "ActionUndone",
    "GameRestarted",
    "InventoryUpdated",
    "GridReset",
    "RoomOccupancy",
    "dump",
]
