"""Typed client commands.

Every inbound websocket frame is parsed into one of the frozen dataclasses
below before anything touches room state. Frames that do not fit are dropped
(:func:`parse_command` returns ``None``); clients never get an error back.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .constants import (
    MSG_INVENTORY_UPDATE,
    MSG_JOIN_ROOM,
    MSG_PLACE_TILE,
    MSG_RESET_GRID,
    MSG_RESTART_GAME,
    MSG_UNDO_ACTION,
)
from .state import normalize_room_id


@dataclass(frozen=True)
class JoinRoom:
    room_id: str


@dataclass(frozen=True)
class PlaceTile:
    """A batch of cell overwrites.

    ``inventory`` is only honoured together with a boolean ``inventory_enabled``.
    """

    room_id: str
    cells: Tuple[Any, ...]
    inventory: Any = None
    inventory_enabled: Optional[bool] = None


@dataclass(frozen=True)
class UndoAction(PlaceTile):
    pass


@dataclass(frozen=True)
class ResetGrid:
    room_id: str


@dataclass(frozen=True)
class RestartGame:
    room_id: str
    inventory: Any = None
    inventory_enabled: bool = False


@dataclass(frozen=True)
class InventoryUpdate:
    room_id: str
    inventory: Any
    inventory_enabled: bool


@dataclass(frozen=True)
class Disconnect:
    pass


Command = Union[JoinRoom, PlaceTile, UndoAction, ResetGrid, RestartGame, InventoryUpdate, Disconnect]


def _present(value: Any) -> bool:
    """Truthiness as a browser sees it: empty objects and arrays still count."""
    if isinstance(value, (dict, list)):
        return True
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def _inventory_pair(data: dict) -> Tuple[Any, Optional[bool]]:
    inventory = data.get("inventory")
    enabled = data.get("inventoryEnabled")
    if isinstance(enabled, bool) and _present(inventory):
        return inventory, enabled
    return None, None


def _parse_join(room_id: str, data: dict) -> Optional[Command]:
    return JoinRoom(room_id)


def _parse_cells(room_id: str, data: dict, cls=PlaceTile) -> Optional[Command]:
    cells = data.get("cells")
    if not isinstance(cells, list):
        return None
    inventory, enabled = _inventory_pair(data)
    return cls(room_id, tuple(cells), inventory, enabled)


def _parse_undo(room_id: str, data: dict) -> Optional[Command]:
    return _parse_cells(room_id, data, UndoAction)


def _parse_reset(room_id: str, data: dict) -> Optional[Command]:
    return ResetGrid(room_id)


def _parse_restart(room_id: str, data: dict) -> Optional[Command]:
    return RestartGame(room_id, data.get("inventory"), bool(data.get("inventoryEnabled")))


def _parse_inventory_update(room_id: str, data: dict) -> Optional[Command]:
    enabled = data.get("inventoryEnabled")
    if not isinstance(enabled, bool):
        return None
    return InventoryUpdate(room_id, data.get("inventory"), enabled)


_PARSERS: Dict[str, Callable[[str, dict], Optional[Command]]] = {
    MSG_JOIN_ROOM: _parse_join,
    MSG_PLACE_TILE: _parse_cells,
    MSG_UNDO_ACTION: _parse_undo,
    MSG_RESET_GRID: _parse_reset,
    MSG_RESTART_GAME: _parse_restart,
    MSG_INVENTORY_UPDATE: _parse_inventory_update,
}


def parse_command(data: Any) -> Optional[Command]:
    if not isinstance(data, dict):
        return None
    msg_type = data.get("type")
    parser = _PARSERS.get(msg_type) if isinstance(msg_type, str) else None
    if parser is None:
        return None
    room_id = normalize_room_id(data.get("roomId"))
    if not room_id:
        return None
    return parser(room_id, data)


__all__ = [
    "JoinRoom",
    "PlaceTile",
    "UndoAction",
    "ResetGrid",
    "RestartGame",
    "InventoryUpdate",
    "Disconnect",
    "Command",
    "parse_command",
]
