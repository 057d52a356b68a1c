"""Headless model of one editing client.

The server trusts whatever cells it receives, so all rule checking happens
here, before a message is produced: the placement must fit on the grid and,
for consumable tiles, the current color must still have one left. The editor
keeps its own mirror of the room and an undo stack; undo is just another
batch of cells sent to the server.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .constants import (
    DEFAULT_TILE_ID,
    EVT_ACTION_UNDONE,
    EVT_GAME_RESTARTED,
    EVT_GRID_RESET,
    EVT_INVENTORY_UPDATED,
    EVT_ROOM_OCCUPANCY,
    EVT_ROOM_STATE,
    EVT_TILE_PLACED,
    MSG_INVENTORY_UPDATE,
    MSG_JOIN_ROOM,
    MSG_PLACE_TILE,
    MSG_RESET_GRID,
    MSG_RESTART_GAME,
    MSG_UNDO_ACTION,
    NEUTRAL_COLOR,
    PLAYER_COLORS,
)
from .inventory import Inventory, empty_inventory
from .room import Room
from .schemas import Cell, dump
from .state import normalize_room_id
from .tiles import can_place, footprint, get_tile, step_rotation

DEFAULT_SELECTED_TILE = "score-1"


@dataclass
class UndoEntry:
    cells: List[Dict[str, Any]]
    inventory: Inventory


class LocalEditor:
    def __init__(self, room_id: str):
        self.room_id = normalize_room_id(room_id)
        self.board = Room(self.room_id)
        self.selected_tile_id = DEFAULT_SELECTED_TILE
        self.rotation = 0
        self.color = NEUTRAL_COLOR
        self.occupancy = 0
        self.history: List[UndoEntry] = []

    # -------------------- Controls -------------------- #

    def select(self, tile_id: str) -> bool:
        if get_tile(tile_id) is None:
            return False
        self.selected_tile_id = tile_id
        return True

    def rotate(self, delta: int) -> int:
        self.rotation = step_rotation(self.rotation, delta)
        return self.rotation

    def set_color(self, color: str) -> bool:
        if color != NEUTRAL_COLOR and color not in PLAYER_COLORS:
            return False
        self.color = color
        return True

    def configure_inventory(self, values: Any) -> Dict[str, Any]:
        """Load starting counts for both colors and switch inventory-limited play on."""
        self.board.replace_inventory(values, True)
        return self._message(
            MSG_INVENTORY_UPDATE,
            inventory=self.board.ledger.snapshot(),
            inventoryEnabled=True,
        )

    # -------------------- Actions -------------------- #

    def join(self) -> Dict[str, Any]:
        return self._message(MSG_JOIN_ROOM)

    def place(self, row: int, col: int) -> Optional[Dict[str, Any]]:
        """Place the selected tile anchored at ``(row, col)``.

        Returns the ``placeTile`` message to send, or ``None`` if the tile does
        not fit or its color has run out. Nothing changes locally in that case.
        """
        tile = get_tile(self.selected_tile_id)
        if tile is None or not can_place(tile, row, col, self.rotation):
            return None

        ledger = self.board.ledger
        inventory_before = ledger.snapshot()
        if tile.consumes_inventory and not ledger.consume(self.color, tile.inventory_key):
            return None

        targets = footprint(tile, row, col, self.rotation)
        previous = [dump(self.board.cell_at(r, c)) for r, c in targets]

        erasing = tile.id == DEFAULT_TILE_ID
        cells = [
            dump(
                Cell(
                    row=r,
                    col=c,
                    tile_id=tile.id,
                    color=NEUTRAL_COLOR if erasing else self.color,
                    rotation=0 if erasing else self.rotation,
                )
            )
            for r, c in targets
        ]
        self.board.apply_cells(cells)
        self.history.append(UndoEntry(cells=previous, inventory=inventory_before))
        return self._message(
            MSG_PLACE_TILE,
            cells=cells,
            inventory=ledger.snapshot(),
            inventoryEnabled=ledger.enabled,
        )

    def undo(self) -> Optional[Dict[str, Any]]:
        """Revert this client's last placement; ``None`` when there is nothing to undo."""
        if not self.history:
            return None
        entry = self.history.pop()
        self.board.apply_cells(entry.cells)
        self.board.ledger.counts = entry.inventory
        return self._message(
            MSG_UNDO_ACTION,
            cells=entry.cells,
            inventory=self.board.ledger.snapshot(),
            inventoryEnabled=self.board.ledger.enabled,
        )

    def reset(self) -> Dict[str, Any]:
        self.board.reset_grid()
        self.history.clear()
        return self._message(MSG_RESET_GRID)

    def restart(self) -> Dict[str, Any]:
        """Clear the grid, drop the inventory and return every control to its default."""
        self.board.reset_grid()
        self.board.replace_inventory(None, False)
        self.history.clear()
        self.selected_tile_id = DEFAULT_SELECTED_TILE
        self.rotation = 0
        self.color = NEUTRAL_COLOR
        return self._message(MSG_RESTART_GAME, inventory=empty_inventory(), inventoryEnabled=False)

    def is_game_over(self) -> bool:
        return self.board.ledger.is_exhausted()

    # -------------------- Server events -------------------- #

    def apply_event(self, event: str, data: Optional[Dict[str, Any]] = None) -> None:
        data = data or {}
        if event == EVT_ROOM_STATE:
            self.board.reset_grid()
            self.board.apply_cells(data.get("grid") or [])
            self.board.replace_inventory(data.get("inventory"), bool(data.get("inventoryEnabled")))
            self.history.clear()
        elif event in (EVT_TILE_PLACED, EVT_ACTION_UNDONE):
            self.board.apply_cells(data.get("cells") or [])
            self._sync_inventory(data)
        elif event == EVT_GRID_RESET:
            self.board.reset_grid()
        elif event in (EVT_GAME_RESTARTED, EVT_INVENTORY_UPDATED):
            if event == EVT_GAME_RESTARTED:
                self.board.reset_grid()
                self.history.clear()
            self._sync_inventory(data)
        elif event == EVT_ROOM_OCCUPANCY:
            count = data.get("count")
            if isinstance(count, int):
                self.occupancy = count

    def _sync_inventory(self, data: Dict[str, Any]) -> None:
        enabled = data.get("inventoryEnabled")
        if isinstance(enabled, bool):
            self.board.replace_inventory(data.get("inventory"), enabled)

    def _message(self, msg_type: str, **fields: Any) -> Dict[str, Any]:
        return {"type": msg_type, "roomId": self.room_id, **fields}


__all__ = ["LocalEditor", "UndoEntry", "DEFAULT_SELECTED_TILE"]
