from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional, Set

from .coerce import to_int
from .constants import DEFAULT_COLOR, DEFAULT_TILE_ID, GRID_COLS, GRID_ROWS
from .inventory import InventoryLedger
from .schemas import Cell, RoomSnapshot
from .tiles import in_bounds, normalize_rotation


def create_default_grid() -> List[Cell]:
    return [Cell(row=row, col=col) for row in range(GRID_ROWS) for col in range(GRID_COLS)]


def coerce_cell(raw: Any) -> Optional[Cell]:
    """Turn one client-supplied cell into a :class:`Cell`, or ``None`` if it must be skipped."""
    if not isinstance(raw, dict):
        return None
    row = to_int(raw.get("row", math.nan))
    col = to_int(raw.get("col", math.nan))
    if row is None or col is None or not in_bounds(row, col):
        return None
    tile_id = raw.get("tileId")
    color = raw.get("color")
    return Cell(
        row=row,
        col=col,
        tile_id=tile_id if isinstance(tile_id, str) else DEFAULT_TILE_ID,
        color=color if isinstance(color, str) else DEFAULT_COLOR,
        rotation=normalize_rotation(raw.get("rotation")),
    )


class Room:
    """Grid, inventory and membership for one collaborative session.

    Rooms have no owner and are never torn down; any member may mutate them.
    """

    def __init__(self, room_id: str):
        self.room_id = room_id
        self.grid: List[Cell] = create_default_grid()
        self.ledger = InventoryLedger()
        # connection ids currently associated with this room
        self.members: Set[str] = set()

    # -------------------- Grid -------------------- #

    def reset_grid(self) -> None:
        self.grid = create_default_grid()

    def cell_at(self, row: int, col: int) -> Cell:
        return self.grid[row * GRID_COLS + col]

    def apply_cells(self, cells: Iterable[Any]) -> int:
        """Overwrite grid cells from a client batch and return how many were applied.

        Malformed or out-of-range entries are skipped; the rest of the batch
        still applies. Later entries win over earlier ones for the same cell.
        """
        applied = 0
        for raw in cells:
            cell = coerce_cell(raw)
            if cell is None:
                continue
            self.grid[cell.row * GRID_COLS + cell.col] = cell
            applied += 1
        return applied

    # -------------------- Inventory -------------------- #

    @property
    def inventory_enabled(self) -> bool:
        return self.ledger.enabled

    def replace_inventory(self, values: Any, enabled: bool) -> None:
        self.ledger.reset(values)
        self.ledger.enabled = enabled

    # -------------------- Membership -------------------- #

    def add_member(self, conn_id: str) -> None:
        self.members.add(conn_id)

    def remove_member(self, conn_id: str) -> None:
        self.members.discard(conn_id)

    @property
    def occupancy(self) -> int:
        return len(self.members)

    def others(self, conn_id: str) -> List[str]:
        return sorted(member for member in self.members if member != conn_id)

    # -------------------- Snapshots -------------------- #

    def snapshot(self) -> RoomSnapshot:
        """Detached copy of the full room state."""
        return RoomSnapshot(
            grid=[cell.model_copy() for cell in self.grid],
            inventory=self.ledger.snapshot(),
            inventory_enabled=self.ledger.enabled,
        )


__all__ = ["Room", "create_default_grid", "coerce_cell"]
