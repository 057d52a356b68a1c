"""Tile catalog and placement geometry.

Shapes are lists of ``(dx, dy)`` offsets from the anchor cell, where ``dx``
runs along columns and ``dy`` along rows. Every shape contains ``(0, 0)``.
Nothing here knows about rooms or sockets; clients use these helpers to decide
whether a placement is legal before they emit it.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .coerce import to_number
from .constants import GRID_COLS, GRID_ROWS

Offset = Tuple[int, int]


@dataclass(frozen=True)
class TileCategory:
    id: str
    title: str


@dataclass(frozen=True)
class TileType:
    """A placeable piece. ``inventory_key`` is set only for consumable tiles."""

    id: str
    name: str
    label: str
    shape: Tuple[Offset, ...]
    category: str
    consumes_inventory: bool = False
    inventory_key: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.shape)


CATEGORIES: Tuple[TileCategory, ...] = (
    TileCategory("basic", "Basic tools"),
    TileCategory("score", "Score blocks"),
    TileCategory("walkway", "Guiding walkway"),
    TileCategory("hint", "Warning paving"),
)

TILE_TYPES: Tuple[TileType, ...] = (
    TileType("empty", "Clear", "CLR", ((0, 0),), "basic"),
    TileType("obstacle", "Obstacle", "OBS", ((0, 0),), "basic"),
    TileType("walkway-basic", "Basic walkway (1 cell)", "W+", ((0, 0),), "basic"),
    TileType("hint-basic", "Basic hint (1 cell)", "H+", ((0, 0),), "basic"),
    TileType("score-1", "1-point block (4 cells)", "1pt", ((0, 0), (1, 0), (0, 1), (1, 1)), "score"),
    TileType("score-2", "2-point block (2 cells)", "2pt", ((0, 0), (1, 0)), "score"),
    TileType("score-3", "3-point block (2 cells)", "3pt", ((0, 0), (1, 0)), "score"),
    TileType("score-4", "4-point block (1 cell)", "4pt", ((0, 0),), "score"),
    TileType("score-5", "5-point block (1 cell)", "5pt", ((0, 0),), "score"),
    TileType("walkway-1", "Walkway (1 cell)", "W1", ((0, 0),), "walkway", True, "walkway-1"),
    TileType("walkway-2", "Walkway (2 cells)", "W2", ((0, 0), (1, 0)), "walkway", True, "walkway-2"),
    TileType("walkway-3", "Walkway (3 cells)", "W3", ((0, 0), (1, 0), (2, 0)), "walkway", True, "walkway-3"),
    TileType("hint-corner", "Hint corner (3 cells)", "L", ((0, 0), (1, 0), (0, 1)), "hint", True, "hint-corner"),
    TileType("hint-t", "Hint T (4 cells)", "T", ((0, 0), (-1, 0), (1, 0), (0, 1)), "hint", True, "hint-t"),
    TileType(
        "hint-x", "Hint X (5 cells)", "X", ((0, 0), (1, 0), (-1, 0), (0, 1), (0, -1)), "hint", True, "hint-x"
    ),
)

_TILES_BY_ID: Dict[str, TileType] = {tile.id: tile for tile in TILE_TYPES}


def get_tile(tile_id: str) -> Optional[TileType]:
    return _TILES_BY_ID.get(tile_id)


def tiles_in_category(category: str) -> List[TileType]:
    return [tile for tile in TILE_TYPES if tile.category == category]


# ---------------------------------------------------------------------------
# Rotation
# ---------------------------------------------------------------------------

def normalize_rotation(value: Any) -> int:
    """Map any angle onto one of 0/90/180/270 (clockwise degrees).

    Unreadable or non-finite input becomes 0. Halfway angles round up, so 45
    becomes 90 and 315 wraps around to 0.
    """
    raw = to_number(value)
    if not math.isfinite(raw):
        return 0
    normalized = raw % 360
    return int(math.floor(normalized / 90 + 0.5) * 90) % 360


def rotate_offset(offset: Offset, rotation: int) -> Offset:
    x, y = offset
    if rotation == 90:
        return (y, -x)
    if rotation == 180:
        return (-x, -y)
    if rotation == 270:
        return (-y, x)
    return (x, y)


def rotate(offsets: Sequence[Offset], rotation: Any) -> List[Offset]:
    """Rotate *offsets* clockwise by *rotation* degrees, keeping their order."""
    angle = normalize_rotation(rotation)
    return [rotate_offset(offset, angle) for offset in offsets]


def step_rotation(current: Any, delta: int) -> int:
    """Apply a rotate-left/right step (``delta`` of -90 or 90) to *current*."""
    return normalize_rotation(normalize_rotation(current) + delta)


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < GRID_ROWS and 0 <= col < GRID_COLS


def footprint(tile: TileType, row: int, col: int, rotation: Any = 0) -> List[Tuple[int, int]]:
    """Return the ``(row, col)`` cells *tile* would cover when anchored at ``(row, col)``."""
    return [(row + dy, col + dx) for dx, dy in rotate(tile.shape, rotation)]


def can_place(tile: TileType, row: int, col: int, rotation: Any = 0) -> bool:
    """True if every cell of the rotated shape lies on the grid.

    Occupied cells are not checked: a placement overwrites whatever lies
    under its footprint.
    """
    for target_row, target_col in footprint(tile, row, col, rotation):
        if not in_bounds(target_row, target_col):
            return False
    return True


__all__ = [
    "Offset",
    "TileCategory",
    "TileType",
    "CATEGORIES",
    "TILE_TYPES",
    "get_tile",
    "tiles_in_category",
    "normalize_rotation",
    "rotate_offset",
    "rotate",
    "step_rotation",
    "in_bounds",
    "footprint",
    "can_place",
]
