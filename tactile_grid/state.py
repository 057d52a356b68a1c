"""Centralised in-memory runtime state.

The registry is the only owner of the room mapping. It is confined to the
event loop that dispatches websocket messages: handlers never await while
touching it, so each message is applied to completion before the next one.
Rooms are never evicted.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from .logging_config import get_logger
from .room import Room

logger = get_logger(__name__)


def normalize_room_id(value: Any) -> str:
    """Trimmed room id, or ``""`` if *value* is not a usable id."""
    if not isinstance(value, str):
        return ""
    return value.strip()


class RoomRegistry:
    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}

    def get_or_create(self, room_id: Any) -> Optional[Room]:
        key = normalize_room_id(room_id)
        if not key:
            return None
        room = self._rooms.get(key)
        if room is None:
            room = Room(key)
            self._rooms[key] = room
            logger.info(f"Created room {key!r} ({len(self._rooms)} rooms total)")
        return room

    def get(self, room_id: Any) -> Optional[Room]:
        key = normalize_room_id(room_id)
        if not key:
            return None
        return self._rooms.get(key)

    def __contains__(self, room_id: object) -> bool:
        return normalize_room_id(room_id) in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)


# Process-wide default registry used by the application module.
rooms = RoomRegistry()

__all__ = ["normalize_room_id", "RoomRegistry", "rooms"]
