"""Room synchronisation protocol.

This module is transport-agnostic: each inbound command is applied to the
room it names and turned into a list of :class:`Outbound` messages, each
addressed to explicit connection ids. The websocket layer only has to deliver
them. That keeps every transition testable without a live socket.

Consistency is deliberately weak. The server does not re-check shape bounds
or inventory sufficiency; clients validate before sending and the server
applies whatever well-formed cells arrive, in arrival order, so the last
write to a cell wins.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .commands import (
    Command,
    Disconnect,
    InventoryUpdate,
    JoinRoom,
    PlaceTile,
    ResetGrid,
    RestartGame,
    UndoAction,
    parse_command,
)
from .constants import (
    EVT_ACTION_UNDONE,
    EVT_GAME_RESTARTED,
    EVT_GRID_RESET,
    EVT_INVENTORY_UPDATED,
    EVT_ROOM_OCCUPANCY,
    EVT_ROOM_STATE,
    EVT_TILE_PLACED,
)
from .logging_config import get_logger
from .room import Room
from .schemas import (
    ActionUndone,
    GameRestarted,
    GridReset,
    InventoryUpdated,
    RoomOccupancy,
    TilePlaced,
    dump,
)
from .state import RoomRegistry

logger = get_logger(__name__)


@dataclass(frozen=True)
class Outbound:
    event: str
    data: Dict[str, Any]
    recipients: Tuple[str, ...]

    def frame(self) -> Dict[str, Any]:
        return {"type": self.event, "data": self.data}


def _send(event: str, data: Dict[str, Any], recipients: Iterable[str]) -> List[Outbound]:
    targets = tuple(recipients)
    if not targets:
        return []
    return [Outbound(event, data, targets)]


class SyncProtocol:
    """Applies client commands to rooms and works out who needs to hear about it."""

    def __init__(self, registry: Optional[RoomRegistry] = None):
        self.registry = registry if registry is not None else RoomRegistry()
        # connection id -> joined room id (None until the first join)
        self._sessions: Dict[str, Optional[str]] = {}
        self._handlers: Dict[type, Callable[[str, Any], List[Outbound]]] = {
            JoinRoom: self._join_room,
            PlaceTile: self._place_tile,
            UndoAction: self._undo_action,
            ResetGrid: self._reset_grid,
            RestartGame: self._restart_game,
            InventoryUpdate: self._inventory_update,
            Disconnect: self._disconnect,
        }

    # ------------------------------------------------------------------
    # Connection bookkeeping
    # ------------------------------------------------------------------

    def connect(self, conn_id: str) -> None:
        self._sessions.setdefault(conn_id, None)

    def room_of(self, conn_id: str) -> Optional[str]:
        return self._sessions.get(conn_id)

    def disconnect(self, conn_id: str) -> Optional[str]:
        """Forget *conn_id* and drop it from its room. Returns the room it left.

        Membership is updated before this returns; broadcasting the new
        occupancy is left to the caller so it can happen on a later turn.
        """
        room_id = self._sessions.pop(conn_id, None)
        if room_id is None:
            return None
        room = self.registry.get(room_id)
        if room is not None:
            room.remove_member(conn_id)
        return room_id

    def occupancy(self, room_id: str) -> List[Outbound]:
        """Current member count of *room_id*, addressed to every member."""
        room = self.registry.get(room_id)
        if room is None:
            return []
        payload = RoomOccupancy(room_id=room.room_id, count=room.occupancy)
        return _send(EVT_ROOM_OCCUPANCY, dump(payload), sorted(room.members))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def handle(self, conn_id: str, data: Any) -> List[Outbound]:
        """Parse a raw frame from *conn_id* and apply it. Malformed frames are ignored."""
        command = parse_command(data)
        if command is None:
            logger.debug(f"Ignoring malformed message from {conn_id}")
            return []
        return self.apply(conn_id, command)

    def apply(self, conn_id: str, command: Command) -> List[Outbound]:
        handler = self._handlers.get(type(command))
        if handler is None:
            return []
        logger.debug(f"{conn_id}: {type(command).__name__}")
        return handler(conn_id, command)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _join_room(self, conn_id: str, command: JoinRoom) -> List[Outbound]:
        room = self.registry.get_or_create(command.room_id)
        if room is None:
            return []
        outbound: List[Outbound] = []

        previous = self._sessions.get(conn_id)
        if previous and previous != room.room_id:
            previous_room = self.registry.get(previous)
            if previous_room is not None:
                previous_room.remove_member(conn_id)
            outbound.extend(self.occupancy(previous))

        room.add_member(conn_id)
        self._sessions[conn_id] = room.room_id
        logger.info(f"{conn_id} joined room {room.room_id!r} ({room.occupancy} connected)")

        outbound.extend(_send(EVT_ROOM_STATE, dump(room.snapshot()), [conn_id]))
        outbound.extend(self.occupancy(room.room_id))
        return outbound

    def _apply_batch(self, room: Room, command: PlaceTile) -> None:
        applied = room.apply_cells(command.cells)
        if applied != len(command.cells):
            logger.debug(f"Room {room.room_id!r}: skipped {len(command.cells) - applied} malformed cells")
        if command.inventory_enabled is not None:
            room.replace_inventory(command.inventory, command.inventory_enabled)

    def _place_tile(self, conn_id: str, command: PlaceTile) -> List[Outbound]:
        room = self.registry.get(command.room_id)
        if room is None:
            return []
        self._apply_batch(room, command)
        payload = TilePlaced(
            cells=list(command.cells),
            inventory=room.ledger.snapshot(),
            inventory_enabled=room.inventory_enabled,
        )
        return _send(EVT_TILE_PLACED, dump(payload), room.others(conn_id))

    def _undo_action(self, conn_id: str, command: UndoAction) -> List[Outbound]:
        # No history is kept here; the client sends the reverted cells as a normal batch.
        room = self.registry.get(command.room_id)
        if room is None:
            return []
        self._apply_batch(room, command)
        payload = ActionUndone(
            cells=list(command.cells),
            inventory=room.ledger.snapshot(),
            inventory_enabled=room.inventory_enabled,
        )
        return _send(EVT_ACTION_UNDONE, dump(payload), room.others(conn_id))

    def _reset_grid(self, conn_id: str, command: ResetGrid) -> List[Outbound]:
        room = self.registry.get(command.room_id)
        if room is None:
            return []
        room.reset_grid()
        return _send(EVT_GRID_RESET, dump(GridReset()), room.others(conn_id))

    def _restart_game(self, conn_id: str, command: RestartGame) -> List[Outbound]:
        room = self.registry.get(command.room_id)
        if room is None:
            return []
        room.reset_grid()
        room.replace_inventory(command.inventory, command.inventory_enabled)
        payload = GameRestarted(inventory=room.ledger.snapshot(), inventory_enabled=room.inventory_enabled)
        return _send(EVT_GAME_RESTARTED, dump(payload), room.others(conn_id))

    def _inventory_update(self, conn_id: str, command: InventoryUpdate) -> List[Outbound]:
        room = self.registry.get(command.room_id)
        if room is None:
            return []
        room.replace_inventory(command.inventory, command.inventory_enabled)
        payload = InventoryUpdated(inventory=room.ledger.snapshot(), inventory_enabled=room.inventory_enabled)
        return _send(EVT_INVENTORY_UPDATED, dump(payload), room.others(conn_id))

    def _disconnect(self, conn_id: str, command: Disconnect) -> List[Outbound]:
        self.disconnect(conn_id)
        return []


__all__ = ["Outbound", "SyncProtocol"]
