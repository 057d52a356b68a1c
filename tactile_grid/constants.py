GRID_ROWS = 28
GRID_COLS = 42
GRID_SIZE = GRID_ROWS * GRID_COLS

# Consumable tile kinds, one counter per player color.
INVENTORY_KEYS: tuple[str, ...] = (
    "walkway-1",
    "walkway-2",
    "walkway-3",
    "hint-corner",
    "hint-t",
    "hint-x",
)

PLAYER_COLORS: tuple[str, ...] = ("red", "blue")
NEUTRAL_COLOR = "black"

DEFAULT_TILE_ID = "empty"
DEFAULT_COLOR = NEUTRAL_COLOR

ROTATIONS: tuple[int, ...] = (0, 90, 180, 270)

# Client -> server message types
MSG_JOIN_ROOM = "joinRoom"
MSG_PLACE_TILE = "placeTile"
MSG_RESET_GRID = "resetGrid"
MSG_RESTART_GAME = "restartGame"
MSG_INVENTORY_UPDATE = "inventoryUpdate"
MSG_UNDO_ACTION = "undoAction"

# Server -> client event types
EVT_ROOM_STATE = "roomState"
EVT_TILE_PLACED = "tilePlaced"
EVT_GRID_RESET = "gridReset"
EVT_GAME_RESTARTED = "gameRestarted"
EVT_INVENTORY_UPDATED = "inventoryUpdated"
EVT_ACTION_UNDONE = "actionUndone"
EVT_ROOM_OCCUPANCY = "roomOccupancy"

__all__ = [
    "GRID_ROWS",
    "GRID_COLS",
    "GRID_SIZE",
    "INVENTORY_KEYS",
    "PLAYER_COLORS",
    "NEUTRAL_COLOR",
    "DEFAULT_TILE_ID",
    "DEFAULT_COLOR",
    "ROTATIONS",
    "MSG_JOIN_ROOM",
    "MSG_PLACE_TILE",
    "MSG_RESET_GRID",
    "MSG_RESTART_GAME",
    "MSG_INVENTORY_UPDATE",
    "MSG_UNDO_ACTION",
    "EVT_ROOM_STATE",
    "EVT_TILE_PLACED",
    "EVT_GRID_RESET",
    "EVT_GAME_RESTARTED",
    "EVT_INVENTORY_UPDATED",
    "EVT_ACTION_UNDONE",
    "EVT_ROOM_OCCUPANCY",
]
