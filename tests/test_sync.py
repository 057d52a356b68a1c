from tactile_grid.commands import Disconnect, JoinRoom, PlaceTile, parse_command
from tactile_grid.constants import GRID_SIZE
from tactile_grid.editor import LocalEditor
from tactile_grid.inventory import empty_inventory


def join(protocol, conn_id, room_id):
    protocol.connect(conn_id)
    return protocol.handle(conn_id, {"type": "joinRoom", "roomId": room_id})


def for_recipient(outbound, conn_id):
    return [message for message in outbound if conn_id in message.recipients]


def test_fresh_join_receives_default_snapshot(protocol):
    outbound = join(protocol, "c1", "B")
    assert [message.event for message in outbound] == ["roomState", "roomOccupancy"]

    state = outbound[0]
    assert state.recipients == ("c1",)
    assert len(state.data["grid"]) == GRID_SIZE
    assert state.data["grid"][0] == {"row": 0, "col": 0, "tileId": "empty", "color": "black", "rotation": 0}
    assert state.data["inventoryEnabled"] is False
    assert state.data["inventory"] == empty_inventory()

    assert outbound[1].data == {"roomId": "B", "count": 1}


def test_join_snapshot_is_a_copy(protocol):
    outbound = join(protocol, "c1", "B")
    outbound[0].data["grid"][0]["tileId"] = "obstacle"
    assert protocol.registry.get("B").cell_at(0, 0).tile_id == "empty"


def test_join_with_blank_room_id_is_ignored(protocol):
    assert join(protocol, "c1", "   ") == []
    assert protocol.handle("c1", {"type": "joinRoom"}) == []
    assert len(protocol.registry) == 0


def test_occupancy_grows_and_is_sent_to_everyone(protocol):
    join(protocol, "c1", "A")
    outbound = join(protocol, "c2", "A")
    occupancy = [message for message in outbound if message.event == "roomOccupancy"]
    assert len(occupancy) == 1
    assert occupancy[0].data == {"roomId": "A", "count": 2}
    assert set(occupancy[0].recipients) == {"c1", "c2"}


def test_switching_rooms_updates_both_occupancies(protocol):
    join(protocol, "c1", "A")
    join(protocol, "c2", "A")
    outbound = join(protocol, "c2", "C")
    occupancy = [(m.data["roomId"], m.data["count"], m.recipients) for m in outbound if m.event == "roomOccupancy"]
    assert occupancy == [("A", 1, ("c1",)), ("C", 1, ("c2",))]
    assert protocol.room_of("c2") == "C"
    assert protocol.registry.get("A").members == {"c1"}


def test_x_tile_scenario(protocol):
    join(protocol, "c1", "A")
    join(protocol, "c2", "A")

    editor = LocalEditor("A")
    editor.configure_inventory({"red": {"hint-x": 1}})
    editor.select("hint-x")
    editor.set_color("red")
    message = editor.place(5, 5)
    assert message is not None

    outbound = protocol.handle("c1", message)

    room = protocol.registry.get("A")
    expected = {(5, 5), (6, 5), (4, 5), (5, 6), (5, 4)}
    for row, col in expected:
        cell = room.cell_at(row, col)
        assert (cell.tile_id, cell.color) == ("hint-x", "red")
    painted = {(c.row, c.col) for c in room.grid if c.tile_id != "empty"}
    assert painted == expected

    assert for_recipient(outbound, "c1") == []
    received = for_recipient(outbound, "c2")
    assert len(received) == 1
    assert received[0].event == "tilePlaced"
    assert {(c["row"], c["col"]) for c in received[0].data["cells"]} == expected
    assert len(received[0].data["cells"]) == 5
    assert received[0].data["inventory"]["red"]["hint-x"] == 0
    assert received[0].data["inventoryEnabled"] is True


def test_place_tile_applies_partial_batch(protocol):
    join(protocol, "c1", "A")
    cells = [
        {"row": 0, "col": 0, "tileId": "obstacle", "color": "blue", "rotation": 90},
        {"row": -1, "col": 0, "tileId": "obstacle"},
        {"row": "x", "col": 3},
    ]
    protocol.handle("c1", {"type": "placeTile", "roomId": "A", "cells": cells})
    room = protocol.registry.get("A")
    assert room.cell_at(0, 0).tile_id == "obstacle"
    assert sum(1 for cell in room.grid if cell.tile_id != "empty") == 1


def test_place_tile_relays_raw_cells(protocol):
    join(protocol, "c1", "A")
    join(protocol, "c2", "A")
    cells = [{"row": 0, "col": 0, "tileId": "obstacle"}, {"row": 500, "col": 0}]
    outbound = protocol.handle("c1", {"type": "placeTile", "roomId": "A", "cells": cells})
    assert outbound[0].data["cells"] == cells


def test_place_tile_inventory_needs_boolean_flag(protocol):
    join(protocol, "c1", "A")
    room = protocol.registry.get("A")
    protocol.handle(
        "c1",
        {"type": "placeTile", "roomId": "A", "cells": [], "inventory": {"red": {"hint-t": 3}}, "inventoryEnabled": "yes"},
    )
    assert room.ledger.counts == empty_inventory()
    assert room.inventory_enabled is False

    protocol.handle(
        "c1",
        {"type": "placeTile", "roomId": "A", "cells": [], "inventory": {"red": {"hint-t": 3}}, "inventoryEnabled": True},
    )
    assert room.ledger.counts["red"]["hint-t"] == 3
    assert room.inventory_enabled is True


def test_malformed_messages_are_ignored(protocol):
    join(protocol, "c1", "A")
    room = protocol.registry.get("A")
    before = room.snapshot()
    for data in (
        None,
        "placeTile",
        {"type": "placeTile", "roomId": "A", "cells": "nope"},
        {"type": "placeTile", "cells": []},
        {"type": ["joinRoom"], "roomId": "A"},
        {"type": "inventoryUpdate", "roomId": "A", "inventory": {}, "inventoryEnabled": 1},
        {"type": "unknown", "roomId": "A"},
    ):
        assert protocol.handle("c1", data) == []
    assert room.snapshot() == before


def test_unknown_room_is_a_no_op(protocol):
    join(protocol, "c1", "A")
    assert protocol.handle("c1", {"type": "placeTile", "roomId": "Z", "cells": [{"row": 0, "col": 0}]}) == []
    assert protocol.handle("c1", {"type": "resetGrid", "roomId": "Z"}) == []
    assert protocol.handle("c1", {"type": "restartGame", "roomId": "Z"}) == []
    assert "Z" not in protocol.registry


def test_reset_grid(protocol):
    join(protocol, "c1", "A")
    join(protocol, "c2", "A")
    protocol.handle("c1", {"type": "placeTile", "roomId": "A", "cells": [{"row": 3, "col": 3, "tileId": "obstacle"}]})
    outbound = protocol.handle("c2", {"type": "resetGrid", "roomId": "A"})
    assert protocol.registry.get("A").cell_at(3, 3).tile_id == "empty"
    assert len(outbound) == 1
    assert outbound[0].event == "gridReset"
    assert outbound[0].data == {}
    assert outbound[0].recipients == ("c1",)


def test_restart_game_resets_everything(protocol):
    join(protocol, "c1", "A")
    join(protocol, "c2", "A")
    join(protocol, "c3", "A")
    protocol.handle(
        "c1",
        {
            "type": "placeTile",
            "roomId": "A",
            "cells": [{"row": 1, "col": 2, "tileId": "walkway-1", "color": "red"}],
            "inventory": {"red": {"walkway-1": 4}},
            "inventoryEnabled": True,
        },
    )
    outbound = protocol.handle("c2", {"type": "restartGame", "roomId": "A"})

    room = protocol.registry.get("A")
    assert all(cell.tile_id == "empty" and cell.color == "black" for cell in room.grid)
    assert room.ledger.counts == empty_inventory()
    assert room.inventory_enabled is False

    assert len(outbound) == 1
    assert outbound[0].event == "gameRestarted"
    assert set(outbound[0].recipients) == {"c1", "c3"}
    assert outbound[0].data == {"inventory": empty_inventory(), "inventoryEnabled": False}


def test_restart_game_with_new_inventory(protocol):
    join(protocol, "c1", "A")
    protocol.handle(
        "c1",
        {"type": "restartGame", "roomId": "A", "inventory": {"blue": {"hint-x": "2"}}, "inventoryEnabled": True},
    )
    room = protocol.registry.get("A")
    assert room.ledger.counts["blue"]["hint-x"] == 2
    assert room.inventory_enabled is True


def test_inventory_update(protocol):
    join(protocol, "c1", "A")
    join(protocol, "c2", "A")
    outbound = protocol.handle(
        "c2",
        {"type": "inventoryUpdate", "roomId": "A", "inventory": {"red": {"walkway-3": -1, "hint-t": 2}}, "inventoryEnabled": True},
    )
    assert outbound[0].event == "inventoryUpdated"
    assert outbound[0].recipients == ("c1",)
    assert outbound[0].data["inventory"]["red"]["walkway-3"] == 0
    assert outbound[0].data["inventory"]["red"]["hint-t"] == 2
    assert outbound[0].data["inventoryEnabled"] is True


def test_undo_action_uses_its_own_event(protocol):
    join(protocol, "c1", "A")
    join(protocol, "c2", "A")
    cells = [{"row": 4, "col": 4, "tileId": "empty", "color": "black", "rotation": 0}]
    protocol.handle("c1", {"type": "placeTile", "roomId": "A", "cells": [{"row": 4, "col": 4, "tileId": "obstacle"}]})
    outbound = protocol.handle("c1", {"type": "undoAction", "roomId": "A", "cells": cells})
    assert outbound[0].event == "actionUndone"
    assert outbound[0].data["cells"] == cells
    assert protocol.registry.get("A").cell_at(4, 4).tile_id == "empty"


def test_concurrent_placements_last_arrival_wins(protocol):
    join(protocol, "c1", "A")
    join(protocol, "c2", "A")
    protocol.handle("c1", {"type": "placeTile", "roomId": "A", "cells": [{"row": 7, "col": 7, "tileId": "score-4", "color": "red"}]})
    protocol.handle("c2", {"type": "placeTile", "roomId": "A", "cells": [{"row": 7, "col": 7, "tileId": "score-5", "color": "blue"}]})
    cell = protocol.registry.get("A").cell_at(7, 7)
    assert (cell.tile_id, cell.color) == ("score-5", "blue")


def test_server_does_not_recheck_inventory(protocol):
    join(protocol, "c1", "A")
    protocol.handle("c1", {"type": "inventoryUpdate", "roomId": "A", "inventory": {}, "inventoryEnabled": True})
    protocol.handle("c1", {"type": "placeTile", "roomId": "A", "cells": [{"row": 0, "col": 0, "tileId": "hint-x", "color": "red"}]})
    assert protocol.registry.get("A").cell_at(0, 0).tile_id == "hint-x"


def test_disconnect_commits_membership_and_keeps_room(protocol):
    join(protocol, "c1", "A")
    join(protocol, "c2", "A")
    assert protocol.apply("c1", Disconnect()) == []
    room = protocol.registry.get("A")
    assert room.members == {"c2"}
    assert protocol.room_of("c1") is None
    assert protocol.occupancy("A")[0].data["count"] == 1

    assert protocol.disconnect("c2") == "A"
    assert protocol.occupancy("A") == []
    assert protocol.registry.get("A") is room
    assert protocol.disconnect("c2") is None


def test_parse_command_builds_typed_commands():
    assert parse_command({"type": "joinRoom", "roomId": " A "}) == JoinRoom("A")
    command = parse_command({"type": "placeTile", "roomId": "A", "cells": [], "inventory": {}})
    assert command == PlaceTile("A", (), None, None)


def test_oversized_numbers_are_skipped_not_fatal(protocol):
    join(protocol, "c1", "A")
    join(protocol, "c2", "A")
    cells = [
        {"row": 1, "col": 1, "tileId": "obstacle"},
        {"row": 10**400, "col": 0, "tileId": "obstacle"},
        {"row": 2, "col": 2, "tileId": "obstacle", "rotation": -(10**400)},
    ]
    outbound = protocol.handle("c1", {"type": "placeTile", "roomId": "A", "cells": cells})

    room = protocol.registry.get("A")
    assert room.cell_at(1, 1).tile_id == "obstacle"
    assert room.cell_at(2, 2).rotation == 0
    assert sum(1 for cell in room.grid if cell.tile_id != "empty") == 2
    assert outbound[0].event == "tilePlaced"
    assert outbound[0].recipients == ("c2",)

    outbound = protocol.handle(
        "c1",
        {"type": "inventoryUpdate", "roomId": "A", "inventory": {"red": {"hint-x": 10**400}}, "inventoryEnabled": True},
    )
    assert room.ledger.counts["red"]["hint-x"] == 0
    assert outbound[0].data["inventory"]["red"]["hint-x"] == 0


def test_any_truthy_inventory_is_honoured(protocol):
    join(protocol, "c1", "A")
    room = protocol.registry.get("A")
    room.replace_inventory({"red": {"walkway-1": 5}}, False)
    protocol.handle("c1", {"type": "placeTile", "roomId": "A", "cells": [], "inventory": [], "inventoryEnabled": True})
    assert room.ledger.counts == empty_inventory()
    assert room.inventory_enabled is True

    room.replace_inventory({"red": {"walkway-1": 5}}, True)
    protocol.handle("c1", {"type": "undoAction", "roomId": "A", "cells": [], "inventory": "", "inventoryEnabled": False})
    assert room.ledger.counts["red"]["walkway-1"] == 5
    assert room.inventory_enabled is True
