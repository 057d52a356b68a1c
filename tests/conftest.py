import pytest

from tactile_grid.state import RoomRegistry
from tactile_grid.sync import SyncProtocol


class FakeSocket:
    """Stands in for a FastAPI ``WebSocket`` in manager tests."""

    def __init__(self, fail_sends: bool = False):
        self.accepted = False
        self.frames = []
        self.fail_sends = fail_sends

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail_sends:
            raise RuntimeError("socket closed")
        self.frames.append(data)

    def events(self):
        return [frame["type"] for frame in self.frames]


@pytest.fixture
def protocol():
    return SyncProtocol(RoomRegistry())


@pytest.fixture
def fake_socket_factory():
    return FakeSocket
