from __future__ import annotations

import asyncio
import json
import uuid
from typing import Dict, Iterable, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..logging_config import get_logger
from ..sync import Outbound, SyncProtocol

logger = get_logger(__name__)

router = APIRouter(prefix="", tags=["ws"])


class ConnectionManager:
    """Owns the live websockets and delivers protocol output to them."""

    def __init__(self, protocol: SyncProtocol):
        self.protocol = protocol
        self.connections: Dict[str, WebSocket] = {}
        # Deferred occupancy broadcasts scheduled by disconnect()
        self._pending: Set[asyncio.Task] = set()

    async def connect(self, ws: WebSocket) -> str:
        await ws.accept()
        conn_id = uuid.uuid4().hex
        self.connections[conn_id] = ws
        self.protocol.connect(conn_id)
        logger.info(f"Connection {conn_id} opened ({len(self.connections)} open)")
        return conn_id

    async def receive(self, conn_id: str, data: object) -> None:
        if conn_id not in self.connections:
            return
        await self.deliver(self.protocol.handle(conn_id, data))

    async def deliver(self, outbound: Iterable[Outbound]) -> None:
        for message in outbound:
            frame = message.frame()
            for recipient in message.recipients:
                ws = self.connections.get(recipient)
                if ws is None:
                    continue
                try:
                    await ws.send_json(frame)
                except Exception as e:
                    logger.warning(f"Dropping connection {recipient} after failed send: {e}")
                    self._drop(recipient)

    async def disconnect(self, conn_id: str) -> None:
        self._drop(conn_id)
        logger.info(f"Connection {conn_id} closed")

    def _drop(self, conn_id: str) -> None:
        """Remove *conn_id* from its room now and announce the new occupancy on a later turn."""
        self.connections.pop(conn_id, None)
        room_id = self.protocol.disconnect(conn_id)
        if room_id is None:
            return
        task = asyncio.create_task(self._announce_occupancy(room_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _announce_occupancy(self, room_id: str) -> None:
        await asyncio.sleep(0)
        await self.deliver(self.protocol.occupancy(room_id))

    async def drain(self) -> None:
        """Wait for every scheduled occupancy broadcast to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    manager: ConnectionManager = ws.app.state.manager
    conn_id = await manager.connect(ws)
    try:
        while True:
            text = await ws.receive_text()
            try:
                data = json.loads(text)
            except ValueError:
                logger.debug(f"Ignoring non-JSON frame from {conn_id}")
                continue
            await manager.receive(conn_id, data)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error on {conn_id}: {e}", exc_info=True)
    finally:
        await manager.disconnect(conn_id)


__all__ = ["ConnectionManager", "router", "websocket_endpoint"]
