"""Room Broadcaster — realtime connections grouped into per-project rooms.

Invariants:
    - A connection is in the global set from connect() until disconnect()
    - Rooms only hold connected connections; empty rooms are dropped
    - disconnect() is a passive unsubscribe from every room (no farewell frames)
    - A send failure drops the failing connection; other recipients still receive

Design Decisions:
    - Connections are anything with `async send_json(dict)` (FastAPI WebSocket in
      production, a recording fake in tests)
    - Sends are sequential per broadcast: frames to one room keep emission order
"""

import logging
from collections import defaultdict

from fastapi import WebSocketDisconnect

from pixelcanvas.core.repository_protocols import Connection

logger = logging.getLogger(__name__)


class RoomBroadcaster:
    """Tracks live connections and room membership; fans out frames."""

    def __init__(self):
        self._connections: set[Connection] = set()
        self._rooms: dict[int, set[Connection]] = defaultdict(set)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def connect(self, conn: Connection) -> None:
        self._connections.add(conn)

    def disconnect(self, conn: Connection) -> None:
        self._connections.discard(conn)
        for room in list(self._rooms):
            self._leave(room, conn)

    def join(self, conn: Connection, room: int) -> None:
        self._rooms[room].add(conn)
        logger.debug(f"Connection joined room {room}", extra={"room": room})

    def leave(self, conn: Connection, room: int) -> None:
        self._leave(room, conn)

    def _leave(self, room: int, conn: Connection) -> None:
        members = self._rooms.get(room)
        if members is None:
            return
        members.discard(conn)
        if not members:
            del self._rooms[room]

    async def send_to(self, conn: Connection, message: dict) -> bool:
        """Point-to-point reply. Returns False (and drops conn) on failure."""
        try:
            await conn.send_json(message)
            return True
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.warning(
                f"Dropping connection after failed send: {e}",
                extra={"event_type": message.get("type")},
            )
            self.disconnect(conn)
            return False

    async def broadcast_room(self, room: int, message: dict) -> int:
        """Send to every member of one room. Returns delivered count."""
        delivered = 0
        for conn in list(self._rooms.get(room, ())):
            if await self.send_to(conn, message):
                delivered += 1
        return delivered

    async def broadcast_all(self, message: dict) -> int:
        """Send to every connected client regardless of room."""
        delivered = 0
        for conn in list(self._connections):
            if await self.send_to(conn, message):
                delivered += 1
        return delivered
