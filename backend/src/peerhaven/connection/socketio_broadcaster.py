"""Socket.IO-based emitter for the realtime core.

The presence layer addresses clients by connection id only; this module maps
that onto ``sio.emit(..., to=sid)``. Room fan-out is driven by the room
directory rather than Socket.IO rooms, so rosters and delivery never diverge.
"""

from __future__ import annotations

import logging
from typing import Any

import socketio

logger = logging.getLogger(__name__)


class SocketIOBroadcaster:
    """Delivers events to individual Socket.IO sessions."""

    def __init__(self, sio: socketio.AsyncServer, namespace: str = "/"):
        self.sio = sio
        self.namespace = namespace

    async def send(self, connection_id: str, event: str, data: Any) -> None:
        """Emit one event to one socket.

        Failures are logged and swallowed so a single broken socket cannot stop
        fan-out to the rest of a room.
        """
        try:
            await self.sio.emit(event, data, to=connection_id, namespace=self.namespace)
        except Exception as e:
            logger.warning(
                "[SocketIO] Failed to emit %s to %s: %s", event, connection_id, e
            )
