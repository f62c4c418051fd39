"""Socket.IO server for real-time rooms, chat and voice signaling.

Event handlers are thin: they parse the payload, call into the
``RealtimeHub`` and translate ``PresenceError`` into a ``request-error`` event
for the originating client. Every handler also returns an acknowledgement.

Namespaces:
- / : room presence, chat and WebRTC signaling
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import socketio

from peerhaven.api.schemas.realtime import (
    ChatMessageRequest,
    JoinRoomRequest,
    LeaveRoomRequest,
    SignalRequest,
    parse_payload,
    request_error_payload,
)
from peerhaven.config import Settings
from peerhaven.models.signaling import SignalingEnvelope
from peerhaven.presence.errors import (
    DuplicateConnection,
    MessagePersistError,
    PresenceError,
)
from peerhaven.presence.events import ClientEventType, ServerEventType
from peerhaven.presence.hub import RealtimeHub

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "/"


# =============================================================================
# Socket.IO Server Configuration
# =============================================================================

def create_socketio_server(settings: Settings) -> socketio.AsyncServer:
    """Create the async Socket.IO server from settings."""
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=settings.cors_allowed_origins,
        ping_timeout=settings.ping_timeout,
        ping_interval=settings.ping_interval,
        logger=False,  # socket.io internal logging is too verbose
        engineio_logger=False,
    )


def create_socketio_app(sio: socketio.AsyncServer, other_app):
    """Create Socket.IO ASGI app wrapping another ASGI app.

    Args:
        sio: The Socket.IO server
        other_app: The main ASGI app (e.g., FastAPI)

    Returns:
        Combined ASGI app with Socket.IO
    """
    return socketio.ASGIApp(sio, other_asgi_app=other_app)


# =============================================================================
# Event Handlers
# =============================================================================

class RealtimeEventHandlers:
    """Socket.IO handlers bound to one ``RealtimeHub``."""

    def __init__(self, hub: RealtimeHub):
        self.hub = hub

    def register(self, sio: socketio.AsyncServer, namespace: str = DEFAULT_NAMESPACE) -> None:
        """Attach all handlers to ``sio``."""
        sio.on("connect", self.connect, namespace=namespace)
        sio.on("disconnect", self.disconnect, namespace=namespace)
        sio.on(ClientEventType.JOIN_ROOM.value, self.join_room, namespace=namespace)
        sio.on(ClientEventType.LEAVE_ROOM.value, self.leave_room, namespace=namespace)
        sio.on(ClientEventType.CHAT_MESSAGE.value, self.chat_message, namespace=namespace)
        sio.on(ClientEventType.OFFER.value, self.offer, namespace=namespace)
        sio.on(ClientEventType.ANSWER.value, self.answer, namespace=namespace)
        sio.on(ClientEventType.ICE_CANDIDATE.value, self.ice_candidate, namespace=namespace)
        sio.on("*", self.unknown_event, namespace=namespace)

    # -------------------------------------------------------------------------
    # Connection lifecycle
    # -------------------------------------------------------------------------

    async def connect(self, sid: str, environ: Dict, auth: Optional[Dict] = None):
        """Register a new socket. Identity comes later with ``join-room``."""
        try:
            self.hub.presence.connect(sid)
        except DuplicateConnection as e:
            logger.error("[SocketIO] %s", e)
            raise socketio.exceptions.ConnectionRefusedError("duplicate connection")

    async def disconnect(self, sid: str, reason: Any = None):
        """Transport closed, abruptly or not: same cleanup as an explicit leave."""
        logger.info("[SocketIO] Disconnecting | sid=%s reason=%s", sid, reason)
        await self.hub.presence.disconnect(sid)

    # -------------------------------------------------------------------------
    # Presence
    # -------------------------------------------------------------------------

    async def join_room(self, sid: str, data: Any = None):
        event = ClientEventType.JOIN_ROOM.value
        try:
            request = parse_payload(JoinRoomRequest, event, data)
            roster = await self.hub.join(sid, request.room_id, request.display_name)
        except PresenceError as e:
            return await self._reject(sid, event, e)

        return {
            "ok": True,
            "roomId": request.room_id,
            "participants": [p.to_dict() for p in roster],
        }

    async def leave_room(self, sid: str, data: Any = None):
        event = ClientEventType.LEAVE_ROOM.value
        try:
            request = parse_payload(LeaveRoomRequest, event, data)
        except PresenceError as e:
            return await self._reject(sid, event, e)

        left = await self.hub.presence.leave(sid, request.room_id)
        return {"ok": True, "left": left}

    # -------------------------------------------------------------------------
    # Chat
    # -------------------------------------------------------------------------

    async def chat_message(self, sid: str, data: Any = None):
        event = ClientEventType.CHAT_MESSAGE.value
        try:
            request = parse_payload(ChatMessageRequest, event, data)
            message = await self.hub.messages.send_as(sid, request.room_id, request.text)
        except MessagePersistError as e:
            logger.error("[SocketIO] chat-message not persisted | sid=%s room=%s", sid, e.room_id)
            return await self._reject(sid, event, e)
        except PresenceError as e:
            return await self._reject(sid, event, e)

        return {"ok": True, "messageId": message.message_id, "sequence": message.sequence}

    # -------------------------------------------------------------------------
    # WebRTC signaling
    # -------------------------------------------------------------------------

    async def offer(self, sid: str, data: Any = None):
        return await self._relay_signal(sid, ClientEventType.OFFER.value, data)

    async def answer(self, sid: str, data: Any = None):
        return await self._relay_signal(sid, ClientEventType.ANSWER.value, data)

    async def ice_candidate(self, sid: str, data: Any = None):
        return await self._relay_signal(sid, ClientEventType.ICE_CANDIDATE.value, data)

    async def _relay_signal(self, sid: str, event: str, data: Any):
        try:
            request = parse_payload(SignalRequest, event, data)
        except PresenceError as e:
            return await self._reject(sid, event, e)

        delivered = await self.hub.signaling.relay(
            SignalingEnvelope(
                kind=request.kind,
                from_connection_id=sid,
                to_connection_id=request.to_connection_id,
                payload=request.payload,
            )
        )
        # An undeliverable signal is not an error for the sender
        return {"ok": True, "delivered": delivered}

    # -------------------------------------------------------------------------
    # Fallback
    # -------------------------------------------------------------------------

    async def unknown_event(self, event: str, sid: str, *args):
        logger.warning("[SocketIO] Ignoring unknown event %r | sid=%s", event, sid)
        return {"ok": False, "code": "unknown_event"}

    async def _reject(self, sid: str, event: str, error: PresenceError) -> Dict[str, Any]:
        logger.info("[SocketIO] Rejected %s | sid=%s code=%s", event, sid, error.code)
        payload = request_error_payload(event, error)
        await self.hub.emitter.send(sid, ServerEventType.REQUEST_ERROR.value, payload)
        return {"ok": False, **payload}
