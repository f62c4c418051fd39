"""Event names exchanged with clients, and the outbound emitter interface."""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol


class ClientEventType(str, Enum):
    """Events a client may emit."""
    JOIN_ROOM = "join-room"
    LEAVE_ROOM = "leave-room"
    CHAT_MESSAGE = "chat-message"
    OFFER = "offer"
    ANSWER = "answer"
    ICE_CANDIDATE = "ice-candidate"


class ServerEventType(str, Enum):
    """Events the server emits."""
    ROOM_USERS = "room-users"
    USER_JOINED = "user-joined"
    USER_LEFT = "user-left"
    CHAT_MESSAGE_HISTORY = "chat-message-history"
    CHAT_MESSAGE = "chat-message"
    OFFER = "offer"
    ANSWER = "answer"
    ICE_CANDIDATE = "ice-candidate"
    REQUEST_ERROR = "request-error"


class Emitter(Protocol):
    """Delivers one event to one connection.

    Implementations must not raise for a target that has gone away; the
    presence layer treats delivery as best effort per target.
    """

    async def send(self, connection_id: str, event: str, data: Any) -> None:
        ...
