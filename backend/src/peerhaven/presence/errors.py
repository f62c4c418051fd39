"""Error taxonomy for the presence, chat and signaling layer.

Every error carries a stable ``code`` that the transport forwards to the
originating client in ``request-error`` events.
"""

from typing import Optional


class PresenceError(Exception):
    """Base class for realtime core errors."""

    code = "presence_error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.code)
        self.message = message or self.code


class UnknownConnection(PresenceError):
    """Operation referenced a connection id that is not registered."""

    code = "unknown_connection"

    def __init__(self, connection_id: str):
        super().__init__(f"Unknown connection: {connection_id}")
        self.connection_id = connection_id


class DuplicateConnection(PresenceError):
    """A live connection id was registered twice (transport-layer bug)."""

    code = "duplicate_connection"

    def __init__(self, connection_id: str):
        super().__init__(f"Connection already registered: {connection_id}")
        self.connection_id = connection_id


class EmptyMessage(PresenceError):
    code = "empty_message"

    def __init__(self):
        super().__init__("Message text must not be empty")


class MessageTooLong(PresenceError):
    code = "message_too_long"

    def __init__(self, length: int, limit: int):
        super().__init__(f"Message is {length} characters, limit is {limit}")
        self.length = length
        self.limit = limit


class MessagePersistError(PresenceError):
    """The message store rejected a write; the message was not broadcast."""

    code = "persist_failed"

    def __init__(self, room_id: str):
        super().__init__(f"Failed to persist message for room {room_id}")
        self.room_id = room_id


class NotInRoom(PresenceError):
    code = "not_in_room"

    def __init__(self, connection_id: str, room_id: str):
        super().__init__(f"Connection {connection_id} has not joined room {room_id}")
        self.connection_id = connection_id
        self.room_id = room_id


class JoinRejected(PresenceError):
    """An external join policy refused the join."""

    code = "join_rejected"

    def __init__(self, room_id: str, message: Optional[str] = None):
        super().__init__(message or f"Join to room {room_id} was rejected")
        self.room_id = room_id


class RoomFull(JoinRejected):
    code = "room_full"

    def __init__(self, room_id: str, capacity: int):
        super().__init__(room_id, f"Room {room_id} is full ({capacity} participants)")
        self.capacity = capacity


class InvalidClientEvent(PresenceError):
    """Client sent an event name or payload that cannot be parsed."""

    code = "invalid_payload"

    def __init__(self, event: str, message: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message or f"Invalid payload for event {event}")
        self.event = event
        if code:
            self.code = code
