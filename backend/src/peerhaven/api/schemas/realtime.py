"""
Pydantic schemas for Socket.IO client payloads.

Client events form a tagged union keyed by event name; ``parse_client_event``
maps an incoming (event, data) pair to exactly one of the request models or
raises ``InvalidClientEvent``.
"""

from typing import Any, Dict, Optional, Type, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from peerhaven.models.signaling import SignalKind
from peerhaven.presence.errors import InvalidClientEvent, PresenceError
from peerhaven.presence.events import ClientEventType


class ClientPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class JoinRoomRequest(ClientPayload):
    """``join-room``: enter a room under a display name."""
    room_id: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("roomId", "room_id"),
        description="Room to join; created on first join",
    )
    display_name: Optional[str] = Field(
        default=None,
        max_length=100,
        validation_alias=AliasChoices("displayName", "nickname", "display_name"),
        description="Name shown in the roster; keeps the current name when omitted",
    )

    @field_validator("room_id", "display_name")
    @classmethod
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("room_id")
    @classmethod
    def _room_id_not_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("roomId must not be blank")
        return value


class LeaveRoomRequest(ClientPayload):
    """``leave-room``: leave the given room, or the current room when omitted."""
    room_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("roomId", "room_id"),
    )


class ChatMessageRequest(ClientPayload):
    """``chat-message``: text for a room the sender has joined."""
    room_id: str = Field(..., min_length=1, validation_alias=AliasChoices("roomId", "room_id"))
    # Blank text is rejected by the relay with its own error code
    text: str = Field(default="", validation_alias=AliasChoices("text", "message"))


class SignalRequest(ClientPayload):
    """``offer`` / ``answer`` / ``ice-candidate`` addressed to one connection."""
    kind: SignalKind
    to_connection_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("toConnectionId", "to", "to_connection_id"),
    )
    payload: Any = Field(
        ...,
        validation_alias=AliasChoices("payload", "offer", "answer", "candidate"),
        description="Opaque SDP or ICE candidate, relayed untouched",
    )


ClientEvent = Union[JoinRoomRequest, LeaveRoomRequest, ChatMessageRequest, SignalRequest]
RequestT = TypeVar("RequestT", bound=ClientPayload)

_EVENT_MODELS: Dict[ClientEventType, Type[ClientPayload]] = {
    ClientEventType.JOIN_ROOM: JoinRoomRequest,
    ClientEventType.LEAVE_ROOM: LeaveRoomRequest,
    ClientEventType.CHAT_MESSAGE: ChatMessageRequest,
    ClientEventType.OFFER: SignalRequest,
    ClientEventType.ANSWER: SignalRequest,
    ClientEventType.ICE_CANDIDATE: SignalRequest,
}

_SIGNAL_EVENTS = {
    ClientEventType.OFFER: SignalKind.OFFER,
    ClientEventType.ANSWER: SignalKind.ANSWER,
    ClientEventType.ICE_CANDIDATE: SignalKind.ICE_CANDIDATE,
}


def _event_type(event: str) -> ClientEventType:
    try:
        return ClientEventType(event)
    except ValueError:
        raise InvalidClientEvent(event, f"Unknown event: {event}", code="unknown_event") from None


def parse_payload(model: Type[RequestT], event: str, data: Any) -> RequestT:
    """Validate ``data`` for ``event`` into the given request model.

    Bare string payloads are accepted for ``join-room`` and ``leave-room``
    and treated as the room id. Signal events get their ``kind`` from the
    event name, never from the payload.

    Raises:
        InvalidClientEvent: Unknown event name (code ``unknown_event``), an
            event that does not map to ``model``, or a payload that fails
            validation (code ``invalid_payload``).
    """
    event_type = _event_type(event)
    if _EVENT_MODELS[event_type] is not model:
        raise InvalidClientEvent(event, f"Event {event} does not carry a {model.__name__}")

    if event_type in (ClientEventType.JOIN_ROOM, ClientEventType.LEAVE_ROOM):
        if isinstance(data, str):
            data = {"roomId": data}
        elif data is None and event_type is ClientEventType.LEAVE_ROOM:
            data = {}

    if not isinstance(data, dict):
        raise InvalidClientEvent(event, f"Payload for {event} must be an object")

    if event_type in _SIGNAL_EVENTS:
        data = {**data, "kind": _SIGNAL_EVENTS[event_type]}

    try:
        return model.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise InvalidClientEvent(event, f"Invalid payload for {event}: {fields}") from e


def parse_client_event(event: str, data: Any) -> ClientEvent:
    """Validate a raw Socket.IO event into whichever request model it maps to."""
    return parse_payload(_EVENT_MODELS[_event_type(event)], event, data)


def request_error_payload(event: str, error: PresenceError) -> Dict[str, Any]:
    """Body of a ``request-error`` sent to the originating client."""
    return {
        "event": event,
        "code": error.code,
        "message": error.message,
    }
