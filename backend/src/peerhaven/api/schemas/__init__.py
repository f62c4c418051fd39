"""Request/response schemas."""

from peerhaven.api.schemas.realtime import (
    ChatMessageRequest,
    ClientEvent,
    JoinRoomRequest,
    LeaveRoomRequest,
    SignalRequest,
    parse_client_event,
    parse_payload,
    request_error_payload,
)
from peerhaven.api.schemas.rooms import (
    ChatMessageResponse,
    HealthResponse,
    ParticipantResponse,
    RoomHistoryResponse,
    RoomRosterResponse,
    RoomSummary,
    RoomListResponse,
)

__all__ = [
    # Socket.IO payloads
    "ChatMessageRequest",
    "ClientEvent",
    "JoinRoomRequest",
    "LeaveRoomRequest",
    "SignalRequest",
    "parse_client_event",
    "parse_payload",
    "request_error_payload",
    # HTTP responses
    "ChatMessageResponse",
    "HealthResponse",
    "ParticipantResponse",
    "RoomHistoryResponse",
    "RoomRosterResponse",
    "RoomSummary",
    "RoomListResponse",
]
