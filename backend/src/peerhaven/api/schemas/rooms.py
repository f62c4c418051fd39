"""HTTP response schemas for room inspection endpoints."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from peerhaven.models.chat_message import ChatMessage
from peerhaven.models.participant import Participant


class ParticipantResponse(BaseModel):
    connection_id: str = Field(..., description="Socket connection id")
    display_name: str = Field(..., description="Name shown in the roster")

    @classmethod
    def from_participant(cls, participant: Participant) -> "ParticipantResponse":
        return cls(
            connection_id=participant.connection_id,
            display_name=participant.display_name,
        )


class RoomRosterResponse(BaseModel):
    room_id: str
    participants: List[ParticipantResponse] = Field(default_factory=list)
    count: int = 0


class ChatMessageResponse(BaseModel):
    message_id: str
    sequence: int = Field(..., description="Store-assigned replay order")
    room_id: str
    sender_display_name: str
    text: str
    sent_at: datetime

    @classmethod
    def from_message(cls, message: ChatMessage) -> "ChatMessageResponse":
        return cls(
            message_id=message.message_id,
            sequence=message.sequence,
            room_id=message.room_id,
            sender_display_name=message.sender_display_name,
            text=message.text,
            sent_at=message.sent_at,
        )


class RoomHistoryResponse(BaseModel):
    room_id: str
    messages: List[ChatMessageResponse] = Field(default_factory=list)
    count: int = 0


class RoomSummary(BaseModel):
    room_id: str
    participant_count: int


class RoomListResponse(BaseModel):
    rooms: List[RoomSummary] = Field(default_factory=list)
    total: int = 0


class HealthResponse(BaseModel):
    status: str = "healthy"
    environment: str
    message_store: str
    connections: int = 0
    rooms: int = 0
    participants: int = 0
