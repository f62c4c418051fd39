"""Chat message data models.

A ``ChatMessageDraft`` is what the relay hands to the message store; the store
assigns ``message_id`` and ``sequence`` and returns the immutable
``ChatMessage``. Replay order is ``sequence``, never ``sent_at``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class ChatMessageDraft:
    """A validated message that has not been persisted yet."""
    room_id: str
    sender_display_name: str
    text: str
    sent_at: datetime


@dataclass(frozen=True)
class ChatMessage:
    """A persisted, room-scoped chat message."""
    message_id: str
    sequence: int
    room_id: str
    sender_display_name: str
    text: str
    sent_at: datetime

    @classmethod
    def from_draft(cls, draft: ChatMessageDraft, message_id: str, sequence: int) -> "ChatMessage":
        return cls(
            message_id=message_id,
            sequence=sequence,
            room_id=draft.room_id,
            sender_display_name=draft.sender_display_name,
            text=draft.text,
            sent_at=draft.sent_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Wire format used by ``chat-message`` and ``chat-message-history``."""
        return {
            "messageId": self.message_id,
            "sequence": self.sequence,
            "roomId": self.room_id,
            "senderDisplayName": self.sender_display_name,
            "text": self.text,
            "sentAt": self.sent_at.isoformat(),
        }
