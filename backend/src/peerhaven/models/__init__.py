"""PeerHaven models package - re-exports for public API"""

from peerhaven.models.connection import Connection
from peerhaven.models.participant import Participant
from peerhaven.models.chat_message import ChatMessage, ChatMessageDraft
from peerhaven.models.signaling import SignalKind, SignalingEnvelope

__all__ = [
    # Presence
    "Connection",
    "Participant",
    # Chat
    "ChatMessage",
    "ChatMessageDraft",
    # Signaling
    "SignalKind",
    "SignalingEnvelope",
]
