"""Room presence, chat relay and WebRTC signaling relay."""

from peerhaven.presence.connection_registry import ConnectionRegistry
from peerhaven.presence.room_directory import RoomDirectory
from peerhaven.presence.presence_coordinator import PresenceCoordinator
from peerhaven.presence.message_relay import MessageRelay
from peerhaven.presence.signaling_relay import SignalingRelay
from peerhaven.presence.hub import RealtimeHub

__all__ = [
    "ConnectionRegistry",
    "RoomDirectory",
    "PresenceCoordinator",
    "MessageRelay",
    "SignalingRelay",
    "RealtimeHub",
]
