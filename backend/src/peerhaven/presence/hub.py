"""Explicit handle over one instance of the realtime core.

Everything that used to be process-global (connections, rooms, locks) hangs
off a ``RealtimeHub``, so tests can run several independent hubs side by side.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from peerhaven.config import Settings
from peerhaven.infra.storage.message_store import MessageStore
from peerhaven.models.participant import Participant
from peerhaven.presence.connection_registry import ConnectionRegistry
from peerhaven.presence.events import Emitter
from peerhaven.presence.join_policy import AllowAllJoinPolicy, CapacityJoinPolicy, JoinPolicy
from peerhaven.presence.message_relay import MessageRelay
from peerhaven.presence.presence_coordinator import PresenceCoordinator
from peerhaven.presence.room_directory import RoomDirectory
from peerhaven.presence.signaling_relay import SignalingRelay

logger = logging.getLogger(__name__)


class RealtimeHub:
    """Wires registry, directory, presence, chat and signaling together."""

    def __init__(
        self,
        emitter: Emitter,
        message_store: MessageStore,
        join_policy: Optional[JoinPolicy] = None,
        max_message_length: int = 2000,
    ):
        self.emitter = emitter
        self.registry = ConnectionRegistry()
        self.directory = RoomDirectory()
        self.presence = PresenceCoordinator(self.registry, self.directory, emitter)
        self.messages = MessageRelay(
            message_store,
            self.presence,
            emitter,
            max_message_length=max_message_length,
        )
        self.presence.set_history_provider(self.messages.history)
        self.signaling = SignalingRelay(self.registry, emitter)
        self.join_policy: JoinPolicy = join_policy or AllowAllJoinPolicy()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        emitter: Emitter,
        message_store: MessageStore,
    ) -> "RealtimeHub":
        join_policy: JoinPolicy
        if settings.room_capacity > 0:
            join_policy = CapacityJoinPolicy(default_capacity=settings.room_capacity)
        else:
            join_policy = AllowAllJoinPolicy()
        logger.info(
            "[Hub] Created | store=%s capacity=%s max_message_length=%d",
            type(message_store).__name__,
            settings.room_capacity or "unlimited",
            settings.max_message_length,
        )
        return cls(
            emitter,
            message_store,
            join_policy=join_policy,
            max_message_length=settings.max_message_length,
        )

    async def join(
        self,
        connection_id: str,
        room_id: str,
        display_name: Optional[str] = None,
    ) -> List[Participant]:
        """Join a room subject to the configured join policy."""
        return await self.presence.join(
            connection_id,
            room_id,
            display_name,
            admit=self.join_policy.admit,
        )

    def stats(self) -> dict:
        rooms = self.directory.room_ids()
        return {
            "connections": len(self.registry),
            "rooms": len(rooms),
            "participants": sum(self.directory.participant_count(r) for r in rooms),
        }
