"""Presence coordinator: join / leave / disconnect lifecycle.

Runs the pure transitions from ``state_machine`` against the connection
registry and the room directory, and emits the resulting roster events.

Ordering per room:
- ``room-users`` (full roster) goes to every member, joiner included
- ``user-joined`` goes to the members that were already there
- ``chat-message-history`` goes to the joiner last, read under the room lock
  so it holds exactly the messages persisted before the join
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, List, Optional

from peerhaven.models.chat_message import ChatMessage
from peerhaven.models.connection import Connection
from peerhaven.models.participant import Participant
from peerhaven.presence.connection_registry import ConnectionRegistry
from peerhaven.presence.events import Emitter, ServerEventType
from peerhaven.presence.locks import KeyedLocks
from peerhaven.presence.room_directory import RoomDirectory
from peerhaven.presence.state_machine import (
    EnterRoom,
    ExitRoom,
    JoinRoom,
    LeaveRoom,
    PresenceEffect,
    ResendRoster,
    TransportClosed,
    state_of,
    transition,
)

logger = logging.getLogger(__name__)

HistoryProvider = Callable[[str], Awaitable[List[ChatMessage]]]
AdmitCallback = Callable[[str, Connection, List[Participant]], None]


def roster_payload(roster: Iterable[Participant]) -> List[dict]:
    return [participant.to_dict() for participant in roster]


class PresenceCoordinator:
    """Tracks which connection is in which room and broadcasts changes."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        directory: RoomDirectory,
        emitter: Emitter,
        history_provider: Optional[HistoryProvider] = None,
    ):
        self.registry = registry
        self.directory = directory
        self.emitter = emitter
        self._history_provider = history_provider
        self._room_locks = KeyedLocks()
        self._connection_locks = KeyedLocks()

    def set_history_provider(self, provider: Optional[HistoryProvider]) -> None:
        self._history_provider = provider

    def room_lock(self, room_id: str):
        """Lock serializing roster changes and message fan-out for a room."""
        return self._room_locks.get(room_id)

    # =========================================================================
    # Queries
    # =========================================================================

    def connection(self, connection_id: str) -> Optional[Connection]:
        return self.registry.get(connection_id)

    def participants(self, room_id: str) -> List[Participant]:
        return self.directory.list_participants(room_id)

    def room_of(self, connection_id: str) -> Optional[str]:
        return self.directory.room_of(connection_id)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def connect(self, connection_id: str) -> Connection:
        """Register a freshly opened transport session.

        Raises:
            DuplicateConnection: If the id is already live.
        """
        connection = self.registry.register(connection_id)
        logger.info("[Presence] Connected | connection=%s", connection_id)
        return connection

    async def join(
        self,
        connection_id: str,
        room_id: str,
        display_name: Optional[str] = None,
        admit: Optional[AdmitCallback] = None,
    ) -> List[Participant]:
        """Move a connection into ``room_id`` and return the room's roster.

        Args:
            connection_id: Joining connection
            room_id: Target room, created on first join
            display_name: Name to show; keeps the registered name when None
            admit: External admission check, run under the room lock

        Raises:
            UnknownConnection: If the connection is not registered.
            JoinRejected: If ``admit`` refuses the join.
        """
        # Late events from a closed socket must not allocate a lock
        self.registry.require(connection_id)
        async with self._connection_locks.get(connection_id):
            connection = self.registry.require(connection_id)
            name =connection.display_name if display_name is None else display_name
            state = state_of(True, connection.current_room_id)
            _, effects = transition(state, JoinRoom(room_id, name))

            if admit is not None and any(isinstance(e, EnterRoom) for e in effects):
                # Checked again under the room lock; this pass keeps a rejected
                # room switch from dropping the current room.
                admit(room_id, connection, self.directory.list_participants(room_id))

            for effect in effects:
                await self._apply(connection_id, effect, admit)

        return self.directory.list_participants(room_id)

    async def leave(self, connection_id: str, room_id: Optional[str] = None) -> bool:
        """Leave ``room_id`` (or the current room when None).

        Returns True if the connection actually left a room. Leaving a room
        the connection is not in, or leaving from an unknown connection, is a
        silent no-op.
        """
        if connection_id not in self.registry:
            logger.debug("[Presence] Leave from unknown connection | connection=%s", connection_id)
            return False
        async with self._connection_locks.get(connection_id):
            connection = self.registry.get(connection_id)
            if connection is None:
                return False
            state =state_of(True, connection.current_room_id)
            _, effects = transition(state, LeaveRoom(room_id))
            for effect in effects:
                await self._apply(connection_id, effect)
            return bool(effects)

    async def disconnect(self, connection_id: str) -> Optional[Connection]:
        """Transport closed: leave any room and forget the connection.

        Safe to call more than once and after an explicit leave.
        """
        async with self._connection_locks.get(connection_id):
            connection = self.registry.get(connection_id)
            state = state_of(
                connection is not None,
                connection.current_room_id if connection else None,
            )
            _, effects = transition(state, TransportClosed())
            for effect in effects:
                await self._apply(connection_id, effect)
            removed = self.registry.remove(connection_id)

        self._connection_locks.discard(connection_id)
        if removed is not None:
            logger.info("[Presence] Disconnected | connection=%s", connection_id)
        return removed

    # =========================================================================
    # Effects
    # =========================================================================

    async def _apply(
        self,
        connection_id: str,
        effect: PresenceEffect,
        admit: Optional[AdmitCallback] = None,
    ) -> None:
        if isinstance(effect, EnterRoom):
            await self._enter_room(connection_id, effect.room_id, effect.display_name, admit)
        elif isinstance(effect, ExitRoom):
            await self._exit_room(connection_id, effect.room_id)
        elif isinstance(effect, ResendRoster):
            roster = self.directory.list_participants(effect.room_id)
            await self.emitter.send(
                connection_id, ServerEventType.ROOM_USERS.value, roster_payload(roster)
            )
        else:
            raise TypeError(f"Unsupported presence effect: {effect!r}")

    async def _enter_room(
        self,
        connection_id: str,
        room_id: str,
        display_name: str,
        admit: Optional[AdmitCallback],
    ) -> None:
        async with self.room_lock(room_id):
            connection = self.registry.require(connection_id)
            if admit is not None:
                admit(room_id, connection, self.directory.list_participants(room_id))

            self.registry.set_display_name(connection_id, display_name)
            self.registry.assign_room(connection_id, room_id)
            self.directory.add_participant(room_id, connection_id, display_name)

            roster = self.directory.list_participants(room_id)
            logger.info(
                "[Presence] Joined room | connection=%s room=%s name=%s members=%d",
                connection_id, room_id, display_name, len(roster),
            )

            await self._broadcast(roster, ServerEventType.ROOM_USERS, roster_payload(roster))
            await self._broadcast(
                roster,
                ServerEventType.USER_JOINED,
                {"connectionId": connection_id, "displayName": display_name},
                skip=connection_id,
            )
            await self._send_history(connection_id, room_id)

    async def _exit_room(self, connection_id: str, room_id: str) -> None:
        async with self.room_lock(room_id):
            participant = self.directory.remove_participant(room_id, connection_id)
            connection = self.registry.get(connection_id)
            if connection is not None and connection.current_room_id == room_id:
                self.registry.assign_room(connection_id, None)

            if participant is None:
                return

            remaining = self.directory.list_participants(room_id)
            logger.info(
                "[Presence] Left room | connection=%s room=%s remaining=%d",
                connection_id, room_id, len(remaining),
            )
            await self._broadcast(remaining, ServerEventType.USER_LEFT, participant.to_dict())
            await self._broadcast(remaining, ServerEventType.ROOM_USERS, roster_payload(remaining))

    async def _send_history(self, connection_id: str, room_id: str) -> None:
        if self._history_provider is None:
            return
        try:
            history = await self._history_provider(room_id)
        except Exception as e:
            # The join stands; the client can still fetch history over HTTP
            logger.error(
                "[Presence] Failed to load history | room=%s connection=%s: %s",
                room_id, connection_id, e, exc_info=True,
            )
            return
        await self.emitter.send(
            connection_id,
            ServerEventType.CHAT_MESSAGE_HISTORY.value,
            [message.to_dict() for message in history],
        )

    async def _broadcast(
        self,
        targets: Iterable[Participant],
        event: ServerEventType,
        data,
        skip: Optional[str] = None,
    ) -> None:
        for participant in targets:
            if participant.connection_id == skip:
                continue
            await self.emitter.send(participant.connection_id, event.value, data)
