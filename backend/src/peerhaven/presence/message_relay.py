"""Room chat: persist, then fan out.

A message is broadcast only after the store accepted it, and persist plus
fan-out run under the room lock, so every member sees one order per room
and history replay never disagrees with what was seen live.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List

from peerhaven.infra.storage.message_store import MessageStore
from peerhaven.models.chat_message import ChatMessage, ChatMessageDraft
from peerhaven.presence.errors import (
    EmptyMessage,
    MessagePersistError,
    MessageTooLong,
    NotInRoom,
    UnknownConnection,
)
from peerhaven.presence.events import Emitter, ServerEventType
from peerhaven.presence.presence_coordinator import PresenceCoordinator

logger = logging.getLogger(__name__)


class MessageRelay:
    """Validates, persists and broadcasts room chat messages."""

    def __init__(
        self,
        store: MessageStore,
        presence: PresenceCoordinator,
        emitter: Emitter,
        max_message_length: int = 2000,
    ):
        self.store = store
        self.presence = presence
        self.emitter = emitter
        self.max_message_length = max_message_length

    def validate(self, text: str) -> None:
        """Reject blank or oversized text.

        Raises:
            EmptyMessage: If ``text`` is empty after stripping whitespace.
            MessageTooLong: If ``text`` exceeds the configured limit.
        """
        if not (text or "").strip():
            raise EmptyMessage()
        if self.max_message_length and len(text) > self.max_message_length:
            raise MessageTooLong(len(text), self.max_message_length)

    async def send(self, room_id: str, sender_display_name: str, text: str) -> ChatMessage:
        """Persist a message and broadcast it to everyone in the room.

        The sender receives the broadcast like every other member.

        Raises:
            EmptyMessage, MessageTooLong: On validation failure.
            MessagePersistError: If the store write fails (nothing is broadcast).
        """
        self.validate(text)
        async with self.presence.room_lock(room_id):
            return await self._persist_and_fan_out(room_id, sender_display_name, text)

    async def send_as(self, connection_id: str, room_id: str, text: str) -> ChatMessage:
        """Send on behalf of a connection, which must currently be in the room.

        Raises:
            UnknownConnection: If the connection is not registered.
            NotInRoom: If the connection has not joined ``room_id``.
        """
        self.validate(text)
        async with self.presence.room_lock(room_id):
            connection = self.presence.connection(connection_id)
            if connection is None:
                raise UnknownConnection(connection_id)
            if connection.current_room_id != room_id:
                raise NotInRoom(connection_id, room_id)
            return await self._persist_and_fan_out(room_id, connection.display_name, text)

    async def history(self, room_id: str) -> List[ChatMessage]:
        """Persisted messages for a room, oldest first."""
        return await self.store.query(room_id)

    async def _persist_and_fan_out(
        self,
        room_id: str,
        sender_display_name: str,
        text: str,
    ) -> ChatMessage:
        draft = ChatMessageDraft(
            room_id=room_id,
            sender_display_name=sender_display_name,
            text=text,
            sent_at=datetime.now(timezone.utc),
        )
        try:
            message = await self.store.append(draft)
        except Exception as e:
            logger.error("[Chat] Persist failed, not broadcasting | room=%s: %s", room_id, e)
            raise MessagePersistError(room_id) from e

        payload = message.to_dict()
        members = self.presence.participants(room_id)
        for participant in members:
            await self.emitter.send(
                participant.connection_id, ServerEventType.CHAT_MESSAGE.value, payload
            )

        logger.debug(
            "[Chat] Broadcast message | room=%s seq=%d recipients=%d",
            room_id, message.sequence, len(members),
        )
        return message
