"""Repository layer for chat message database operations.

Implements the message store interface on top of SQLAlchemy so history
survives restarts. Sequence numbers come from the table's autoincrement key.
"""

from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from peerhaven.infra.db.connection import DatabaseManager
from peerhaven.infra.storage.message_store import new_message_id
from peerhaven.models.chat_message import ChatMessage, ChatMessageDraft
from peerhaven.models.chat_message_db import ChatMessageRecord

logger = logging.getLogger(__name__)


class SqlMessageStore:
    """Repository for chat message persistence.

    Handles conversion between ``ChatMessageRecord`` rows and the immutable
    ``ChatMessage`` domain model.
    """

    def __init__(self, db_manager: DatabaseManager):
        """Initialize repository with database manager."""
        self.db_manager = db_manager

    async def append(self, draft: ChatMessageDraft) -> ChatMessage:
        """Persist a draft and return it with its store-assigned sequence.

        Args:
            draft: Validated message awaiting persistence

        Returns:
            The persisted message

        Raises:
            SQLAlchemyError: If the insert fails. Nothing is committed.
        """
        try:
            async with self.db_manager.get_async_session() as session:
                record = ChatMessageRecord(
                    message_id=new_message_id(),
                    room_id=draft.room_id,
                    sender_display_name=draft.sender_display_name,
                    text=draft.text,
                    sent_at=draft.sent_at,
                )
                session.add(record)
                await session.commit()
                await session.refresh(record)

                logger.debug(
                    "Persisted chat message: room=%s seq=%d", record.room_id, record.sequence
                )
                return record.to_domain()

        except SQLAlchemyError as e:
            logger.error("Error persisting chat message for room %s: %s", draft.room_id, e)
            raise

    async def query(self, room_id: str) -> List[ChatMessage]:
        """Get all messages for a room, oldest first.

        Args:
            room_id: Room identifier

        Returns:
            Messages ordered by sequence
        """
        try:
            async with self.db_manager.get_async_session() as session:
                stmt = (
                    select(ChatMessageRecord)
                    .where(ChatMessageRecord.room_id == room_id)
                    .order_by(ChatMessageRecord.sequence.asc())
                )
                result = await session.execute(stmt)
                return [record.to_domain() for record in result.scalars().all()]

        except SQLAlchemyError as e:
            logger.error("Error querying chat history for room %s: %s", room_id, e)
            raise
