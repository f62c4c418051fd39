"""Message store implementations."""

from __future__ import annotations

from typing import Optional

from peerhaven.config import MESSAGE_STORE_MEMORY, Settings
from peerhaven.infra.db.connection import DatabaseManager
from peerhaven.infra.storage.chat_message_repository import SqlMessageStore
from peerhaven.infra.storage.message_store import InMemoryMessageStore, MessageStore


def create_message_store(
    settings: Settings,
    db_manager: Optional[DatabaseManager] = None,
) -> MessageStore:
    """Build the store selected by ``MESSAGE_STORE``."""
    if settings.message_store == MESSAGE_STORE_MEMORY:
        return InMemoryMessageStore()
    return SqlMessageStore(db_manager or DatabaseManager(settings.database_url))


__all__ = [
    "MessageStore",
    "InMemoryMessageStore",
    "SqlMessageStore",
    "create_message_store",
]
