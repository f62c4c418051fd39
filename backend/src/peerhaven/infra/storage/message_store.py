"""Message store interface and the in-memory implementation.

The relay only needs two operations: append a draft (the store assigns
``message_id`` and ``sequence``) and query a room's messages in store order.
"""

from __future__ import annotations

import itertools
import logging
import uuid
from collections import defaultdict
from typing import Dict, List, Protocol

from peerhaven.models.chat_message import ChatMessage, ChatMessageDraft

logger = logging.getLogger(__name__)


def new_message_id() -> str:
    return f"msg_{uuid.uuid4().hex}"


class MessageStore(Protocol):
    """Append/query collaborator used by the message relay."""

    async def append(self, draft: ChatMessageDraft) -> ChatMessage:
        ...

    async def query(self, room_id: str) -> List[ChatMessage]:
        ...


class InMemoryMessageStore:
    """Process-local store. Messages are lost on restart."""

    def __init__(self):
        # room_id -> messages in append order
        self._messages: Dict[str, List[ChatMessage]] = defaultdict(list)
        self._sequence = itertools.count(1)

    async def append(self, draft: ChatMessageDraft) -> ChatMessage:
        message = ChatMessage.from_draft(
            draft,
            message_id=new_message_id(),
            sequence=next(self._sequence),
        )
        self._messages[draft.room_id].append(message)
        logger.debug(
            "[MessageStore] Appended | room=%s seq=%d", draft.room_id, message.sequence
        )
        return message

    async def query(self, room_id: str) -> List[ChatMessage]:
        return list(self._messages.get(room_id, ()))
