"""SQLAlchemy model for chat message persistence."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from peerhaven.infra.db.base import Base
from peerhaven.models.chat_message import ChatMessage


class ChatMessageRecord(Base):
    """Row in the ``chat_messages`` table.

    ``sequence`` is the autoincrement primary key and defines history replay
    order. Rows are append-only: this core never updates or deletes them.
    """

    __tablename__ = "chat_messages"

    sequence: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    message_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
    )

    room_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    sender_display_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    text: Mapped[str] = mapped_column(Text, nullable=False)

    # Server wall clock at send time
    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def to_domain(self) -> ChatMessage:
        sent_at = self.sent_at
        if sent_at.tzinfo is None:
            # SQLite drops the offset; values are always written in UTC
            sent_at = sent_at.replace(tzinfo=timezone.utc)
        return ChatMessage(
            message_id=self.message_id,
            sequence=self.sequence,
            room_id=self.room_id,
            sender_display_name=self.sender_display_name,
            text=self.text,
            sent_at=sent_at,
        )

    def __repr__(self) -> str:
        return (
            f"<ChatMessageRecord(sequence={self.sequence}, room_id={self.room_id!r}, "
            f"sender={self.sender_display_name!r})>"
        )
