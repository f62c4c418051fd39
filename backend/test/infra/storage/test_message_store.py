"""Tests for the in-memory and SQL message stores.

Validates that:
1. Stores assign increasing sequence numbers and unique message ids
2. Queries return one room's messages in append order
3. The SQL store survives a fresh DatabaseManager on the same file
"""

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from peerhaven.config import Settings
from peerhaven.infra.db.connection import DatabaseManager
from peerhaven.infra.storage import (
    InMemoryMessageStore,
    SqlMessageStore,
    create_message_store,
)
from peerhaven.models.chat_message import ChatMessageDraft


def make_draft(room_id: str, text: str, sender: str = "Alice") -> ChatMessageDraft:
    return ChatMessageDraft(
        room_id=room_id,
        sender_display_name=sender,
        text=text,
        sent_at=datetime(2024, 5, 1, 18, 30, tzinfo=timezone.utc),
    )


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path}/chat.db"


@pytest_asyncio.fixture(scope="function")
async def db_manager(database_url):
    manager = DatabaseManager(database_url)
    await manager.create_tables()
    yield manager
    await manager.close()


class TestInMemoryMessageStore:

    @pytest.mark.asyncio
    async def test_append_assigns_identity(self):
        store = InMemoryMessageStore()

        first = await store.append(make_draft("g1", "one"))
        second = await store.append(make_draft("g2", "two"))

        assert first.message_id.startswith("msg_")
        assert first.message_id != second.message_id
        assert second.sequence > first.sequence

    @pytest.mark.asyncio
    async def test_query_returns_copy(self):
        store = InMemoryMessageStore()
        await store.append(make_draft("g1", "one"))

        history = await store.query("g1")
        history.clear()

        assert len(await store.query("g1")) == 1


class TestSqlMessageStore:

    @pytest.mark.asyncio
    async def test_append_and_query(self, db_manager):
        store = SqlMessageStore(db_manager)

        first = await store.append(make_draft("g1", "hello"))
        await store.append(make_draft("g2", "elsewhere", sender="Bob"))
        third = await store.append(make_draft("g1", "again"))

        history = await store.query("g1")

        assert [m.text for m in history] == ["hello", "again"]
        assert [m.sequence for m in history] == [first.sequence, third.sequence]
        assert first.sequence < third.sequence
        assert history[0].message_id == first.message_id

    @pytest.mark.asyncio
    async def test_sent_at_keeps_utc(self, db_manager):
        store = SqlMessageStore(db_manager)
        draft = make_draft("g1", "tz")

        await store.append(draft)
        [stored] = await store.query("g1")

        assert stored.sent_at == draft.sent_at
        assert stored.sent_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_unknown_room_is_empty(self, db_manager):
        assert await SqlMessageStore(db_manager).query("nowhere") == []

    @pytest.mark.asyncio
    async def test_history_survives_restart(self, database_url):
        manager = DatabaseManager(database_url)
        await manager.create_tables()
        await SqlMessageStore(manager).append(make_draft("g1", "persisted"))
        await manager.close()

        reopened = DatabaseManager(database_url)
        try:
            history = await SqlMessageStore(reopened).query("g1")
        finally:
            await reopened.close()

        assert [m.text for m in history] == ["persisted"]


def test_create_message_store_selects_backend(database_url):
    assert isinstance(
        create_message_store(Settings(message_store="memory")), InMemoryMessageStore
    )

    store = create_message_store(Settings(message_store="sql", database_url=database_url))
    assert isinstance(store, SqlMessageStore)
    assert store.db_manager.database_url == database_url
