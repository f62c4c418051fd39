"""Shared fixtures for realtime core tests."""

from typing import Any, List, Optional, Tuple

import pytest

from peerhaven.infra.storage.message_store import InMemoryMessageStore
from peerhaven.presence.hub import RealtimeHub


class RecordingEmitter:
    """Emitter that records every delivery in order instead of sending it."""

    def __init__(self):
        self.sent: List[Tuple[str, str, Any]] = []

    async def send(self, connection_id: str, event: str, data: Any) -> None:
        self.sent.append((connection_id, event, data))

    def events_for(self, connection_id: str) -> List[Tuple[str, Any]]:
        """(event, data) pairs delivered to one connection, in order."""
        return [(event, data) for cid, event, data in self.sent if cid == connection_id]

    def payloads(self, connection_id: str, event: str) -> List[Any]:
        return [data for cid, ev, data in self.sent if cid == connection_id and ev == event]

    def event_names(self, connection_id: str) -> List[str]:
        return [event for event, _ in self.events_for(connection_id)]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def message_store() -> InMemoryMessageStore:
    return InMemoryMessageStore()


@pytest.fixture
def make_hub():
    """Factory for independent hubs sharing nothing."""

    def _make(
        emitter: Optional[RecordingEmitter] = None,
        store=None,
        **kwargs,
    ) -> RealtimeHub:
        return RealtimeHub(
            emitter or RecordingEmitter(),
            store or InMemoryMessageStore(),
            **kwargs,
        )

    return _make


@pytest.fixture
def hub(emitter, message_store) -> RealtimeHub:
    return RealtimeHub(emitter, message_store)
