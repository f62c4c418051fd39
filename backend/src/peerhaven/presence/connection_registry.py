"""Registry of live connections: id -> display name and current room.

Leaf component. It owns the only ``Connection`` records; everything else
refers to connections by id. It never broadcasts.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from peerhaven.models.connection import Connection
from peerhaven.presence.errors import DuplicateConnection, UnknownConnection

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Maps live connection ids to their ``Connection`` record."""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def register(self, connection_id: str) -> Connection:
        """Create an entry with no display name and no room.

        Raises:
            DuplicateConnection: If the id is already live.
        """
        if connection_id in self._connections:
            raise DuplicateConnection(connection_id)
        connection = Connection(connection_id=connection_id)
        self._connections[connection_id] = connection
        logger.debug("[Registry] Registered | connection=%s", connection_id)
        return connection

    def get(self, connection_id: str) -> Optional[Connection]:
        return self._connections.get(connection_id)

    def require(self, connection_id: str) -> Connection:
        connection = self._connections.get(connection_id)
        if connection is None:
            raise UnknownConnection(connection_id)
        return connection

    def set_display_name(self, connection_id: str, name: str) -> None:
        self.require(connection_id).display_name = name

    def assign_room(self, connection_id: str, room_id: Optional[str]) -> None:
        self.require(connection_id).current_room_id = room_id

    def remove(self, connection_id: str) -> Optional[Connection]:
        """Drop the entry and return it (None if it was already gone)."""
        connection = self._connections.pop(connection_id, None)
        if connection is not None:
            logger.debug("[Registry] Removed | connection=%s", connection_id)
        return connection

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)
