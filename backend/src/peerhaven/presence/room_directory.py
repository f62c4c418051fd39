"""Room directory: room id -> ordered roster.

Rooms are created on first join and kept (empty) after the last participant
leaves, so a later join to the same id simply reuses the entry. Missing rooms
and missing participants are treated as no-ops everywhere.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from peerhaven.models.participant import Participant


class RoomDirectory:
    """Owns room rosters plus a reverse index from connection to room."""

    def __init__(self):
        # room_id -> {connection_id: Participant}; dicts keep join order
        self._rooms: Dict[str, Dict[str, Participant]] = {}
        self._room_by_connection: Dict[str, str] = {}

    def add_participant(self, room_id: str, connection_id: str, display_name: str) -> bool:
        """Append to the roster. Returns False if already present."""
        roster = self._rooms.setdefault(room_id, {})
        if connection_id in roster:
            return False
        roster[connection_id] = Participant(connection_id=connection_id, display_name=display_name)
        self._room_by_connection[connection_id] = room_id
        return True

    def remove_participant(self, room_id: str, connection_id: str) -> Optional[Participant]:
        """Remove from the roster and return the entry, or None if absent."""
        roster = self._rooms.get(room_id)
        if not roster:
            return None
        participant = roster.pop(connection_id, None)
        if participant is not None and self._room_by_connection.get(connection_id) == room_id:
            del self._room_by_connection[connection_id]
        return participant

    def list_participants(self, room_id: str) -> List[Participant]:
        return list(self._rooms.get(room_id, {}).values())

    def room_of(self, connection_id: str) -> Optional[str]:
        return self._room_by_connection.get(connection_id)

    def has_room(self, room_id: str) -> bool:
        return room_id in self._rooms

    def room_ids(self) -> List[str]:
        return list(self._rooms)

    def participant_count(self, room_id: str) -> int:
        return len(self._rooms.get(room_id, {}))
