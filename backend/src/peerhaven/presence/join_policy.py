"""Join admission policies.

Capacity and membership rules belong to the group records, not to the
presence coordinator. The coordinator only calls ``admit`` under the room
lock so a policy sees a roster that cannot change underneath it.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol

from peerhaven.models.connection import Connection
from peerhaven.models.participant import Participant
from peerhaven.presence.errors import RoomFull


class JoinPolicy(Protocol):
    def admit(self, room_id: str, connection: Connection, roster: List[Participant]) -> None:
        """Raise ``JoinRejected`` to refuse the join."""
        ...


class AllowAllJoinPolicy:
    def admit(self, room_id: str, connection: Connection, roster: List[Participant]) -> None:
        return None


class CapacityJoinPolicy:
    """Reject joins once a room holds ``capacity`` participants.

    Mirrors the ``limit`` field of a support group. Rooms without an explicit
    capacity use ``default_capacity``; a capacity of 0 means unlimited.
    """

    def __init__(self, default_capacity: int = 0, capacities: Optional[Dict[str, int]] = None):
        self.default_capacity = default_capacity
        self._capacities: Dict[str, int] = dict(capacities or {})

    def set_capacity(self, room_id: str, capacity: int) -> None:
        self._capacities[room_id] = capacity

    def capacity_for(self, room_id: str) -> int:
        return self._capacities.get(room_id, self.default_capacity)

    def admit(self, room_id: str, connection: Connection, roster: List[Participant]) -> None:
        capacity = self.capacity_for(room_id)
        if capacity <= 0:
            return
        others = [p for p in roster if p.connection_id != connection.connection_id]
        if len(others) >= capacity:
            raise RoomFull(room_id, capacity)
