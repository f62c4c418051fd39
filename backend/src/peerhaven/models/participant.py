"""Participant data model - one roster entry."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Participant:
    """A connection present in a room, in join order."""
    connection_id: str
    display_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connectionId": self.connection_id,
            "displayName": self.display_name,
        }
