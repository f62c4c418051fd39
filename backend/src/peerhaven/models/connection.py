"""Connection data model - one live client transport session."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass
class Connection:
    """A live Socket.IO session as seen by the presence layer."""
    connection_id: str
    display_name: str = ""
    current_room_id: Optional[str] = None
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def in_room(self) -> bool:
        return self.current_room_id is not None
