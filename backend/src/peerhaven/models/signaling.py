"""WebRTC signaling envelope - a transient relay payload, never stored."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class SignalKind(str, Enum):
    """Signaling messages relayed between two connections."""
    OFFER = "offer"
    ANSWER = "answer"
    ICE_CANDIDATE = "ice-candidate"


@dataclass(frozen=True)
class SignalingEnvelope:
    kind: SignalKind
    from_connection_id: str
    to_connection_id: str
    payload: Any

    def to_delivery(self) -> Dict[str, Any]:
        """Payload delivered to the addressed peer."""
        return {
            "fromConnectionId": self.from_connection_id,
            "payload": self.payload,
        }
