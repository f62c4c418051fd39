"""WebRTC signaling relay.

Forwards offer / answer / ICE-candidate payloads from one connection to
another by connection id. Room membership is not consulted, payloads are
not inspected, and nothing is queued or retried.
"""

from __future__ import annotations

import logging

from peerhaven.models.signaling import SignalingEnvelope
from peerhaven.presence.connection_registry import ConnectionRegistry
from peerhaven.presence.events import Emitter

logger = logging.getLogger(__name__)


class SignalingRelay:
    def __init__(self, registry: ConnectionRegistry, emitter: Emitter):
        self.registry = registry
        self.emitter = emitter

    async def relay(self, envelope: SignalingEnvelope) -> bool:
        """Deliver an envelope to its target.

        Returns:
            True if forwarded, False if the target is gone and the envelope
            was dropped.
        """
        if envelope.to_connection_id not in self.registry:
            # Peer left mid-negotiation; the caller will time out and retry
            logger.debug(
                "[Signaling] Dropped %s | from=%s to=%s (target not connected)",
                envelope.kind.value, envelope.from_connection_id, envelope.to_connection_id,
            )
            return False

        await self.emitter.send(
            envelope.to_connection_id,
            envelope.kind.value,
            envelope.to_delivery(),
        )
        logger.debug(
            "[Signaling] Relayed %s | from=%s to=%s",
            envelope.kind.value, envelope.from_connection_id, envelope.to_connection_id,
        )
        return True
