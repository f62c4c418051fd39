"""PeerHaven realtime core: room presence, chat relay and WebRTC signaling."""

__version__ = "0.1.0"
