"""Socket.IO transport for the realtime core."""
