#!/usr/bin/env python3
"""
Uvicorn runner script for PeerHaven.
Starts the Socket.IO-wrapped FastAPI server for real-time room, chat and
voice signaling support.
"""

import os

import uvicorn

from peerhaven.config import get_settings


def main():
    """Start the Socket.IO-wrapped FastAPI application with uvicorn."""
    settings = get_settings()
    reload = os.getenv("UVICORN_RELOAD", "false").lower() == "true"

    # Presence state is in-memory: run a single worker
    uvicorn.run(
        "peerhaven.api.app:socket_app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
