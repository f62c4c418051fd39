"""Environment-driven settings for the realtime server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Union

from dotenv import load_dotenv

MESSAGE_STORE_SQL = "sql"
MESSAGE_STORE_MEMORY = "memory"


def _parse_origins(raw: str) -> Union[str, List[str]]:
    """Parse a comma separated origin allowlist, defaulting to * for dev."""
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    if not origins:
        return "*"
    return origins


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class Settings:
    """Runtime configuration. Built from the environment by ``get_settings``."""

    environment: str = "development"
    log_level: str = "INFO"
    cors_allowed_origins: Union[str, List[str]] = "*"
    message_store: str = MESSAGE_STORE_SQL
    database_url: str = "sqlite+aiosqlite:///./peerhaven.db"
    max_message_length: int = 2000
    # 0 disables the capacity check
    room_capacity: int = 0
    ping_timeout: int = 30
    ping_interval: int = 25
    port: int = 8000
    service_name: str = "PeerHaven Realtime API"

    @classmethod
    def from_env(cls) -> "Settings":
        origins_raw = (
            os.getenv("WS_ALLOWED_ORIGINS")
            or os.getenv("CORS_ALLOWED_ORIGINS")
            or ""
        )
        message_store = os.getenv("MESSAGE_STORE", MESSAGE_STORE_SQL).strip().lower()
        if message_store not in {MESSAGE_STORE_SQL, MESSAGE_STORE_MEMORY}:
            raise ValueError(
                f"MESSAGE_STORE must be '{MESSAGE_STORE_SQL}' or '{MESSAGE_STORE_MEMORY}', got {message_store!r}"
            )

        return cls(
            environment=os.getenv("ENVIRONMENT", "development").lower(),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            cors_allowed_origins=_parse_origins(origins_raw),
            message_store=message_store,
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            max_message_length=_int_env("MAX_MESSAGE_LENGTH", cls.max_message_length),
            room_capacity=_int_env("ROOM_CAPACITY", cls.room_capacity),
            ping_timeout=_int_env("SOCKETIO_PING_TIMEOUT", cls.ping_timeout),
            ping_interval=_int_env("SOCKETIO_PING_INTERVAL", cls.ping_interval),
            port=_int_env("PORT", cls.port),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process (reads .env if present)."""
    load_dotenv()
    return Settings.from_env()
