"""Process-wide logging setup."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for health probes."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if '"GET /api/health' in message and "200" in message:
            return False
        return True


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure root logging and return the application logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())
    # Socket.IO / Engine.IO internals are too chatty at INFO
    logging.getLogger("socketio").setLevel(logging.WARNING)
    logging.getLogger("engineio").setLevel(logging.WARNING)
    return logging.getLogger("peerhaven")
