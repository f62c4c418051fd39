"""FastAPI application wrapped by the Socket.IO ASGI app.

Use ``socket_app`` with uvicorn; ``app`` alone serves only the HTTP routes.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from peerhaven import __version__
from peerhaven.config import MESSAGE_STORE_SQL, get_settings
from peerhaven.logging_config import setup_logging

settings = get_settings()

# Setup logging first before any other imports that might use logger
logger = setup_logging(settings.log_level)

from peerhaven.api.routes.rooms import router as rooms_router
from peerhaven.api.schemas.rooms import HealthResponse
from peerhaven.connection.socketio_broadcaster import SocketIOBroadcaster
from peerhaven.connection.socketio_server import (
    RealtimeEventHandlers,
    create_socketio_app,
    create_socketio_server,
)
from peerhaven.infra.db.connection import DatabaseManager
from peerhaven.infra.storage import create_message_store
from peerhaven.presence.hub import RealtimeHub

db_manager = DatabaseManager(settings.database_url)

# Socket.IO server and the realtime core it drives
sio = create_socketio_server(settings)
broadcaster = SocketIOBroadcaster(sio)
hub = RealtimeHub.from_settings(
    settings,
    broadcaster,
    create_message_store(settings, db_manager),
)
RealtimeEventHandlers(hub).register(sio)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting %s v%s (env=%s store=%s)",
        settings.service_name, __version__, settings.environment, settings.message_store,
    )
    if settings.message_store == MESSAGE_STORE_SQL:
        await db_manager.create_tables()
    yield
    await db_manager.close()
    logger.info("Shutdown complete")


app = FastAPI(title=settings.service_name, version=__version__, lifespan=lifespan)
app.state.hub = hub

# Wrap FastAPI with Socket.IO. The combined app handles both HTTP requests
# and Socket.IO connections. Use socket_app for uvicorn.
socket_app = create_socketio_app(sio, app)

_cors_origins = settings.cors_allowed_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if _cors_origins == "*" else _cors_origins,
    # Browsers refuse credentials with a wildcard origin
    allow_credentials=_cors_origins != "*",
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rooms_router)


@app.get("/api/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    stats = request.app.state.hub.stats()
    return HealthResponse(
        environment=settings.environment,
        message_store=settings.message_store,
        **stats,
    )
