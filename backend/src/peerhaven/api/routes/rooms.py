"""Read-only room endpoints: rosters and chat history."""

import logging

from fastapi import APIRouter, HTTPException, Request

from peerhaven.api.schemas.rooms import (
    ChatMessageResponse,
    ParticipantResponse,
    RoomHistoryResponse,
    RoomListResponse,
    RoomRosterResponse,
    RoomSummary,
)
from peerhaven.presence.hub import RealtimeHub

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


def get_hub(request: Request) -> RealtimeHub:
    hub = getattr(request.app.state, "hub", None)
    if hub is None:
        raise HTTPException(status_code=503, detail="Realtime hub not initialized")
    return hub


@router.get("", response_model=RoomListResponse)
async def list_rooms(request: Request) -> RoomListResponse:
    """List known rooms, including rooms that are currently empty."""
    hub = get_hub(request)
    rooms = [
        RoomSummary(room_id=room_id, participant_count=hub.directory.participant_count(room_id))
        for room_id in hub.directory.room_ids()
    ]
    return RoomListResponse(rooms=rooms, total=len(rooms))


@router.get("/{room_id}/participants", response_model=RoomRosterResponse)
async def get_room_participants(room_id: str, request: Request) -> RoomRosterResponse:
    """Current roster in join order. Unknown rooms return an empty roster."""
    hub = get_hub(request)
    roster = hub.presence.participants(room_id)
    return RoomRosterResponse(
        room_id=room_id,
        participants=[ParticipantResponse.from_participant(p) for p in roster],
        count=len(roster),
    )


@router.get("/{room_id}/messages", response_model=RoomHistoryResponse)
async def get_room_messages(room_id: str, request: Request) -> RoomHistoryResponse:
    """Persisted chat history, oldest first."""
    hub = get_hub(request)
    try:
        history = await hub.messages.history(room_id)
    except Exception as e:
        logger.error("Failed to load history for room %s: %s", room_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load chat history")
    return RoomHistoryResponse(
        room_id=room_id,
        messages=[ChatMessageResponse.from_message(m) for m in history],
        count=len(history),
    )
