"""Pure presence transitions for a single connection.

``transition(state, event)`` returns the next state and the effects the
coordinator must carry out, in order. Nothing here touches the registry,
the room directory or the transport, so the table can be tested on its own.

    Disconnected --(any)--------------> Disconnected
    Connected    --JoinRoom(r)--------> InRoom(r)      [EnterRoom(r)]
    InRoom(r)    --JoinRoom(r)--------> InRoom(r)      [ResendRoster(r)]
    InRoom(r')   --JoinRoom(r)--------> InRoom(r)      [ExitRoom(r'), EnterRoom(r)]
    InRoom(r)    --LeaveRoom(r|None)--> Connected      [ExitRoom(r)]
    InRoom(r)    --LeaveRoom(other)---> InRoom(r)      []
    Connected    --LeaveRoom----------> Connected      []
    InRoom(r)    --TransportClosed----> Disconnected   [ExitRoom(r)]
    Connected    --TransportClosed----> Disconnected   []
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union


# States

@dataclass(frozen=True)
class Disconnected:
    pass


@dataclass(frozen=True)
class Connected:
    pass


@dataclass(frozen=True)
class InRoom:
    room_id: str


PresenceState = Union[Disconnected, Connected, InRoom]


# Events

@dataclass(frozen=True)
class JoinRoom:
    room_id: str
    display_name: str


@dataclass(frozen=True)
class LeaveRoom:
    # None means "whatever room I am in"
    room_id: Optional[str] = None


@dataclass(frozen=True)
class TransportClosed:
    pass


PresenceEvent = Union[JoinRoom, LeaveRoom, TransportClosed]


# Effects

@dataclass(frozen=True)
class EnterRoom:
    room_id: str
    display_name: str


@dataclass(frozen=True)
class ExitRoom:
    room_id: str


@dataclass(frozen=True)
class ResendRoster:
    """Already in the room: send the current roster to the requester only."""
    room_id: str


PresenceEffect = Union[EnterRoom, ExitRoom, ResendRoster]


def state_of(registered: bool, current_room_id: Optional[str]) -> PresenceState:
    """Derive the state from what the registry knows about a connection."""
    if not registered:
        return Disconnected()
    if current_room_id is None:
        return Connected()
    return InRoom(current_room_id)


def transition(
    state: PresenceState,
    event: PresenceEvent,
) -> Tuple[PresenceState, List[PresenceEffect]]:
    """Compute the next state and ordered effects for one event."""
    if isinstance(state, Disconnected):
        # Terminal: a reconnect gets a new connection id
        return state, []

    if isinstance(event, JoinRoom):
        if isinstance(state, InRoom):
            if state.room_id == event.room_id:
                return state, [ResendRoster(state.room_id)]
            return InRoom(event.room_id), [
                ExitRoom(state.room_id),
                EnterRoom(event.room_id, event.display_name),
            ]
        return InRoom(event.room_id), [EnterRoom(event.room_id, event.display_name)]

    if isinstance(event, LeaveRoom):
        if isinstance(state, InRoom) and event.room_id in (None, state.room_id):
            return Connected(), [ExitRoom(state.room_id)]
        return state, []

    if isinstance(event, TransportClosed):
        if isinstance(state, InRoom):
            return Disconnected(), [ExitRoom(state.room_id)]
        return Disconnected(), []

    raise TypeError(f"Unsupported presence event: {event!r}")
