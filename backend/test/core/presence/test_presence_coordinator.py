"""Tests for PresenceCoordinator join / leave / disconnect behaviour."""

import asyncio

import pytest

from peerhaven.presence.errors import JoinRejected, RoomFull, UnknownConnection
from peerhaven.presence.join_policy import CapacityJoinPolicy


def entry(connection_id, display_name):
    return {"connectionId": connection_id, "displayName": display_name}


async def connect_and_join(hub, connection_id, room_id, name):
    hub.presence.connect(connection_id)
    return await hub.join(connection_id, room_id, name)


class TestJoin:

    @pytest.mark.asyncio
    async def test_first_joiner_gets_roster_and_empty_history(self, hub, emitter):
        await connect_and_join(hub, "X", "g1", "Alice")

        assert emitter.events_for("X") == [
            ("room-users", [entry("X", "Alice")]),
            ("chat-message-history", []),
        ]

    @pytest.mark.asyncio
    async def test_second_joiner_scenario(self, hub, emitter):
        """X then Y join g1: Y sees the full roster, X gets a join delta."""
        await connect_and_join(hub, "X", "g1", "Alice")
        emitter.clear()

        roster = await connect_and_join(hub, "Y", "g1", "Bob")

        expected_roster = [entry("X", "Alice"), entry("Y", "Bob")]
        assert [p.to_dict() for p in roster] == expected_roster
        assert emitter.payloads("Y", "room-users") == [expected_roster]
        assert emitter.payloads("X", "room-users") == [expected_roster]
        assert emitter.payloads("X", "user-joined") == [entry("Y", "Bob")]
        # The joiner is not told about itself
        assert emitter.payloads("Y", "user-joined") == []
        # History arrives after the roster
        assert emitter.event_names("Y") == ["room-users", "chat-message-history"]

    @pytest.mark.asyncio
    async def test_join_sets_registry_state(self, hub):
        await connect_and_join(hub, "X", "g1", "Alice")

        connection = hub.registry.get("X")
        assert connection.display_name == "Alice"
        assert connection.current_room_id == "g1"
        assert hub.presence.room_of("X") == "g1"

    @pytest.mark.asyncio
    async def test_join_same_room_twice_is_idempotent(self, hub, emitter):
        await connect_and_join(hub, "X", "g1", "Alice")
        await connect_and_join(hub, "Y", "g1", "Bob")
        emitter.clear()

        await hub.join("Y", "g1", "Bob")

        assert [p.connection_id for p in hub.presence.participants("g1")] == ["X", "Y"]
        # Only the requester gets a fresh roster; nobody sees a second join
        assert emitter.sent == [("Y", "room-users", [entry("X", "Alice"), entry("Y", "Bob")])]

    @pytest.mark.asyncio
    async def test_join_keeps_registered_name_when_none_given(self, hub):
        hub.presence.connect("X")
        hub.registry.set_display_name("X", "Alice")

        await hub.join("X", "g1")

        assert hub.presence.participants("g1")[0].display_name == "Alice"

    @pytest.mark.asyncio
    async def test_join_unknown_connection_raises(self, hub):
        with pytest.raises(UnknownConnection):
            await hub.join("ghost", "g1", "Nobody")

        assert hub.presence.participants("g1") == []

    @pytest.mark.asyncio
    async def test_switching_rooms_leaves_previous_room(self, hub, emitter):
        await connect_and_join(hub, "X", "g1", "Alice")
        await connect_and_join(hub, "Y", "g1", "Bob")
        emitter.clear()

        await hub.join("Y", "g2", "Bob")

        assert [p.connection_id for p in hub.presence.participants("g1")] == ["X"]
        assert [p.connection_id for p in hub.presence.participants("g2")] == ["Y"]
        assert hub.presence.room_of("Y") == "g2"
        assert emitter.payloads("X", "user-left") == [entry("Y", "Bob")]
        assert emitter.payloads("X", "room-users") == [[entry("X", "Alice")]]


class TestLeave:

    @pytest.mark.asyncio
    async def test_explicit_leave_notifies_remaining(self, hub, emitter):
        await connect_and_join(hub, "X", "g1", "Alice")
        await connect_and_join(hub, "Y", "g1", "Bob")
        emitter.clear()

        left = await hub.presence.leave("X", "g1")

        assert left is True
        assert emitter.events_for("Y") == [
            ("user-left", entry("X", "Alice")),
            ("room-users", [entry("Y", "Bob")]),
        ]
        # Nothing is sent to the departing connection
        assert emitter.events_for("X") == []
        assert hub.registry.get("X").current_room_id is None

    @pytest.mark.asyncio
    async def test_leave_room_not_joined_is_noop(self, hub, emitter):
        await connect_and_join(hub, "X", "g1", "Alice")
        await connect_and_join(hub, "Y", "g1", "Bob")
        emitter.clear()

        assert await hub.presence.leave("X", "other-room") is False
        assert await hub.presence.leave("ghost", "g1") is False

        assert emitter.sent == []
        assert len(hub.presence.participants("g1")) == 2

    @pytest.mark.asyncio
    async def test_double_leave_broadcasts_once(self, hub, emitter):
        await connect_and_join(hub, "X", "g1", "Alice")
        await connect_and_join(hub, "Y", "g1", "Bob")
        emitter.clear()

        await hub.presence.leave("X", "g1")
        await hub.presence.leave("X", "g1")

        assert len(emitter.payloads("Y", "user-left")) == 1

    @pytest.mark.asyncio
    async def test_leave_then_rejoin(self, hub):
        await connect_and_join(hub, "X", "g1", "Alice")
        await hub.presence.leave("X")

        await hub.join("X", "g1", "Alice")

        assert [p.connection_id for p in hub.presence.participants("g1")] == ["X"]


class TestDisconnect:

    @pytest.mark.asyncio
    async def test_abrupt_disconnect_scenario(self, hub, emitter):
        """X drops without leave-room: Y sees user-left then the new roster."""
        await connect_and_join(hub, "X", "g1", "Alice")
        await connect_and_join(hub, "Y", "g1", "Bob")
        emitter.clear()

        await hub.presence.disconnect("X")

        assert emitter.events_for("Y") == [
            ("user-left", entry("X", "Alice")),
            ("room-users", [entry("Y", "Bob")]),
        ]
        assert "X" not in hub.registry
        assert hub.presence.room_of("X") is None

    @pytest.mark.asyncio
    async def test_disconnect_is_idempotent(self, hub, emitter):
        await connect_and_join(hub, "X", "g1", "Alice")
        await connect_and_join(hub, "Y", "g1", "Bob")
        emitter.clear()

        await hub.presence.leave("X", "g1")
        await hub.presence.disconnect("X")
        await hub.presence.disconnect("X")

        assert len(emitter.payloads("Y", "user-left")) == 1
        assert "X" not in hub.registry

    @pytest.mark.asyncio
    async def test_disconnect_without_room(self, hub, emitter):
        hub.presence.connect("X")

        removed = await hub.presence.disconnect("X")

        assert removed.connection_id == "X"
        assert emitter.sent == []

    @pytest.mark.asyncio
    async def test_join_after_disconnect_is_rejected(self, hub):
        hub.presence.connect("X")
        await hub.presence.disconnect("X")

        with pytest.raises(UnknownConnection):
            await hub.join("X", "g1", "Alice")


class TestInvariants:

    @pytest.mark.asyncio
    async def test_connection_in_at_most_one_room(self, hub):
        hub.presence.connect("X")
        for room in ["g1", "g2", "g3", "g2", "g1"]:
            await hub.join("X", room, "Alice")
            memberships = [
                room_id
                for room_id in hub.directory.room_ids()
                if any(p.connection_id == "X" for p in hub.presence.participants(room_id))
            ]
            assert memberships == [room]

    @pytest.mark.asyncio
    async def test_roster_matches_join_leave_history(self, hub):
        for cid, name in [("A", "Ann"), ("B", "Ben"), ("C", "Cy"), ("D", "Di")]:
            await connect_and_join(hub, cid, "g1", name)
        await hub.presence.leave("B", "g1")
        await hub.presence.disconnect("D")
        await hub.join("B", "g1", "Ben")

        assert [p.connection_id for p in hub.presence.participants("g1")] == ["A", "C", "B"]

    @pytest.mark.asyncio
    async def test_concurrent_joins_from_one_connection(self, hub):
        """Racing joins to different rooms must not leave a ghost membership."""
        hub.presence.connect("X")

        await asyncio.gather(
            hub.join("X", "g1", "Alice"),
            hub.join("X", "g2", "Alice"),
            hub.join("X", "g3", "Alice"),
        )

        rooms_with_x = [
            room_id
            for room_id in hub.directory.room_ids()
            if any(p.connection_id == "X" for p in hub.presence.participants(room_id))
        ]
        assert rooms_with_x == [hub.registry.get("X").current_room_id]

    @pytest.mark.asyncio
    async def test_hubs_are_independent(self, make_hub):
        first = make_hub()
        second = make_hub()
        await connect_and_join(first, "X", "g1", "Alice")

        assert second.presence.participants("g1") == []
        assert "X" not in second.registry


class TestJoinPolicy:

    @pytest.mark.asyncio
    async def test_full_room_rejects_join(self, make_hub, emitter):
        hub = make_hub(emitter=emitter, join_policy=CapacityJoinPolicy(default_capacity=2))
        await connect_and_join(hub, "X", "g1", "Alice")
        await connect_and_join(hub, "Y", "g1", "Bob")
        emitter.clear()

        hub.presence.connect("Z")
        with pytest.raises(RoomFull):
            await hub.join("Z", "g1", "Cara")

        assert [p.connection_id for p in hub.presence.participants("g1")] == ["X", "Y"]
        assert emitter.sent == []
        assert hub.registry.get("Z").current_room_id is None

    @pytest.mark.asyncio
    async def test_rejected_switch_keeps_current_room(self, make_hub):
        hub = make_hub(join_policy=CapacityJoinPolicy(capacities={"g2": 1}))
        await connect_and_join(hub, "X", "g1", "Alice")
        await connect_and_join(hub, "Y", "g2", "Bob")

        with pytest.raises(JoinRejected):
            await hub.join("X", "g2", "Alice")

        assert hub.presence.room_of("X") == "g1"
        assert [p.connection_id for p in hub.presence.participants("g1")] == ["X"]

    @pytest.mark.asyncio
    async def test_rejoin_of_full_room_by_member_is_allowed(self, make_hub):
        hub = make_hub(join_policy=CapacityJoinPolicy(default_capacity=1))
        await connect_and_join(hub, "X", "g1", "Alice")

        await hub.join("X", "g1", "Alice")

        assert hub.presence.room_of("X") == "g1"

    @pytest.mark.asyncio
    async def test_coordinator_itself_enforces_no_capacity(self, hub):
        for index in range(25):
            await connect_and_join(hub, f"c{index}", "g1", f"user{index}")

        assert len(hub.presence.participants("g1")) == 25


class TestConnectionLocks:

    @pytest.mark.asyncio
    async def test_late_events_after_disconnect_leave_no_locks(self, hub):
        await connect_and_join(hub, "X", "g1", "Alice")
        await hub.presence.disconnect("X")

        assert await hub.presence.leave("X") is False
        for index in range(3):
            with pytest.raises(UnknownConnection):
                await hub.join(f"late{index}", "g1", "Ghost")

        assert len(hub.presence._connection_locks) == 0

    @pytest.mark.asyncio
    async def test_join_racing_disconnect_leaves_no_locks(self, hub):
        await connect_and_join(hub, "X", "g1", "Alice")

        results = await asyncio.gather(
            hub.presence.disconnect("X"),
            hub.join("X", "g2", "Alice"),
            return_exceptions=True,
        )

        assert not any(
            isinstance(r, Exception) and not isinstance(r, UnknownConnection) for r in results
        )
        assert "X" not in hub.registry
        assert len(hub.presence._connection_locks) == 0
