# Area: Bridge (Transport to Session Integration)
"""Tests for parse_event normalization."""
from matchsession.bridge.event_parser import InboundEvent, parse_event


class TestSessionStamping:
    def test_live_session_used_when_not_echoed(self):
        assert parse_event("room-joined", {}, live_session_id=4).session_id == 4

    def test_echoed_session_id_preferred(self):
        event = parse_event("room-joined", {"sessionId": "7"}, live_session_id=4)
        assert event.session_id == 7

    def test_garbage_session_id_falls_back(self):
        assert parse_event("room-joined", {"sessionId": "x"}, 4).session_id == 4
        assert parse_event("room-joined", {"sessionId": True}, 4).session_id == 4

    def test_no_live_session(self):
        assert parse_event("room-joined", {}).session_id is None


class TestPayloadFields:
    def test_non_dict_payload_becomes_empty(self):
        event = parse_event("player-ready", ["not", "a", "dict"], 1)
        assert event.payload == {}
        assert event.connection_id is None

    def test_connection_id_from_legacy_keys(self):
        assert parse_event("player-ready", {"id": "B"}).connection_id == "B"
        assert parse_event("player-ready", {"playerId": "C"}).connection_id == "C"

    def test_all_ready_requires_true(self):
        assert parse_event("player-ready", {"allReady": True}).all_ready is True
        assert parse_event("player-ready", {"allPlayersReady": True}).all_ready is True
        assert parse_event("player-ready", {"allReady": "yes"}).all_ready is False

    def test_error_fields(self):
        event = parse_event("error", {"type": "MATCH", "message": "Player already in a room"})
        assert event.error_type == "MATCH"
        assert event.is_room_conflict is True

    def test_other_error_is_not_conflict(self):
        event = parse_event("error", {"message": "Room is full"})
        assert event.is_room_conflict is False
        assert InboundEvent(name="error", payload={}, session_id=None).is_room_conflict is False
