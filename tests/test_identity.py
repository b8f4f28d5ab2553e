# Area: Room State
"""Tests for IdentityResolver and its ranked strategies."""
from matchsession.room.identity import (
    ExactMatchStrategy,
    IdentityResolver,
    JoinOrderStrategy,
    Position,
)
from matchsession.room.models import ParticipantRef, RoomSnapshot


def _snapshot(*ids, count=None):
    participants = tuple(ParticipantRef(i) for i in ids)
    return RoomSnapshot(
        participants=participants,
        room_id="R1",
        participant_count=len(participants) if count is None else count,
    )


class TestExactMatchStrategy:
    def test_first_slot_is_player1(self):
        assert ExactMatchStrategy().resolve(_snapshot("A", "B"), "A") is Position.PLAYER1

    def test_second_slot_is_player2(self):
        assert ExactMatchStrategy().resolve(_snapshot("A", "B"), "B") is Position.PLAYER2

    def test_absent_id_gives_no_answer(self):
        assert ExactMatchStrategy().resolve(_snapshot("A", "B"), "C") is None

    def test_missing_local_id_gives_no_answer(self):
        assert ExactMatchStrategy().resolve(_snapshot("A"), None) is None


class TestJoinOrderStrategy:
    def test_alone_is_player1(self):
        assert JoinOrderStrategy().resolve(_snapshot(count=1), "X") is Position.PLAYER1

    def test_not_alone_is_player2(self):
        assert JoinOrderStrategy().resolve(_snapshot(count=2), "X") is Position.PLAYER2


class TestIdentityResolver:
    def test_scenario_a_single_participant(self):
        assert IdentityResolver().resolve(_snapshot("A"), "A") is Position.PLAYER1

    def test_scenario_b_second_participant(self):
        assert IdentityResolver().resolve(_snapshot("A", "B"), "B") is Position.PLAYER2

    def test_exact_match_beats_join_order(self):
        # Two players but we are listed first
        assert IdentityResolver().resolve(_snapshot("A", "B"), "A") is Position.PLAYER1

    def test_falls_back_to_join_order(self):
        assert IdentityResolver().resolve(_snapshot("X", "Y"), "A") is Position.PLAYER2

    def test_fallback_when_list_missing(self):
        assert IdentityResolver().resolve(_snapshot(count=1), "A") is Position.PLAYER1

    def test_previous_position_is_kept(self):
        # Snapshot would say PLAYER2 but PLAYER1 was already resolved
        resolved = IdentityResolver().resolve(
            _snapshot("B", "A"), "A", previous_position=Position.PLAYER1
        )
        assert resolved is Position.PLAYER1

    def test_unassigned_previous_does_not_block(self):
        resolved = IdentityResolver().resolve(
            _snapshot("B", "A"), "A", previous_position=Position.UNASSIGNED
        )
        assert resolved is Position.PLAYER2

    def test_no_snapshot_is_unassigned(self):
        assert IdentityResolver().resolve(None, "A") is Position.UNASSIGNED

    def test_custom_strategy_list(self):
        resolver = IdentityResolver(strategies=[ExactMatchStrategy()])
        assert resolver.resolve(_snapshot("X"), "A") is Position.UNASSIGNED
