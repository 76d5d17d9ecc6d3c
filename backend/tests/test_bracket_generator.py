"""
Tests for single-elimination planning: bracket-fold placement, byes on top seeds, round labels.
"""
import pytest

from tournament_engine.errors import InsufficientParticipantsError
from tournament_engine.services.bracket_generator import (
    SeededEntry,
    bracket_fold_positions,
    build_bracket,
    next_power_of_two,
    round_label,
)


def _entries(n: int):
    """Helper: n entries with seeds 1..n, participant ids 100+seed."""
    return [SeededEntry(seed=s, participant_id=100 + s, display_name=f"Player {s}") for s in range(1, n + 1)]


def _seeds(match):
    a = match.entry_a.seed if match.entry_a else None
    b = match.entry_b.seed if match.entry_b else None
    return (a, b)


class TestBracketFoldPositions:
    """Verify the bracket fold ordering function."""

    def test_2_entries(self):
        assert bracket_fold_positions(2) == [1, 2]

    def test_4_entries(self):
        assert bracket_fold_positions(4) == [1, 4, 2, 3]

    def test_8_entries(self):
        assert bracket_fold_positions(8) == [1, 8, 4, 5, 3, 6, 2, 7]

    def test_16_entries(self):
        expected = [1, 16, 8, 9, 4, 13, 5, 12, 3, 14, 6, 11, 7, 10, 2, 15]
        assert bracket_fold_positions(16) == expected

    def test_top_seeds_in_opposite_halves(self):
        for n in (4, 8, 16, 32):
            positions = bracket_fold_positions(n)
            half = n // 2
            assert 1 in positions[:half]
            assert 2 in positions[half:]

    def test_pairs_sum_to_n_plus_one(self):
        positions = bracket_fold_positions(32)
        for i in range(0, 32, 2):
            assert positions[i] + positions[i + 1] == 33


class TestHelpers:
    def test_next_power_of_two(self):
        assert [next_power_of_two(n) for n in (2, 3, 5, 8, 9, 17)] == [2, 4, 8, 8, 16, 32]

    def test_round_labels(self):
        assert round_label(1, 5) == "Finale"
        assert round_label(2, 4) == "Semifinale"
        assert round_label(4, 3) == "Quarti di finale"
        assert round_label(8, 2) == "Ottavi di finale"
        assert round_label(16, 1) == "Round 1"


class TestBuildBracket:
    def test_eight_entries(self):
        plan = build_bracket(_entries(8))
        assert plan.bracket_size == 8
        assert plan.round_count == 3
        assert len(plan.matches) == 7
        assert plan.bye_count == 0
        assert [_seeds(m) for m in plan.round_matches(1)] == [(1, 8), (4, 5), (3, 6), (2, 7)]
        assert {m.round_label for m in plan.round_matches(1)} == {"Quarti di finale"}
        assert {m.round_label for m in plan.round_matches(2)} == {"Semifinale"}
        assert [m.round_label for m in plan.round_matches(3)] == ["Finale"]

    def test_match_numbers_sequential(self):
        plan = build_bracket(_entries(16))
        assert [m.match_number for m in plan.matches] == list(range(1, 16))

    def test_later_rounds_link_to_feeders(self):
        plan = build_bracket(_entries(8))
        semis = plan.round_matches(2)
        assert (semis[0].source_a, semis[0].source_b) == (1, 2)
        assert (semis[1].source_a, semis[1].source_b) == (3, 4)
        assert semis[0].placeholder_a == "Winner of M1"
        assert semis[0].placeholder_b == "Winner of M2"
        final = plan.round_matches(3)[0]
        assert (final.source_a, final.source_b) == (5, 6)
        assert final.entry_a is None and final.entry_b is None

    def test_two_entries_is_just_a_final(self):
        plan = build_bracket(_entries(2))
        assert len(plan.matches) == 1
        assert plan.matches[0].round_label == "Finale"
        assert _seeds(plan.matches[0]) == (1, 2)

    def test_byes_go_to_top_seeds(self):
        plan = build_bracket(_entries(5))
        assert plan.bracket_size == 8
        assert plan.bye_count == 3
        assert len(plan.matches) == 7
        byes = [m for m in plan.matches if m.is_bye]
        assert sorted(m.entry_a.seed for m in byes) == [1, 2, 3]
        for m in byes:
            assert m.entry_b is None
            assert m.placeholder_b == "BYE"
            assert m.winner is m.entry_a

    def test_bye_winners_prefilled_in_round_two(self):
        plan = build_bracket(_entries(5))
        semis = plan.round_matches(2)
        # (1 v BYE) + (4 v 5) -> seed 1 waits for the winner of M2
        assert semis[0].entry_a.seed == 1
        assert semis[0].entry_b is None
        assert semis[0].placeholder_b == "Winner of M2"
        # (3 v BYE) + (2 v BYE) -> both slots known
        assert _seeds(semis[1]) == (3, 2)
        assert semis[1].placeholder_a == "Player 3"

    def test_byes_never_meet(self):
        for n in range(2, 33):
            plan = build_bracket(_entries(n))
            assert len(plan.matches) == plan.bracket_size - 1
            for m in plan.round_matches(1):
                assert m.entry_a is not None

    def test_entries_ranked_by_seed(self):
        entries = [
            SeededEntry(seed=5, participant_id=3),
            SeededEntry(seed=1, participant_id=7),
            SeededEntry(seed=3, participant_id=9),
        ]
        plan = build_bracket(entries)
        first = plan.round_matches(1)
        assert first[0].entry_a.participant_id == 7
        assert first[0].is_bye
        assert (first[1].entry_a.participant_id, first[1].entry_b.participant_id) == (9, 3)

    def test_large_bracket_labels(self):
        plan = build_bracket(_entries(32))
        assert {m.round_label for m in plan.round_matches(1)} == {"Round 1"}
        assert {m.round_label for m in plan.round_matches(2)} == {"Ottavi di finale"}

    @pytest.mark.parametrize("n", [0, 1])
    def test_insufficient_participants(self, n):
        with pytest.raises(InsufficientParticipantsError):
            build_bracket(_entries(n))
