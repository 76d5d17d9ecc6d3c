"""
Tests for circle-method round robins and the snake group draw.
"""
from collections import Counter, defaultdict

import pytest

from tournament_engine.errors import InsufficientParticipantsError
from tournament_engine.services.round_robin import (
    build_round_robin,
    group_name,
    league_round_label,
    rr_match_count,
    rr_pairings_by_round,
    rr_round_count,
    snake_distribution,
)


class TestRoundRobinPairings:
    @pytest.mark.parametrize("n", [2, 3, 4, 5, 6, 7, 8, 11])
    def test_every_pair_meets_exactly_once(self, n):
        pairings = rr_pairings_by_round(n)
        pairs = Counter((a, b) for _, _, a, b in pairings)
        assert len(pairings) == rr_match_count(n) == n * (n - 1) // 2
        assert all(count == 1 for count in pairs.values())
        assert all(a < b for a, b in pairs)

    def test_six_participants(self):
        pairings = rr_pairings_by_round(6)
        assert len(pairings) == 15
        rounds = defaultdict(list)
        for round_num, _, a, b in pairings:
            rounds[round_num].append((a, b))
        assert sorted(rounds) == [1, 2, 3, 4, 5]
        for matches in rounds.values():
            assert len(matches) == 3
            played = [p for pair in matches for p in pair]
            assert len(set(played)) == 6

    def test_odd_count_sits_each_participant_out_once(self):
        n = 5
        pairings = rr_pairings_by_round(n)
        assert rr_round_count(n) == 5
        rounds = defaultdict(set)
        for round_num, _, a, b in pairings:
            rounds[round_num].update((a, b))
        assert len(rounds) == 5
        byes = Counter()
        for players in rounds.values():
            assert len(players) == 4
            for idx in set(range(n)) - players:
                byes[idx] += 1
        assert byes == Counter({i: 1 for i in range(n)})

    def test_sequence_numbers_restart_each_round(self):
        pairings = rr_pairings_by_round(4)
        assert [(r, s) for r, s, _, _ in pairings] == [(1, 1), (1, 2), (2, 1), (2, 2), (3, 1), (3, 2)]

    def test_round_counts(self):
        assert rr_round_count(4) == 3
        assert rr_round_count(7) == 7

    @pytest.mark.parametrize("n", [0, 1])
    def test_insufficient_participants(self, n):
        with pytest.raises(InsufficientParticipantsError):
            rr_pairings_by_round(n)

    def test_build_round_robin_maps_entries(self):
        schedule = build_round_robin(["a", "b", "c"])
        assert len(schedule) == 3
        assert {frozenset((x, y)) for _, _, x, y in schedule} == {
            frozenset("ab"),
            frozenset("ac"),
            frozenset("bc"),
        }

    def test_league_label(self):
        assert league_round_label(3) == "Giornata 3"


class TestSnakeDistribution:
    def test_three_groups(self):
        assert snake_distribution(list(range(1, 7)), 3) == [[1, 6], [2, 5], [3, 4]]

    def test_two_groups(self):
        assert snake_distribution(list(range(1, 9)), 2) == [[1, 4, 5, 8], [2, 3, 6, 7]]

    def test_uneven_sizes_differ_by_one(self):
        groups = snake_distribution(list(range(1, 11)), 4)
        sizes = sorted(len(g) for g in groups)
        assert sizes[-1] - sizes[0] <= 1
        assert sum(sizes) == 10

    def test_top_seeds_split(self):
        groups = snake_distribution(list(range(1, 17)), 4)
        assert [g[0] for g in groups] == [1, 2, 3, 4]

    def test_group_names(self):
        assert group_name(0) == "Girone A"
        assert group_name(3) == "Girone D"
        assert group_name(26) == "Girone AA"
