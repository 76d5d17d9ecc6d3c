"""
Tests for tennis set validation and best-of-N winner determination.
"""
import pytest

from tournament_engine.errors import InvalidScoreError, NoWinnerInTennisError
from tournament_engine.services.tennis_scoring import (
    SIDE_A,
    SIDE_B,
    SetScore,
    build_sets,
    determine_winner,
    evaluate_sets,
    sets_to_win,
)


def _sets(*scores):
    """_sets((6, 4), (7, 6, 7, 5)) -> numbered SetScore list"""
    result = []
    for number, score in enumerate(scores, start=1):
        if len(score) == 4:
            result.append(SetScore(number, score[0], score[1], score[2], score[3]))
        else:
            result.append(SetScore(number, score[0], score[1]))
    return result


class TestSetValidation:
    @pytest.mark.parametrize("games", [(6, 0), (6, 4), (4, 6), (7, 5), (5, 7)])
    def test_regular_sets_accepted(self, games):
        score = SetScore(1, *games)
        assert score.winner_side == (SIDE_A if games[0] > games[1] else SIDE_B)
        assert not score.has_tiebreak

    def test_tiebreak_set_accepted(self):
        score = SetScore(1, 7, 6, 7, 5)
        assert score.winner_side == SIDE_A
        assert score.display() == "7-6(7-5)"

    def test_tiebreak_set_won_by_side_b(self):
        score = SetScore(2, 6, 7, 8, 10)
        assert score.winner_side == SIDE_B

    def test_7_6_without_tiebreak_rejected(self):
        with pytest.raises(InvalidScoreError, match="requires a tiebreak"):
            SetScore(1, 7, 6)

    def test_tiebreak_on_regular_set_rejected(self):
        with pytest.raises(InvalidScoreError, match="only allowed on a 7-6"):
            SetScore(1, 6, 4, 7, 5)

    def test_tiebreak_won_by_set_loser_rejected(self):
        with pytest.raises(InvalidScoreError, match="won by the set winner"):
            SetScore(1, 7, 6, 5, 7)

    @pytest.mark.parametrize("tiebreak", [(7, 6), (6, 4), (12, 11)])
    def test_short_or_narrow_tiebreak_rejected(self, tiebreak):
        with pytest.raises(InvalidScoreError):
            SetScore(1, 7, 6, *tiebreak)

    def test_half_tiebreak_rejected(self):
        with pytest.raises(InvalidScoreError, match="both sides"):
            SetScore(1, 7, 6, 7, None)

    @pytest.mark.parametrize("games", [(6, 5), (6, 6), (8, 6), (7, 4), (5, 3), (0, 0), (10, 8)])
    def test_unfinished_or_impossible_sets_rejected(self, games):
        with pytest.raises(InvalidScoreError):
            SetScore(1, *games)

    def test_negative_games_rejected(self):
        with pytest.raises(InvalidScoreError, match="negative"):
            SetScore(1, -1, 6)

    def test_set_number_starts_at_one(self):
        with pytest.raises(InvalidScoreError):
            SetScore(0, 6, 4)

    def test_to_dict_and_back(self):
        score = SetScore(3, 6, 7, 4, 7)
        assert score.to_dict() == {
            "set_number": 3,
            "games_a": 6,
            "games_b": 7,
            "tiebreak_a": 4,
            "tiebreak_b": 7,
        }
        assert SetScore.from_dict(score.to_dict()) == score
        assert "tiebreak_a" not in SetScore(1, 6, 2).to_dict()


class TestSetsToWin:
    def test_thresholds(self):
        assert sets_to_win("best_of_1") == 1
        assert sets_to_win("best_of_3") == 2
        assert sets_to_win("best_of_5") == 3

    def test_unknown_format(self):
        with pytest.raises(InvalidScoreError):
            sets_to_win("best_of_7")


class TestMatchOutcome:
    def test_straight_sets_best_of_3(self):
        outcome = evaluate_sets("best_of_3", _sets((6, 4), (6, 3)))
        assert outcome.is_decided
        assert outcome.winner_side == SIDE_A
        assert (outcome.sets_won_a, outcome.sets_won_b) == (2, 0)

    def test_three_sets_best_of_3(self):
        assert determine_winner("best_of_3", _sets((6, 4), (3, 6), (6, 7, 5, 7))) == SIDE_B

    def test_best_of_1(self):
        assert determine_winner("best_of_1", _sets((7, 5))) == SIDE_A

    def test_best_of_5_needs_three_sets(self):
        outcome = evaluate_sets("best_of_5", _sets((6, 4), (6, 4)))
        assert not outcome.is_decided
        assert determine_winner("best_of_5", _sets((6, 4), (6, 4), (4, 6), (6, 0))) == SIDE_A

    def test_set_after_decision_rejected(self):
        with pytest.raises(InvalidScoreError, match="after the match was decided"):
            evaluate_sets("best_of_3", _sets((6, 4), (6, 3), (6, 1)))

    def test_undecided_match_has_no_winner(self):
        with pytest.raises(NoWinnerInTennisError):
            determine_winner("best_of_3", _sets((6, 4)))

    def test_no_sets_has_no_winner(self):
        with pytest.raises(NoWinnerInTennisError):
            determine_winner("best_of_3", [])

    def test_sets_out_of_sequence_rejected(self):
        sets = [SetScore(1, 6, 4), SetScore(3, 6, 4)]
        with pytest.raises(InvalidScoreError, match="numbered"):
            evaluate_sets("best_of_3", sets)

    def test_build_sets_validates_each_set(self):
        with pytest.raises(InvalidScoreError):
            build_sets([{"set_number": 1, "games_a": 6, "games_b": 4}, {"set_number": 2, "games_a": 7, "games_b": 6}])
