"""
Tennis scoring rules: set validation and match winner determination.

A set is valid only as:
  6-0 .. 6-4      (6 games with a 2-game lead)
  7-5
  7-6 + tiebreak  (tiebreak winner = set winner, >= 7 points, >= 2-point lead)

A tiebreak sub-score is required if and only if the set is exactly 7-6.
Sets are validated when a SetScore is constructed; match-level rules
(best-of-N threshold, no sets after the winner is decided) in evaluate_sets().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from tournament_engine.errors import InvalidScoreError, NoWinnerInTennisError
from tournament_engine.models.tournament import MatchFormat

SIDE_A = "A"
SIDE_B = "B"

# ceil((N + 1) / 2) sets needed to win a best-of-N match
SETS_TO_WIN: Dict[str, int] = {
    MatchFormat.best_of_1.value: 1,
    MatchFormat.best_of_3.value: 2,
    MatchFormat.best_of_5.value: 3,
}

TIEBREAK_MIN_POINTS = 7
TIEBREAK_MIN_LEAD = 2


def sets_to_win(match_format: str) -> int:
    try:
        return SETS_TO_WIN[match_format]
    except KeyError:
        raise InvalidScoreError(f"Unknown match format '{match_format}'") from None


@dataclass(frozen=True)
class SetScore:
    set_number: int
    games_a: int
    games_b: int
    tiebreak_a: Optional[int] = None
    tiebreak_b: Optional[int] = None

    def __post_init__(self):
        _validate_set(self)

    @property
    def winner_side(self) -> str:
        return SIDE_A if self.games_a > self.games_b else SIDE_B

    @property
    def has_tiebreak(self) -> bool:
        return self.tiebreak_a is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "set_number": self.set_number,
            "games_a": self.games_a,
            "games_b": self.games_b,
        }
        if self.has_tiebreak:
            data["tiebreak_a"] = self.tiebreak_a
            data["tiebreak_b"] = self.tiebreak_b
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SetScore":
        return cls(
            set_number=data["set_number"],
            games_a=data["games_a"],
            games_b=data["games_b"],
            tiebreak_a=data.get("tiebreak_a"),
            tiebreak_b=data.get("tiebreak_b"),
        )

    def display(self) -> str:
        text = f"{self.games_a}-{self.games_b}"
        if self.has_tiebreak:
            text += f"({self.tiebreak_a}-{self.tiebreak_b})"
        return text


def _validate_set(score: SetScore) -> None:
    label = f"Set {score.set_number} ({score.games_a}-{score.games_b})"

    if score.set_number < 1:
        raise InvalidScoreError(f"Set numbers start at 1, got {score.set_number}")
    if score.games_a < 0 or score.games_b < 0:
        raise InvalidScoreError(f"{label}: games cannot be negative")
    if score.games_a == score.games_b:
        raise InvalidScoreError(f"{label}: a set cannot end level")

    high = max(score.games_a, score.games_b)
    low = min(score.games_a, score.games_b)

    if high == 6 and low <= 4:
        pass
    elif high == 7 and low in (5, 6):
        pass
    elif high >= 6 and high - low < 2:
        raise InvalidScoreError(f"{label}: a set must be won by 2 games or by tiebreak at 7-6")
    else:
        raise InvalidScoreError(f"{label}: not a finished tennis set")

    is_tiebreak_set = high == 7 and low == 6
    if (score.tiebreak_a is None) != (score.tiebreak_b is None):
        raise InvalidScoreError(f"{label}: tiebreak needs points for both sides")

    if not is_tiebreak_set:
        if score.tiebreak_a is not None:
            raise InvalidScoreError(f"{label}: tiebreak score only allowed on a 7-6 set")
        return

    if score.tiebreak_a is None:
        raise InvalidScoreError(f"{label}: a 7-6 set requires a tiebreak score")

    tb_high = max(score.tiebreak_a, score.tiebreak_b)
    tb_low = min(score.tiebreak_a, score.tiebreak_b)
    if tb_low < 0:
        raise InvalidScoreError(f"{label}: tiebreak points cannot be negative")
    tiebreak_side = SIDE_A if score.tiebreak_a > score.tiebreak_b else SIDE_B
    if score.tiebreak_a == score.tiebreak_b or tiebreak_side != score.winner_side:
        raise InvalidScoreError(f"{label}: tiebreak must be won by the set winner")
    if tb_high < TIEBREAK_MIN_POINTS or tb_high - tb_low < TIEBREAK_MIN_LEAD:
        raise InvalidScoreError(
            f"{label}: tiebreak {score.tiebreak_a}-{score.tiebreak_b} needs at least "
            f"{TIEBREAK_MIN_POINTS} points and a {TIEBREAK_MIN_LEAD}-point lead"
        )


@dataclass
class MatchOutcome:
    sets_won_a: int
    sets_won_b: int
    winner_side: Optional[str]  # None while the match is undecided

    @property
    def is_decided(self) -> bool:
        return self.winner_side is not None


def evaluate_sets(match_format: str, sets: Sequence[SetScore]) -> MatchOutcome:
    """Count sets under best-of-N rules.

    Raises InvalidScoreError if set numbers are out of sequence or a set follows
    the one that decided the match. Returns an undecided outcome when the
    threshold has not been reached yet.
    """
    needed = sets_to_win(match_format)
    won_a = 0
    won_b = 0
    winner: Optional[str] = None

    for index, score in enumerate(sets, start=1):
        if score.set_number != index:
            raise InvalidScoreError(f"Sets must be numbered 1..n in order; expected set {index}, got {score.set_number}")
        if winner is not None:
            raise InvalidScoreError(
                f"Set {score.set_number} was played after the match was decided ({won_a}-{won_b} in sets)"
            )
        if score.winner_side == SIDE_A:
            won_a += 1
        else:
            won_b += 1
        if won_a == needed:
            winner = SIDE_A
        elif won_b == needed:
            winner = SIDE_B

    return MatchOutcome(sets_won_a=won_a, sets_won_b=won_b, winner_side=winner)


def determine_winner(match_format: str, sets: Sequence[SetScore]) -> str:
    """Return the winning side ("A" or "B"); fails if the sets do not decide the match."""
    outcome = evaluate_sets(match_format, sets)
    if not outcome.is_decided:
        raise NoWinnerInTennisError(
            f"Score {outcome.sets_won_a}-{outcome.sets_won_b} in sets does not decide a "
            f"{match_format} match ({sets_to_win(match_format)} sets needed)"
        )
    return outcome.winner_side


def build_sets(raw_sets: Sequence[Dict[str, Any]]) -> List[SetScore]:
    """Build validated SetScore objects from plain dicts (request payloads, stored JSON)."""
    return [SetScore.from_dict(raw) for raw in raw_sets]
