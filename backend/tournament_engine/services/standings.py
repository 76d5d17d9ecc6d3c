"""
Standings tables for groups and championships.

Rows are rebuilt from finished matches on every read; nothing is cached.
Order: matches won desc, then among participants level on wins:
  1. head-to-head, only when exactly two are level and they met
  2. set difference desc
  3. game difference desc
  4. participant id asc (keeps the order total)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from tournament_engine.models.match import Match
from tournament_engine.models.participant import Participant
from tournament_engine.services.score_parser import parse_score


@dataclass
class StandingRow:
    participant_id: int
    player_id: Optional[int] = None
    player_name: str = ""
    group_id: Optional[int] = None
    played: int = 0
    won: int = 0
    lost: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    games_won: int = 0
    games_lost: int = 0
    rank: int = 0

    @property
    def set_diff(self) -> int:
        return self.sets_won - self.sets_lost

    @property
    def game_diff(self) -> int:
        return self.games_won - self.games_lost

    @classmethod
    def for_participant(cls, participant: Participant) -> "StandingRow":
        return cls(
            participant_id=participant.id,
            player_id=participant.player_id,
            player_name=participant.player_name,
            group_id=participant.group_id,
        )

    def to_dict(self) -> Dict:
        return {
            "rank": self.rank,
            "participant_id": self.participant_id,
            "player_id": self.player_id,
            "player_name": self.player_name,
            "group_id": self.group_id,
            "played": self.played,
            "won": self.won,
            "lost": self.lost,
            "sets_won": self.sets_won,
            "sets_lost": self.sets_lost,
            "set_diff": self.set_diff,
            "games_won": self.games_won,
            "games_lost": self.games_lost,
            "game_diff": self.game_diff,
        }


def counts_for_standings(match: Match) -> bool:
    """Finished, non-bye matches with a winner are the only ones that count."""
    return not match.is_bye and match.is_finished and match.winner_participant_id is not None


def accumulate_match(rows: Dict[int, StandingRow], match: Match) -> bool:
    """
    Add one match to the rows it involves (keyed by participant id).

    Walkovers count as a win and a loss but carry no sets or games.
    Participants without a row are ignored. Returns True if the match counted.
    """
    if not counts_for_standings(match):
        return False

    side_a = match.participant_a_id
    side_b = match.participant_b_id
    winner = match.winner_participant_id
    parsed = parse_score(match.sets_json)

    for participant_id, is_side_a in ((side_a, True), (side_b, False)):
        row = rows.get(participant_id) if participant_id is not None else None
        if row is None:
            continue
        row.played += 1
        if participant_id == winner:
            row.won += 1
        else:
            row.lost += 1
        if parsed is None:
            continue
        if is_side_a:
            row.sets_won += parsed.side_a_sets_won
            row.sets_lost += parsed.side_b_sets_won
            row.games_won += parsed.side_a_games
            row.games_lost += parsed.side_b_games
        else:
            row.sets_won += parsed.side_b_sets_won
            row.sets_lost += parsed.side_a_sets_won
            row.games_won += parsed.side_b_games
            row.games_lost += parsed.side_a_games

    return True


def _head_to_head(matches: Iterable[Match]) -> Dict[Tuple[int, int], int]:
    """(winner_id, loser_id) -> number of wins"""
    h2h: Dict[Tuple[int, int], int] = {}
    for match in matches:
        if not counts_for_standings(match):
            continue
        winner = match.winner_participant_id
        loser = match.participant_b_id if winner == match.participant_a_id else match.participant_a_id
        if loser is None:
            continue
        h2h[(winner, loser)] = h2h.get((winner, loser), 0) + 1
    return h2h


def _difference_key(row: StandingRow) -> Tuple[int, int, int]:
    return (-row.set_diff, -row.game_diff, row.participant_id)


def _order_tied(tied: List[StandingRow], h2h: Dict[Tuple[int, int], int]) -> List[StandingRow]:
    if len(tied) == 2:
        first, second = tied
        first_wins = h2h.get((first.participant_id, second.participant_id), 0)
        second_wins = h2h.get((second.participant_id, first.participant_id), 0)
        if first_wins != second_wins:
            return [first, second] if first_wins > second_wins else [second, first]
    return sorted(tied, key=_difference_key)


def rank_rows(rows: Sequence[StandingRow], matches: Sequence[Match]) -> List[StandingRow]:
    """Sort rows with the tiebreak chain and write rank 1..n."""
    h2h = _head_to_head(matches)

    by_wins: Dict[int, List[StandingRow]] = {}
    for row in rows:
        by_wins.setdefault(row.won, []).append(row)

    ordered: List[StandingRow] = []
    for wins in sorted(by_wins, reverse=True):
        tied = sorted(by_wins[wins], key=lambda r: r.participant_id)
        ordered.extend(_order_tied(tied, h2h))

    for rank, row in enumerate(ordered, start=1):
        row.rank = rank
    return ordered


def compute_standings(participants: Sequence[Participant], matches: Sequence[Match]) -> List[StandingRow]:
    """
    Build the ranked table for *participants* from *matches*.

    Every participant gets a row, including those who have not played yet.
    Matches involving anyone outside *participants* only count for the side
    that is inside.
    """
    rows: Dict[int, StandingRow] = {p.id: StandingRow.for_participant(p) for p in participants}
    scoped = [m for m in matches if m.participant_a_id in rows and m.participant_b_id in rows]
    for match in matches:
        accumulate_match(rows, match)
    return rank_rows(list(rows.values()), scoped)
