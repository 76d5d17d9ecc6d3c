"""
Cross-tournament player reports.

Player statistics are keyed by roster entry (player_id), so a player enrolled
in several tournaments is reported once. Byes never count. Per-match
accumulation is shared with the standings tables.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from tournament_engine.models.match import Match, MatchStage
from tournament_engine.models.participant import Participant
from tournament_engine.models.tournament import Tournament, TournamentFormat, TournamentPhase
from tournament_engine.repository import TournamentRepository
from tournament_engine.services.standings import StandingRow, accumulate_match, compute_standings

logger = logging.getLogger(__name__)

DEFAULT_RANKING_LIMIT = 50
TOP_PERFORMERS_LIMIT = 5
MIN_MATCHES_FOR_WIN_RATE = 5

ACTIVE_PHASES = (TournamentPhase.group_stage.value, TournamentPhase.knockout.value)


def win_rate(won: int, played: int) -> float:
    """Percentage 0-100, two decimals; 0 when nothing was played."""
    if played == 0:
        return 0.0
    return round(won / played * 100, 2)


@dataclass
class PlayerStats:
    player_id: int
    player_name: str
    tournament_ids: Set[int] = field(default_factory=set)
    tournaments_won: int = 0
    matches_played: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    games_won: int = 0
    games_lost: int = 0

    @property
    def tournaments_played(self) -> int:
        return len(self.tournament_ids)

    @property
    def win_rate(self) -> float:
        return win_rate(self.matches_won, self.matches_played)

    def add_row(self, row: StandingRow) -> None:
        self.matches_played += row.played
        self.matches_won += row.won
        self.matches_lost += row.lost
        self.sets_won += row.sets_won
        self.sets_lost += row.sets_lost
        self.games_won += row.games_won
        self.games_lost += row.games_lost

    def to_dict(self) -> Dict:
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "tournaments_played": self.tournaments_played,
            "tournaments_won": self.tournaments_won,
            "matches_played": self.matches_played,
            "matches_won": self.matches_won,
            "matches_lost": self.matches_lost,
            "sets_won": self.sets_won,
            "sets_lost": self.sets_lost,
            "games_won": self.games_won,
            "games_lost": self.games_lost,
            "win_rate": self.win_rate,
        }


def tournament_champion(
    tournament: Tournament, participants: Sequence[Participant], matches: Sequence[Match]
) -> Optional[int]:
    """
    Participant id of the champion of a completed tournament, else None.

    Knockout formats: winner of the final (highest knockout round).
    Championships: rank 1 of the league table.
    """
    if tournament.phase != TournamentPhase.completed.value:
        return None

    knockout = [m for m in matches if m.stage == MatchStage.knockout.value]
    if knockout:
        final = max(knockout, key=lambda m: (m.round_order, m.match_number))
        return final.winner_participant_id if final.is_finished else None

    if tournament.format == TournamentFormat.round_robin.value:
        league = [m for m in matches if m.stage == MatchStage.league.value]
        table = compute_standings(participants, league)
        return table[0].participant_id if table else None

    return None


def _by_tournament(rows: Sequence, attr: str = "tournament_id") -> Dict[int, List]:
    grouped: Dict[int, List] = {}
    for row in rows:
        grouped.setdefault(getattr(row, attr), []).append(row)
    return grouped


def build_player_report(repo: TournamentRepository, limit: int = DEFAULT_RANKING_LIMIT) -> Dict:
    """
    GetPlayerReport: overview, player rankings, per-tournament stats and top performers.
    """
    tournaments = repo.list_tournaments()
    participants = repo.all_participants()
    matches = [m for m in repo.all_matches() if not m.is_bye]

    participants_by_tournament = _by_tournament(participants)
    matches_by_tournament = _by_tournament(matches)

    rows: Dict[int, StandingRow] = {p.id: StandingRow.for_participant(p) for p in participants}
    for match in matches:
        accumulate_match(rows, match)

    players: Dict[int, PlayerStats] = {}
    for participant in participants:
        stats = players.get(participant.player_id)
        if stats is None:
            stats = players[participant.player_id] = PlayerStats(
                player_id=participant.player_id, player_name=participant.player_name
            )
        stats.tournament_ids.add(participant.tournament_id)
        stats.add_row(rows[participant.id])

    participant_player = {p.id: p.player_id for p in participants}
    tournament_stats: List[Dict] = []
    for tournament in tournaments:
        t_participants = participants_by_tournament.get(tournament.id, [])
        t_matches = matches_by_tournament.get(tournament.id, [])
        champion_id = tournament_champion(tournament, t_participants, t_matches)
        champion_name: Optional[str] = None
        if champion_id is not None and champion_id in participant_player:
            champion = players[participant_player[champion_id]]
            champion.tournaments_won += 1
            champion_name = champion.player_name

        finished = sum(1 for m in t_matches if m.is_finished)
        tournament_stats.append(
            {
                "tournament_id": tournament.id,
                "name": tournament.name,
                "format": tournament.format,
                "phase": tournament.phase,
                "participants": len(t_participants),
                "matches_total": len(t_matches),
                "matches_completed": finished,
                "completion_rate": win_rate(finished, len(t_matches)),
                "champion": champion_name,
            }
        )

    active = [p for p in players.values() if p.matches_played > 0]
    rankings = sorted(
        active,
        key=lambda p: (-p.tournaments_won, -p.win_rate, -p.matches_won, p.player_name, p.player_id),
    )[:limit]

    active_tournament_ids = {t.id for t in tournaments if t.phase in ACTIVE_PHASES}
    active_players = {p.player_id for p in participants if p.tournament_id in active_tournament_ids}

    overview = {
        "total_tournaments": len(tournaments),
        "active_tournaments": len(active_tournament_ids),
        "completed_tournaments": sum(1 for t in tournaments if t.phase == TournamentPhase.completed.value),
        "total_players": len(players),
        "active_players": len(active_players),
        "total_matches": len(matches),
        "completed_matches": sum(1 for m in matches if m.is_finished),
        "total_sets": sum(len(m.sets_json or []) for m in matches),
    }

    top_performers = {
        "most_tournaments_won": [
            p.to_dict()
            for p in sorted(
                (p for p in active if p.tournaments_won > 0),
                key=lambda p: (-p.tournaments_won, -p.win_rate, p.player_id),
            )[:TOP_PERFORMERS_LIMIT]
        ],
        "highest_win_rate": [
            p.to_dict()
            for p in sorted(
                (p for p in active if p.matches_played >= MIN_MATCHES_FOR_WIN_RATE),
                key=lambda p: (-p.win_rate, -p.matches_played, p.player_id),
            )[:TOP_PERFORMERS_LIMIT]
        ],
        "most_matches_played": [
            p.to_dict()
            for p in sorted(active, key=lambda p: (-p.matches_played, -p.matches_won, p.player_id))[
                :TOP_PERFORMERS_LIMIT
            ]
        ],
    }

    logger.info("Player report built: %s players ranked of %s", len(rankings), len(players))
    return {
        "overview": overview,
        "player_rankings": [dict(p.to_dict(), rank=rank) for rank, p in enumerate(rankings, start=1)],
        "tournament_stats": tournament_stats,
        "top_performers": top_performers,
    }


def build_tournament_summary(repo: TournamentRepository) -> Dict:
    """Totals by phase and by format for GET /tournaments/stats."""
    tournaments = repo.list_tournaments()
    by_phase = {phase.value: 0 for phase in TournamentPhase}
    by_format = {fmt.value: 0 for fmt in TournamentFormat}
    for tournament in tournaments:
        by_phase[tournament.phase] = by_phase.get(tournament.phase, 0) + 1
        by_format[tournament.format] = by_format.get(tournament.format, 0) + 1
    return {"total": len(tournaments), "by_phase": by_phase, "by_format": by_format}
