"""
ReportMatchResult: validate a tennis result, complete the match, and move the tournament along.

After a knockout result the winner is advanced downstream; the final
completes the tournament. After the last league result the championship is
completed. Everything is written in one commit.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from tournament_engine.errors import (
    InvalidScoreError,
    MatchAlreadyCompletedError,
    MatchNotReadyError,
    NoWinnerInTennisError,
)
from tournament_engine.models.match import Match, MatchStage, MatchStatus
from tournament_engine.repository import TournamentRepository
from tournament_engine.services.advancement_service import apply_advancement_for_final_match, complete_tournament
from tournament_engine.services.score_parser import parse_score_string
from tournament_engine.services.tennis_scoring import SIDE_A, build_sets, determine_winner

logger = logging.getLogger(__name__)


def _check_reportable(match: Match) -> None:
    if match.is_finished:
        raise MatchAlreadyCompletedError(f"Match {match.id} is already {match.status}")
    if match.participant_a_id is None or match.participant_b_id is None:
        raise MatchNotReadyError(
            f"Match {match.id} is waiting for {match.placeholder_side_a} vs {match.placeholder_side_b}"
        )


def _walkover_winner(match: Match, winner_id: Optional[int]) -> int:
    if winner_id is None:
        raise NoWinnerInTennisError(f"Match {match.id}: no sets reported and no walkover winner given")
    if winner_id not in (match.participant_a_id, match.participant_b_id):
        raise InvalidScoreError(f"Participant {winner_id} is not playing match {match.id}")
    return winner_id


def report_match_result(
    repo: TournamentRepository,
    match_id: int,
    sets: Optional[Sequence[Dict[str, Any]]] = None,
    winner_id: Optional[int] = None,
    score: Optional[str] = None,
) -> Dict:
    """
    Record a result for *match_id*.

    sets: structured set list; score: display string such as "6-4 7-6(7-5)",
    used only when sets is empty. With neither, winner_id records a walkover.
    A winner_id given alongside sets must agree with them.
    """
    match = repo.get_match(match_id)
    _check_reportable(match)
    tournament = repo.get_tournament(match.tournament_id)

    raw_sets: List[Dict[str, Any]] = list(sets or [])
    if not raw_sets and score:
        raw_sets = parse_score_string(score)

    if raw_sets:
        set_scores = build_sets(raw_sets)
        side = determine_winner(tournament.match_format, set_scores)
        decided_winner = match.participant_a_id if side == SIDE_A else match.participant_b_id
        if winner_id is not None and winner_id != decided_winner:
            raise InvalidScoreError(
                f"Declared winner {winner_id} contradicts the sets, which were won by {decided_winner}"
            )
        match.sets_json = [s.to_dict() for s in set_scores]
        match.status = MatchStatus.completed.value
        match.winner_participant_id = decided_winner
    else:
        walkover_winner = _walkover_winner(match, winner_id)
        match.sets_json = None
        match.status = MatchStatus.walkover.value
        match.winner_participant_id = walkover_winner

    match.completed_at = datetime.utcnow()

    advanced = 0
    tournament_completed = False
    try:
        repo.save(match)
        repo.flush()
        if match.stage == MatchStage.knockout.value:
            advanced = apply_advancement_for_final_match(repo, match)
            if not repo.downstream_matches(match):
                tournament_completed = complete_tournament(repo, tournament)
        elif match.stage == MatchStage.league.value:
            league = repo.list_matches(tournament.id, stage=MatchStage.league.value)
            if all(m.is_finished for m in league):
                tournament_completed = complete_tournament(repo, tournament)
        repo.commit()
    except Exception:
        repo.rollback()
        raise

    repo.refresh(match)
    logger.info(
        "Match %s (%s) result recorded: status=%s winner=%s",
        match.id, match.round_label, match.status, match.winner_participant_id,
    )
    return {
        "match_id": match.id,
        "status": match.status,
        "winner_participant_id": match.winner_participant_id,
        "sets": match.sets_json or [],
        "slots_advanced": advanced,
        "tournament_completed": tournament_completed,
    }
