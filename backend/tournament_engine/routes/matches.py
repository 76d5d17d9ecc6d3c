"""
Match results. Reporting a result validates the tennis score, completes the
match, advances knockout winners and completes the tournament after the
final (or the last league match).
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tournament_engine.database import get_repository
from tournament_engine.errors import TournamentEngineError, to_http_exception
from tournament_engine.repository import TournamentRepository
from tournament_engine.services.result_service import report_match_result

router = APIRouter()


class MatchResponse(BaseModel):
    id: int
    tournament_id: int
    group_id: Optional[int] = None
    stage: str
    round_label: str
    round_order: int
    bracket_position: int
    match_number: int
    participant_a_id: Optional[int] = None
    participant_b_id: Optional[int] = None
    placeholder_side_a: str
    placeholder_side_b: str
    source_match_a_id: Optional[int] = None
    source_match_b_id: Optional[int] = None
    is_bye: bool
    status: str
    sets_json: Optional[List[Dict[str, Any]]] = None
    winner_participant_id: Optional[int] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SetScoreIn(BaseModel):
    set_number: int
    games_a: int
    games_b: int
    tiebreak_a: Optional[int] = None
    tiebreak_b: Optional[int] = None


class MatchResultRequest(BaseModel):
    sets: List[SetScoreIn] = []
    score: Optional[str] = None  # "6-4 7-6(7-5)", used when sets is empty
    winner_id: Optional[int] = None  # walkover winner, or a cross-check of the sets


class MatchResultResponse(BaseModel):
    match: MatchResponse
    slots_advanced: int = 0
    tournament_completed: bool = False


@router.get("/matches/{match_id}", response_model=MatchResponse)
def get_match(match_id: int, repo: TournamentRepository = Depends(get_repository)):
    try:
        return repo.get_match(match_id)
    except TournamentEngineError as e:
        raise to_http_exception(e)


@router.put("/matches/{match_id}/result", response_model=MatchResultResponse)
def put_match_result(
    match_id: int,
    payload: MatchResultRequest,
    repo: TournamentRepository = Depends(get_repository),
) -> MatchResultResponse:
    """Report a result: sets (or a score string), or only winner_id for a walkover."""
    try:
        outcome = report_match_result(
            repo,
            match_id,
            sets=[s.model_dump(exclude_none=True) for s in payload.sets],
            winner_id=payload.winner_id,
            score=payload.score,
        )
        match = repo.get_match(match_id)
    except TournamentEngineError as e:
        raise to_http_exception(e)

    return MatchResultResponse(
        match=MatchResponse.model_validate(match),
        slots_advanced=outcome["slots_advanced"],
        tournament_completed=outcome["tournament_completed"],
    )
