"""
Generation endpoints. Each one runs at most once per tournament: the phase
guard turns a repeated or concurrent call into 409 ALREADY_GENERATED.
"""
from typing import Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tournament_engine.database import get_repository
from tournament_engine.errors import TournamentEngineError, to_http_exception
from tournament_engine.repository import TournamentRepository
from tournament_engine.services.advancement_service import advance_from_groups
from tournament_engine.services.generation_service import (
    generate_bracket,
    generate_championship,
    generate_groups,
)

router = APIRouter()


class GenerateGroupsRequest(BaseModel):
    num_groups: Optional[int] = Field(default=None, ge=1)


@router.post("/tournaments/{tournament_id}/generate-bracket", response_model=Dict, status_code=201)
def post_generate_bracket(tournament_id: int, repo: TournamentRepository = Depends(get_repository)):
    """Direct elimination: seeded bracket with byes for the top seeds"""
    try:
        return generate_bracket(repo, tournament_id)
    except TournamentEngineError as e:
        raise to_http_exception(e)


@router.post("/tournaments/{tournament_id}/generate-groups", response_model=Dict, status_code=201)
def post_generate_groups(
    tournament_id: int,
    payload: Optional[GenerateGroupsRequest] = None,
    repo: TournamentRepository = Depends(get_repository),
):
    """Groups + knockout: snake draw into groups and a round robin per group"""
    num_groups = payload.num_groups if payload else None
    try:
        return generate_groups(repo, tournament_id, num_groups=num_groups)
    except TournamentEngineError as e:
        raise to_http_exception(e)


@router.post("/tournaments/{tournament_id}/generate-championship", response_model=Dict, status_code=201)
def post_generate_championship(tournament_id: int, repo: TournamentRepository = Depends(get_repository)):
    """Championship: one all-play-all league"""
    try:
        return generate_championship(repo, tournament_id)
    except TournamentEngineError as e:
        raise to_http_exception(e)


@router.post("/tournaments/{tournament_id}/advance-from-groups", response_model=Dict, status_code=201)
def post_advance_from_groups(tournament_id: int, repo: TournamentRepository = Depends(get_repository)):
    """Close the group stage and build the knockout bracket from the qualifiers"""
    try:
        return advance_from_groups(repo, tournament_id)
    except TournamentEngineError as e:
        raise to_http_exception(e)
