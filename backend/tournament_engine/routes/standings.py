from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tournament_engine.database import get_repository
from tournament_engine.errors import InvalidTournamentTypeError, TournamentEngineError, to_http_exception
from tournament_engine.models.match import MatchStage
from tournament_engine.models.tournament import TournamentFormat
from tournament_engine.repository import TournamentRepository
from tournament_engine.services.standings import compute_standings

router = APIRouter()

LEAGUE_TABLE_NAME = "Classifica"


class StandingsTable(BaseModel):
    group_id: Optional[int] = None
    name: str
    standings: List[Dict]


class TournamentStandingsResponse(BaseModel):
    tournament_id: int
    format: str
    phase: str
    tables: List[StandingsTable]


def _group_table(repo: TournamentRepository, group) -> StandingsTable:
    members = repo.group_participants(group.id)
    matches = repo.list_matches(group.tournament_id, stage=MatchStage.group.value, group_id=group.id)
    return StandingsTable(
        group_id=group.id,
        name=group.name,
        standings=[row.to_dict() for row in compute_standings(members, matches)],
    )


@router.get("/tournaments/{tournament_id}/standings", response_model=TournamentStandingsResponse)
def get_tournament_standings(tournament_id: int, repo: TournamentRepository = Depends(get_repository)):
    """One table per group, or the league table for a championship"""
    try:
        tournament = repo.get_tournament(tournament_id)
        if tournament.format == TournamentFormat.round_robin.value:
            participants = repo.list_participants(tournament_id)
            matches = repo.list_matches(tournament_id, stage=MatchStage.league.value)
            tables = [
                StandingsTable(
                    name=LEAGUE_TABLE_NAME,
                    standings=[row.to_dict() for row in compute_standings(participants, matches)],
                )
            ]
        elif tournament.format == TournamentFormat.groups_then_knockout.value:
            tables = [_group_table(repo, group) for group in repo.list_groups(tournament_id)]
        else:
            raise InvalidTournamentTypeError(
                f"Tournament {tournament_id} is '{tournament.format}' and has no standings tables"
            )
    except TournamentEngineError as e:
        raise to_http_exception(e)

    return TournamentStandingsResponse(
        tournament_id=tournament.id,
        format=tournament.format,
        phase=tournament.phase,
        tables=tables,
    )


@router.get("/groups/{group_id}/standings", response_model=StandingsTable)
def get_group_standings(group_id: int, repo: TournamentRepository = Depends(get_repository)):
    try:
        group = repo.get_group(group_id)
    except TournamentEngineError as e:
        raise to_http_exception(e)
    return _group_table(repo, group)
