from typing import Dict

from fastapi import APIRouter, Depends, Query

from tournament_engine.database import get_repository
from tournament_engine.repository import TournamentRepository
from tournament_engine.services.report_service import DEFAULT_RANKING_LIMIT, build_player_report

router = APIRouter()


@router.get("/reports/players", response_model=Dict)
def get_player_report(
    limit: int = Query(DEFAULT_RANKING_LIMIT, ge=1, le=DEFAULT_RANKING_LIMIT),
    repo: TournamentRepository = Depends(get_repository),
):
    """Cross-tournament player statistics: overview, rankings, per-tournament stats, top performers"""
    return build_player_report(repo, limit=limit)
