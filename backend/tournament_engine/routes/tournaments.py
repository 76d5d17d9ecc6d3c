from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy.exc import IntegrityError

from tournament_engine.database import get_repository
from tournament_engine.errors import TournamentEngineError, to_http_exception
from tournament_engine.models.participant import Participant
from tournament_engine.models.tournament import MatchFormat, Tournament, TournamentFormat, TournamentPhase
from tournament_engine.repository import TournamentRepository
from tournament_engine.routes.matches import MatchResponse
from tournament_engine.services.advancement_service import DEFAULT_QUALIFIERS_PER_GROUP
from tournament_engine.services.report_service import build_tournament_summary

router = APIRouter()


class TournamentCreate(BaseModel):
    name: str
    format: TournamentFormat
    match_format: MatchFormat = MatchFormat.best_of_3
    max_participants: int = Field(ge=2)
    group_count: Optional[int] = Field(default=None, ge=1)
    group_size: Optional[int] = Field(default=None, ge=2)
    qualifiers_per_group: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()

    @model_validator(mode="after")
    def validate_group_configuration(self):
        if self.format != TournamentFormat.groups_then_knockout:
            self.group_count = None
            self.group_size = None
            self.qualifiers_per_group = None
            return self

        if self.group_count is None or self.group_size is None:
            raise ValueError("group_count and group_size are required for groups_then_knockout")
        if self.max_participants != self.group_count * self.group_size:
            raise ValueError(
                f"max_participants ({self.max_participants}) must equal group_count * group_size "
                f"({self.group_count} * {self.group_size})"
            )
        if self.qualifiers_per_group is None:
            self.qualifiers_per_group = min(DEFAULT_QUALIFIERS_PER_GROUP, self.group_size)
        if not 1 <= self.qualifiers_per_group <= self.group_size:
            raise ValueError("qualifiers_per_group must be between 1 and group_size")
        return self


class TournamentResponse(BaseModel):
    id: int
    name: str
    format: str
    match_format: str
    max_participants: int
    phase: str
    group_count: Optional[int] = None
    group_size: Optional[int] = None
    qualifiers_per_group: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ParticipantCreate(BaseModel):
    player_id: int
    player_name: str
    seed: Optional[int] = Field(default=None, ge=1)


class ParticipantResponse(BaseModel):
    id: int
    tournament_id: int
    player_id: int
    player_name: str
    seed: Optional[int] = None
    group_id: Optional[int] = None
    group_slot: Optional[int] = None
    group_position: Optional[int] = None

    class Config:
        from_attributes = True


class GroupResponse(BaseModel):
    id: int
    tournament_id: int
    name: str
    group_order: int
    participants: List[ParticipantResponse] = []


@router.get("/tournaments", response_model=List[TournamentResponse])
def list_tournaments(repo: TournamentRepository = Depends(get_repository)):
    """List all tournaments"""
    return repo.list_tournaments()


@router.post("/tournaments", response_model=TournamentResponse, status_code=201)
def create_tournament(payload: TournamentCreate, repo: TournamentRepository = Depends(get_repository)):
    """Create a tournament in the enrollment phase"""
    tournament = Tournament(
        name=payload.name,
        format=payload.format.value,
        match_format=payload.match_format.value,
        max_participants=payload.max_participants,
        group_count=payload.group_count,
        group_size=payload.group_size,
        qualifiers_per_group=payload.qualifiers_per_group,
    )
    repo.add_tournament(tournament)
    repo.commit()
    repo.refresh(tournament)
    return tournament


@router.get("/tournaments/stats", response_model=Dict)
def tournament_stats(repo: TournamentRepository = Depends(get_repository)):
    """Totals by phase and format"""
    return build_tournament_summary(repo)


@router.get("/tournaments/{tournament_id}", response_model=TournamentResponse)
def get_tournament(tournament_id: int, repo: TournamentRepository = Depends(get_repository)):
    try:
        return repo.get_tournament(tournament_id)
    except TournamentEngineError as e:
        raise to_http_exception(e)


@router.get("/tournaments/{tournament_id}/participants", response_model=List[ParticipantResponse])
def list_participants(tournament_id: int, repo: TournamentRepository = Depends(get_repository)):
    """Participants in seed order (unseeded last, by enrollment)"""
    try:
        repo.get_tournament(tournament_id)
    except TournamentEngineError as e:
        raise to_http_exception(e)
    return repo.list_participants(tournament_id)


@router.post("/tournaments/{tournament_id}/participants", response_model=ParticipantResponse, status_code=201)
def enroll_participant(
    tournament_id: int, payload: ParticipantCreate, repo: TournamentRepository = Depends(get_repository)
):
    """Enroll a roster entry. Only allowed before any matches are generated."""
    try:
        tournament = repo.get_tournament(tournament_id)
    except TournamentEngineError as e:
        raise to_http_exception(e)

    if tournament.phase != TournamentPhase.enrollment.value:
        raise HTTPException(
            status_code=409,
            detail=f"ENROLLMENT_CLOSED: Tournament {tournament_id} is in phase '{tournament.phase}'",
        )
    if len(repo.list_participants(tournament_id)) >= tournament.max_participants:
        raise HTTPException(
            status_code=400,
            detail=f"TOURNAMENT_FULL: Tournament {tournament_id} already has {tournament.max_participants} participants",
        )

    participant = Participant(tournament_id=tournament_id, **payload.model_dump())
    try:
        repo.add_participant(participant)
        repo.commit()
    except IntegrityError:
        repo.rollback()
        raise HTTPException(
            status_code=409,
            detail="DUPLICATE_PARTICIPANT: Player or seed already enrolled in this tournament",
        )
    repo.refresh(participant)
    return participant


@router.get("/tournaments/{tournament_id}/groups", response_model=List[GroupResponse])
def list_groups(tournament_id: int, repo: TournamentRepository = Depends(get_repository)):
    try:
        repo.get_tournament(tournament_id)
    except TournamentEngineError as e:
        raise to_http_exception(e)

    return [
        GroupResponse(
            id=group.id,
            tournament_id=group.tournament_id,
            name=group.name,
            group_order=group.group_order,
            participants=[ParticipantResponse.model_validate(p) for p in repo.group_participants(group.id)],
        )
        for group in repo.list_groups(tournament_id)
    ]


@router.get("/tournaments/{tournament_id}/matches", response_model=List[MatchResponse])
def list_matches(
    tournament_id: int,
    stage: Optional[str] = None,
    group_id: Optional[int] = None,
    repo: TournamentRepository = Depends(get_repository),
):
    """Matches ordered by match number; filter by stage and/or group"""
    try:
        repo.get_tournament(tournament_id)
    except TournamentEngineError as e:
        raise to_http_exception(e)
    return repo.list_matches(tournament_id, stage=stage, group_id=group_id)
