from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class TournamentFormat(str, Enum):
    single_elimination = "single_elimination"
    groups_then_knockout = "groups_then_knockout"
    round_robin = "round_robin"


class MatchFormat(str, Enum):
    best_of_1 = "best_of_1"
    best_of_3 = "best_of_3"
    best_of_5 = "best_of_5"


class TournamentPhase(str, Enum):
    enrollment = "enrollment"
    group_stage = "group_stage"
    knockout = "knockout"
    completed = "completed"


# Phases only ever move forward along this order
PHASE_ORDER = {
    TournamentPhase.enrollment.value: 0,
    TournamentPhase.group_stage.value: 1,
    TournamentPhase.knockout.value: 2,
    TournamentPhase.completed.value: 3,
}


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    format: str  # "single_elimination" | "groups_then_knockout" | "round_robin"
    match_format: str = Field(default=MatchFormat.best_of_3.value)  # "best_of_1" | "best_of_3" | "best_of_5"
    max_participants: int

    # Persisted guard for generation/advancement (see repository.transition_phase)
    phase: str = Field(default=TournamentPhase.enrollment.value, index=True)

    # Group configuration (groups_then_knockout only)
    group_count: Optional[int] = Field(default=None)
    group_size: Optional[int] = Field(default=None)
    qualifiers_per_group: Optional[int] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})
    completed_at: Optional[datetime] = Field(default=None)
