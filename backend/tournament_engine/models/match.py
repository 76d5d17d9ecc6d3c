from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, SQLModel


class MatchStatus(str, Enum):
    scheduled = "scheduled"
    completed = "completed"
    walkover = "walkover"


class MatchStage(str, Enum):
    group = "group"
    league = "league"
    knockout = "knockout"


# A match in either of these states has a winner and is never scored again
FINISHED_STATUSES = (MatchStatus.completed.value, MatchStatus.walkover.value)

BYE_PLACEHOLDER = "BYE"


class Match(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "match_number", name="uq_tournament_match_number"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    group_id: Optional[int] = Field(default=None, foreign_key="tournamentgroup.id", index=True)
    stage: str  # "group" | "league" | "knockout"
    round_label: str  # "Finale", "Semifinale", "Giornata 1", ...
    round_order: int
    bracket_position: int  # 1-based position within the round
    match_number: int

    # Participant slots (nullable while TBD or bye)
    participant_a_id: Optional[int] = Field(default=None, foreign_key="participant.id")
    participant_b_id: Optional[int] = Field(default=None, foreign_key="participant.id")

    # Placeholder text (always present, used when participant ids are null or for display)
    placeholder_side_a: str
    placeholder_side_b: str

    # Knockout advancement: upstream match -> participant slot
    source_match_a_id: Optional[int] = Field(default=None, foreign_key="match.id")
    source_match_b_id: Optional[int] = Field(default=None, foreign_key="match.id")

    is_bye: bool = Field(default=False)
    status: str = Field(default=MatchStatus.scheduled.value)  # "scheduled" | "completed" | "walkover"
    sets_json: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    winner_participant_id: Optional[int] = Field(default=None, foreign_key="participant.id")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = Field(default=None)

    @property
    def is_finished(self) -> bool:
        return self.status in FINISHED_STATUSES
