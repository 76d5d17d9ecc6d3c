from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class Participant(SQLModel, table=True):
    __table_args__ = (
        # Enforce unique seeds within a tournament (where seed is not null)
        SAUniqueConstraint("tournament_id", "seed", name="uq_tournament_seed"),
        SAUniqueConstraint("tournament_id", "player_id", name="uq_tournament_player"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    player_id: int  # Roster entry owned by the enrollment system
    player_name: str
    seed: Optional[int] = Field(default=None)  # 1-based seed (1=highest)

    # Group stage (nullable until groups are generated)
    group_id: Optional[int] = Field(default=None, foreign_key="tournamentgroup.id", index=True)
    group_slot: Optional[int] = Field(default=None)  # Draw order inside the group
    group_position: Optional[int] = Field(default=None)  # Final group rank, written on advancement

    created_at: datetime = Field(default_factory=datetime.utcnow)
