from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class TournamentGroup(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "group_order", name="uq_tournament_group_order"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    name: str  # "Girone A", "Girone B", ...
    group_order: int  # 1-based
    created_at: datetime = Field(default_factory=datetime.utcnow)
