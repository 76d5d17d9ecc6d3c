import os
from pathlib import Path
from typing import Generator

from dotenv import load_dotenv
from fastapi import Depends
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from tournament_engine.repository import TournamentRepository

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tournaments.db")

_is_sqlite = DATABASE_URL.startswith("sqlite")
_connect_args = {"check_same_thread": False} if _is_sqlite else {}
_echo = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

if _is_sqlite and ":memory:" not in DATABASE_URL:
    db_path = DATABASE_URL.replace("sqlite:///", "", 1)
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

engine: Engine = create_engine(
    DATABASE_URL,
    echo=_echo,
    connect_args=_connect_args,
)


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def get_repository(session: Session = Depends(get_session)) -> TournamentRepository:
    """Repository bound to the request session"""
    return TournamentRepository(session)


def init_db() -> None:
    """Initialize database - create all tables"""
    # Import all models to ensure they're registered with SQLModel metadata
    from tournament_engine.models.group import TournamentGroup  # noqa: F401
    from tournament_engine.models.match import Match  # noqa: F401
    from tournament_engine.models.participant import Participant  # noqa: F401
    from tournament_engine.models.tournament import Tournament  # noqa: F401

    SQLModel.metadata.create_all(engine)
