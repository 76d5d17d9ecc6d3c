import os

# Point the app engine at memory before tournament_engine.database is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from tournament_engine.database import get_session  # noqa: E402
from tournament_engine.main import app  # noqa: E402
from tournament_engine.models.participant import Participant  # noqa: E402
from tournament_engine.models.tournament import Tournament  # noqa: E402
from tournament_engine.repository import TournamentRepository  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. Use sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models MUST be imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables created per test and dropped afterwards
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    # Import all models to ensure they're registered BEFORE create_all
    from tournament_engine.models.group import TournamentGroup  # noqa: F401
    from tournament_engine.models.match import Match  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="repo")
def repo_fixture(session: Session) -> TournamentRepository:
    return TournamentRepository(session)


@pytest.fixture(name="other_repo")
def other_repo_fixture(session: Session):
    """A second repository on its own session, for racing the first one"""
    with Session(test_engine) as other_session:
        yield TournamentRepository(other_session)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place
    for the entire duration. This ensures the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_tournament(session: Session):
    """Factory: tournament with `players` participants seeded 1..n (player ids 1001..)."""

    def _make(
        fmt: str = "single_elimination",
        players: int = 8,
        match_format: str = "best_of_3",
        seeded: bool = True,
        **kwargs,
    ) -> Tournament:
        tournament = Tournament(
            name=f"Torneo {fmt}",
            format=fmt,
            match_format=match_format,
            max_participants=kwargs.pop("max_participants", players),
            **kwargs,
        )
        session.add(tournament)
        session.commit()
        session.refresh(tournament)

        for i in range(1, players + 1):
            session.add(
                Participant(
                    tournament_id=tournament.id,
                    player_id=1000 + i,
                    player_name=f"Player {i}",
                    seed=i if seeded else None,
                )
            )
        session.commit()
        session.refresh(tournament)
        return tournament

    return _make

