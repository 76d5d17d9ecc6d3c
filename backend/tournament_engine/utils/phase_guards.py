"""
Phase Guards

Reusable guards for the tournament phase state machine:
- Format checks (generation steps only apply to one format)
- Monotonic, one-directional phase transitions
- Guarded claims so a generation step runs at most once
"""

import logging

from tournament_engine.errors import AlreadyGeneratedError, InvalidTournamentTypeError
from tournament_engine.models.tournament import PHASE_ORDER, Tournament
from tournament_engine.repository import TournamentRepository

logger = logging.getLogger(__name__)


def require_format(tournament: Tournament, *formats: str) -> Tournament:
    """
    Require that a tournament has one of the given formats.

    Raises:
        InvalidTournamentTypeError: format not accepted by this operation
    """
    if tournament.format not in formats:
        raise InvalidTournamentTypeError(
            f"Tournament {tournament.id} has format '{tournament.format}', expected one of: {', '.join(formats)}"
        )
    return tournament


def is_forward(current: str, new: str) -> bool:
    return PHASE_ORDER[new] > PHASE_ORDER[current]


def claim_phase(repo: TournamentRepository, tournament: Tournament, expected: str, new: str) -> None:
    """
    Move *tournament* from *expected* to *new*, or fail with AlreadyGeneratedError.

    The conditional update is the only arbiter: a caller that reads the
    expected phase but loses the race still gets AlreadyGeneratedError.
    """
    if not is_forward(expected, new):
        raise ValueError(f"Phase transition {expected} -> {new} is not forward")

    if tournament.phase != expected:
        raise AlreadyGeneratedError(
            f"Tournament {tournament.id} is in phase '{tournament.phase}', expected '{expected}'"
        )

    if not repo.transition_phase(tournament.id, expected, new):
        logger.warning("Tournament %s lost the %s -> %s phase claim", tournament.id, expected, new)
        raise AlreadyGeneratedError(f"Tournament {tournament.id} already left phase '{expected}'")
