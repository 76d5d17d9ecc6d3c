from tournament_engine.models.group import TournamentGroup
from tournament_engine.models.match import BYE_PLACEHOLDER, FINISHED_STATUSES, Match, MatchStage, MatchStatus
from tournament_engine.models.participant import Participant
from tournament_engine.models.tournament import (
    PHASE_ORDER,
    MatchFormat,
    Tournament,
    TournamentFormat,
    TournamentPhase,
)

__all__ = [
    "Tournament",
    "TournamentFormat",
    "TournamentPhase",
    "MatchFormat",
    "PHASE_ORDER",
    "Participant",
    "TournamentGroup",
    "Match",
    "MatchStage",
    "MatchStatus",
    "FINISHED_STATUSES",
    "BYE_PLACEHOLDER",
]
