# Force SQLModel table registration at test discovery time
from tournament_engine.models.group import TournamentGroup  # noqa: F401
from tournament_engine.models.match import Match  # noqa: F401
from tournament_engine.models.participant import Participant  # noqa: F401
from tournament_engine.models.tournament import Tournament  # noqa: F401
