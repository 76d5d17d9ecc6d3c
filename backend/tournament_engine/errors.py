"""
Domain errors raised by the tournament engine.

Every error carries a machine code and the HTTP status the routes translate it to.
Services never raise HTTPException; routes map these via ``to_http_exception``.
"""

from fastapi import HTTPException


class TournamentEngineError(Exception):
    """Base class for all engine failures"""

    code = "TOURNAMENT_ENGINE_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InsufficientParticipantsError(TournamentEngineError):
    code = "INSUFFICIENT_PARTICIPANTS"
    status_code = 400


class AlreadyGeneratedError(TournamentEngineError):
    """Raised when the phase guard for a generation step has already been claimed"""

    code = "ALREADY_GENERATED"
    status_code = 409


class InvalidScoreError(TournamentEngineError):
    code = "INVALID_SCORE"
    status_code = 422


class NoWinnerInTennisError(TournamentEngineError):
    """Raised when a match would be completed without a determinable winner"""

    code = "NO_WINNER_IN_TENNIS"
    status_code = 422


class GroupStageIncompleteError(TournamentEngineError):
    code = "GROUP_STAGE_INCOMPLETE"
    status_code = 409


class InvalidTournamentTypeError(TournamentEngineError):
    code = "INVALID_TOURNAMENT_TYPE"
    status_code = 400


class TournamentNotFoundError(TournamentEngineError):
    code = "TOURNAMENT_NOT_FOUND"
    status_code = 404


class GroupNotFoundError(TournamentEngineError):
    code = "GROUP_NOT_FOUND"
    status_code = 404


class MatchNotFoundError(TournamentEngineError):
    code = "MATCH_NOT_FOUND"
    status_code = 404


class MatchNotReadyError(TournamentEngineError):
    """Raised when a result is reported for a match whose slots are still TBD"""

    code = "MATCH_NOT_READY"
    status_code = 409


class MatchAlreadyCompletedError(TournamentEngineError):
    code = "MATCH_ALREADY_COMPLETED"
    status_code = 409


def to_http_exception(exc: TournamentEngineError) -> HTTPException:
    """Translate a domain error into the HTTP error the API returns"""
    return HTTPException(status_code=exc.status_code, detail=f"{exc.code}: {exc.message}")
