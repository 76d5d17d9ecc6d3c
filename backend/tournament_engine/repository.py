"""
Persistence port for the engine.

Services receive a TournamentRepository instead of reaching for the session
directly. The repository never commits on its own: the caller owns the
transaction and calls commit() or rollback() once.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from tournament_engine.errors import GroupNotFoundError, MatchNotFoundError, TournamentNotFoundError
from tournament_engine.models.group import TournamentGroup
from tournament_engine.models.match import Match
from tournament_engine.models.participant import Participant
from tournament_engine.models.tournament import Tournament

logger = logging.getLogger(__name__)


def participant_sort_key(participant: Participant):
    return (
        # seed: nulls last, ascending
        (participant.seed is None, participant.seed if participant.seed is not None else 0),
        # enrollment order
        participant.id,
    )


class TournamentRepository:
    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Tournaments
    # ------------------------------------------------------------------

    def get_tournament(self, tournament_id: int) -> Tournament:
        tournament = self.session.get(Tournament, tournament_id)
        if not tournament:
            raise TournamentNotFoundError(f"Tournament {tournament_id} not found")
        return tournament

    def list_tournaments(self) -> List[Tournament]:
        return list(self.session.exec(select(Tournament).order_by(Tournament.id)).all())

    def add_tournament(self, tournament: Tournament) -> Tournament:
        self.session.add(tournament)
        self.session.flush()
        return tournament

    def transition_phase(self, tournament_id: int, expected: str, new: str) -> bool:
        """
        Conditional phase update: only succeeds if the stored phase is still *expected*.

        Returns True when this caller changed the row. Runs inside the caller's
        transaction, so a later rollback undoes the claim as well.
        """
        now = datetime.utcnow()
        values = {"phase": new, "updated_at": now}
        if new == "completed":
            values["completed_at"] = now
        result = self.session.execute(
            update(Tournament)
            .where(Tournament.id == tournament_id, Tournament.phase == expected)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        claimed = result.rowcount == 1
        if claimed:
            logger.info("Tournament %s phase %s -> %s", tournament_id, expected, new)
        return claimed

    # ------------------------------------------------------------------
    # Participants and groups
    # ------------------------------------------------------------------

    def list_participants(self, tournament_id: int) -> List[Participant]:
        participants = self.session.exec(
            select(Participant).where(Participant.tournament_id == tournament_id)
        ).all()
        return sorted(participants, key=participant_sort_key)

    def all_participants(self) -> List[Participant]:
        return list(self.session.exec(select(Participant).order_by(Participant.id)).all())

    def get_participant(self, participant_id: int) -> Optional[Participant]:
        return self.session.get(Participant, participant_id)

    def add_participant(self, participant: Participant) -> Participant:
        self.session.add(participant)
        self.session.flush()
        return participant

    def list_groups(self, tournament_id: int) -> List[TournamentGroup]:
        return list(
            self.session.exec(
                select(TournamentGroup)
                .where(TournamentGroup.tournament_id == tournament_id)
                .order_by(TournamentGroup.group_order)
            ).all()
        )

    def get_group(self, group_id: int) -> TournamentGroup:
        group = self.session.get(TournamentGroup, group_id)
        if not group:
            raise GroupNotFoundError(f"Group {group_id} not found")
        return group

    def add_group(self, group: TournamentGroup) -> TournamentGroup:
        self.session.add(group)
        self.session.flush()
        return group

    def group_participants(self, group_id: int) -> List[Participant]:
        return list(
            self.session.exec(
                select(Participant)
                .where(Participant.group_id == group_id)
                .order_by(Participant.group_slot, Participant.id)
            ).all()
        )

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def get_match(self, match_id: int) -> Match:
        match = self.session.get(Match, match_id)
        if not match:
            raise MatchNotFoundError(f"Match {match_id} not found")
        return match

    def list_matches(
        self, tournament_id: int, stage: Optional[str] = None, group_id: Optional[int] = None
    ) -> List[Match]:
        query = select(Match).where(Match.tournament_id == tournament_id)
        if stage is not None:
            query = query.where(Match.stage == stage)
        if group_id is not None:
            query = query.where(Match.group_id == group_id)
        return list(self.session.exec(query.order_by(Match.match_number)).all())

    def all_matches(self) -> List[Match]:
        return list(self.session.exec(select(Match).order_by(Match.tournament_id, Match.match_number)).all())

    def add_matches(self, matches: Iterable[Match]) -> List[Match]:
        added = list(matches)
        self.session.add_all(added)
        self.session.flush()
        return added

    def next_match_number(self, tournament_id: int) -> int:
        last = self.session.exec(
            select(Match.match_number)
            .where(Match.tournament_id == tournament_id)
            .order_by(Match.match_number.desc())
        ).first()
        return (last or 0) + 1

    def downstream_matches(self, match: Match) -> List[Match]:
        """Matches that take the winner of *match* into one of their slots."""
        return list(
            self.session.exec(
                select(Match)
                .where(
                    Match.tournament_id == match.tournament_id,
                    (Match.source_match_a_id == match.id) | (Match.source_match_b_id == match.id),
                )
                .order_by(Match.match_number)
            ).all()
        )

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    def save(self, *rows) -> None:
        for row in rows:
            self.session.add(row)

    def flush(self) -> None:
        self.session.flush()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def refresh(self, row) -> None:
        self.session.refresh(row)
