"""
Match generation: direct-elimination brackets, group stages and championships.

Each generator claims its phase transition first and writes every match in
the same transaction. Any failure rolls the whole step back, so a tournament
is either fully generated or untouched.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from tournament_engine.errors import InsufficientParticipantsError
from tournament_engine.models.group import TournamentGroup
from tournament_engine.models.match import Match, MatchStage, MatchStatus
from tournament_engine.models.participant import Participant
from tournament_engine.models.tournament import Tournament, TournamentFormat, TournamentPhase
from tournament_engine.repository import TournamentRepository
from tournament_engine.services.bracket_generator import BracketPlan, SeededEntry, build_bracket
from tournament_engine.services.round_robin import build_round_robin, group_name, league_round_label, snake_distribution
from tournament_engine.utils.phase_guards import claim_phase, require_format

logger = logging.getLogger(__name__)

DEFAULT_GROUP_COUNT = 2


def entries_from_participants(participants: Sequence[Participant]) -> List[SeededEntry]:
    """Participants already in seed order (nulls last) -> entries seeded 1..M."""
    return [
        SeededEntry(seed=rank, participant_id=p.id, display_name=p.player_name, group_id=p.group_id)
        for rank, p in enumerate(participants, start=1)
    ]


def load_seeded_entries(repo: TournamentRepository, tournament_id: int) -> List[SeededEntry]:
    return entries_from_participants(repo.list_participants(tournament_id))


def persist_bracket(
    repo: TournamentRepository, tournament: Tournament, plan: BracketPlan, stage: str = MatchStage.knockout.value
) -> List[Match]:
    """
    Write a bracket plan as Match rows.

    Plan match numbers are local; they are offset past the tournament's
    existing matches so group and knockout numbering never collide.
    Feeder links are resolved to match ids after the first flush.
    """
    offset = repo.next_match_number(tournament.id) - 1
    now = datetime.utcnow()

    by_number: Dict[int, Match] = {}
    for planned in plan.matches:
        match = Match(
            tournament_id=tournament.id,
            stage=stage,
            round_label=planned.round_label,
            round_order=planned.round_order,
            bracket_position=planned.bracket_position,
            match_number=offset + planned.match_number,
            participant_a_id=planned.entry_a.participant_id if planned.entry_a else None,
            participant_b_id=planned.entry_b.participant_id if planned.entry_b else None,
            placeholder_side_a=planned.placeholder_a,
            placeholder_side_b=planned.placeholder_b,
            is_bye=planned.is_bye,
        )
        if planned.is_bye:
            match.status = MatchStatus.walkover.value
            match.winner_participant_id = planned.winner.participant_id
            match.completed_at = now
        by_number[planned.match_number] = match

    repo.add_matches(by_number.values())

    for planned in plan.matches:
        match = by_number[planned.match_number]
        if planned.source_a is not None:
            match.source_match_a_id = by_number[planned.source_a].id
        if planned.source_b is not None:
            match.source_match_b_id = by_number[planned.source_b].id
        repo.save(match)
    repo.flush()

    return [by_number[p.match_number] for p in plan.matches]


def generate_bracket(repo: TournamentRepository, tournament_id: int) -> Dict:
    """
    GenerateBracket: build the single-elimination tree for a direct-elimination tournament.

    Phase: enrollment -> knockout.
    """
    tournament = require_format(repo.get_tournament(tournament_id), TournamentFormat.single_elimination.value)

    try:
        claim_phase(repo, tournament, TournamentPhase.enrollment.value, TournamentPhase.knockout.value)
        entries = load_seeded_entries(repo, tournament_id)
        plan = build_bracket(entries)
        matches = persist_bracket(repo, tournament, plan)
        repo.commit()
    except Exception:
        repo.rollback()
        raise

    logger.info(
        "Generated bracket for tournament %s: %s entries, size %s, %s matches, %s byes",
        tournament_id, len(entries), plan.bracket_size, len(matches), plan.bye_count,
    )
    return {
        "tournament_id": tournament_id,
        "phase": TournamentPhase.knockout.value,
        "participants": len(entries),
        "bracket_size": plan.bracket_size,
        "rounds": plan.round_count,
        "byes": plan.bye_count,
        "matches_created": len(matches),
    }


def _round_robin_matches(
    tournament_id: int,
    members: Sequence[Participant],
    stage: str,
    first_number: int,
    label_prefix: str = "",
    group_id: Optional[int] = None,
) -> List[Match]:
    matches: List[Match] = []
    number = first_number
    for round_num, seq, side_a, side_b in build_round_robin(members):
        matches.append(
            Match(
                tournament_id=tournament_id,
                group_id=group_id,
                stage=stage,
                round_label=f"{label_prefix}{league_round_label(round_num)}",
                round_order=round_num,
                bracket_position=seq,
                match_number=number,
                participant_a_id=side_a.id,
                participant_b_id=side_b.id,
                placeholder_side_a=side_a.player_name,
                placeholder_side_b=side_b.player_name,
            )
        )
        number += 1
    return matches


def generate_groups(repo: TournamentRepository, tournament_id: int, num_groups: Optional[int] = None) -> Dict:
    """
    GenerateGroups: draw participants into groups (snake, in seed order) and
    schedule a round robin inside each group.

    Phase: enrollment -> group_stage.
    """
    tournament = require_format(repo.get_tournament(tournament_id), TournamentFormat.groups_then_knockout.value)
    group_count = num_groups or tournament.group_count or DEFAULT_GROUP_COUNT

    try:
        claim_phase(repo, tournament, TournamentPhase.enrollment.value, TournamentPhase.group_stage.value)

        participants = repo.list_participants(tournament_id)
        drawn = snake_distribution(participants, group_count)
        # Every group must hold at least its qualifiers, and never fewer than 2
        min_size = max(2, tournament.qualifiers_per_group or 0)
        for members in drawn:
            if len(members) < min_size:
                raise InsufficientParticipantsError(
                    f"{len(participants)} participants cannot fill {group_count} groups of at least {min_size}"
                )

        match_number = repo.next_match_number(tournament_id)
        created: List[Match] = []
        summary: List[Dict] = []
        for index, members in enumerate(drawn):
            group = repo.add_group(
                TournamentGroup(tournament_id=tournament_id, name=group_name(index), group_order=index + 1)
            )
            for slot, participant in enumerate(members, start=1):
                participant.group_id = group.id
                participant.group_slot = slot
                repo.save(participant)

            group_matches = _round_robin_matches(
                tournament_id,
                members,
                MatchStage.group.value,
                match_number,
                label_prefix=f"{group.name} - ",
                group_id=group.id,
            )
            match_number += len(group_matches)
            created.extend(repo.add_matches(group_matches))
            summary.append(
                {"group_id": group.id, "name": group.name, "participants": len(members), "matches": len(group_matches)}
            )

        repo.commit()
    except Exception:
        repo.rollback()
        raise

    logger.info(
        "Generated %s groups for tournament %s: %s participants, %s matches",
        group_count, tournament_id, len(participants), len(created),
    )
    return {
        "tournament_id": tournament_id,
        "phase": TournamentPhase.group_stage.value,
        "groups": summary,
        "matches_created": len(created),
    }


def generate_championship(repo: TournamentRepository, tournament_id: int) -> Dict:
    """
    GenerateChampionship: a single all-play-all league for the whole roster.

    Phase: enrollment -> group_stage. The last league result completes the tournament.
    """
    tournament = require_format(repo.get_tournament(tournament_id), TournamentFormat.round_robin.value)

    try:
        claim_phase(repo, tournament, TournamentPhase.enrollment.value, TournamentPhase.group_stage.value)
        participants = repo.list_participants(tournament_id)
        matches = repo.add_matches(
            _round_robin_matches(
                tournament_id, participants, MatchStage.league.value, repo.next_match_number(tournament_id)
            )
        )
        repo.commit()
    except Exception:
        repo.rollback()
        raise

    rounds = max((m.round_order for m in matches), default=0)
    logger.info(
        "Generated championship for tournament %s: %s participants, %s rounds, %s matches",
        tournament_id, len(participants), rounds, len(matches),
    )
    return {
        "tournament_id": tournament_id,
        "phase": TournamentPhase.group_stage.value,
        "participants": len(participants),
        "rounds": rounds,
        "matches_created": len(matches),
    }
