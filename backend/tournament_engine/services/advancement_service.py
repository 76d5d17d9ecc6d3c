"""
Advancement: knockout winners into downstream slots, group qualifiers into the knockout bracket.
Only touches participant slots and placeholders on downstream matches; scores are never rewritten.
"""
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from tournament_engine.errors import AlreadyGeneratedError, GroupStageIncompleteError, InsufficientParticipantsError
from tournament_engine.models.match import Match, MatchStage
from tournament_engine.models.tournament import Tournament, TournamentFormat, TournamentPhase
from tournament_engine.repository import TournamentRepository
from tournament_engine.services.bracket_generator import SeededEntry, build_bracket, next_power_of_two
from tournament_engine.services.generation_service import persist_bracket
from tournament_engine.services.standings import compute_standings
from tournament_engine.utils.phase_guards import claim_phase, require_format

logger = logging.getLogger(__name__)

DEFAULT_QUALIFIERS_PER_GROUP = 2


def apply_advancement_for_final_match(repo: TournamentRepository, match: Match) -> int:
    """
    Given a finished knockout match, advance its winner into downstream matches that list
    this match as source (source_match_a_id or source_match_b_id).
    Returns count of downstream slots that were updated.
    Idempotent: calling twice produces same DB state (only set if null or already same).
    Does not commit; the caller owns the transaction.
    """
    winner_id = match.winner_participant_id
    if winner_id is None or not match.is_finished:
        return 0

    winner = repo.get_participant(winner_id)
    winner_label = winner.player_name if winner else f"Winner of M{match.match_number}"
    updated_count = 0

    for down in repo.downstream_matches(match):
        # Downstream where this match feeds slot A (winner -> participant_a)
        if down.source_match_a_id == match.id:
            if down.participant_a_id is None or down.participant_a_id == winner_id:
                if down.participant_a_id != winner_id:
                    down.participant_a_id = winner_id
                    down.placeholder_side_a = winner_label
                    repo.save(down)
                    updated_count += 1
        # Downstream where this match feeds slot B (winner -> participant_b)
        if down.source_match_b_id == match.id:
            if down.participant_b_id is None or down.participant_b_id == winner_id:
                if down.participant_b_id != winner_id:
                    down.participant_b_id = winner_id
                    down.placeholder_side_b = winner_label
                    repo.save(down)
                    updated_count += 1

    if updated_count:
        logger.info("Match %s: winner %s advanced into %s slot(s)", match.id, winner_id, updated_count)
    return updated_count


def complete_tournament(repo: TournamentRepository, tournament: Tournament) -> bool:
    """Move the tournament to completed from whichever phase it is in. Returns False if already completed."""
    if tournament.phase == TournamentPhase.completed.value:
        return False
    completed = repo.transition_phase(tournament.id, tournament.phase, TournamentPhase.completed.value)
    if completed:
        logger.info("Tournament %s completed", tournament.id)
    else:
        logger.warning("Tournament %s completion skipped: phase changed concurrently", tournament.id)
    return completed


@dataclass
class Qualifier:
    participant_id: int
    player_name: str
    group_id: int
    group_order: int
    group_position: int
    won: int
    set_diff: int
    game_diff: int


def select_qualifiers(repo: TournamentRepository, tournament: Tournament) -> List[Qualifier]:
    """
    Rank every group and take its top qualifiers_per_group.

    Writes group_position on every group participant as a side effect.
    """
    per_group = tournament.qualifiers_per_group or DEFAULT_QUALIFIERS_PER_GROUP
    qualifiers: List[Qualifier] = []

    for group in repo.list_groups(tournament.id):
        members = repo.group_participants(group.id)
        matches = repo.list_matches(tournament.id, stage=MatchStage.group.value, group_id=group.id)
        table = compute_standings(members, matches)
        by_id = {p.id: p for p in members}

        for row in table:
            participant = by_id[row.participant_id]
            participant.group_position = row.rank
            repo.save(participant)

        for row in table[:per_group]:
            qualifiers.append(
                Qualifier(
                    participant_id=row.participant_id,
                    player_name=row.player_name,
                    group_id=group.id,
                    group_order=group.group_order,
                    group_position=row.rank,
                    won=row.won,
                    set_diff=row.set_diff,
                    game_diff=row.game_diff,
                )
            )

    return qualifiers


def _can_pair_across_groups(pool: Sequence[Qualifier]) -> bool:
    # A field splits into cross-group pairs iff no group holds more than half of it
    counts = Counter(q.group_id for q in pool)
    return not counts or max(counts.values()) * 2 <= len(pool)


def _pair_across_groups(pool: List[Qualifier]) -> Optional[List[Tuple[Qualifier, Qualifier]]]:
    """Pair highest remaining vs lowest remaining from another group, backtracking when the tail cannot be split."""
    if not pool:
        return []
    top, rest = pool[0], pool[1:]
    for index in range(len(rest) - 1, -1, -1):
        partner = rest[index]
        if partner.group_id == top.group_id:
            continue
        tail = rest[:index] + rest[index + 1:]
        if not _can_pair_across_groups(tail):
            continue
        tail_pairs = _pair_across_groups(tail)
        if tail_pairs is not None:
            return [(top, partner)] + tail_pairs
    return None


def _pair_greedily(pool: List[Qualifier]) -> List[Tuple[Qualifier, Qualifier]]:
    remaining = list(pool)
    pairs: List[Tuple[Qualifier, Qualifier]] = []
    while len(remaining) >= 2:
        top = remaining.pop(0)
        partner_index = len(remaining) - 1
        for index in range(len(remaining) - 1, -1, -1):
            if remaining[index].group_id != top.group_id:
                partner_index = index
                break
        pairs.append((top, remaining.pop(partner_index)))
    return pairs


def seed_qualifiers(qualifiers: Sequence[Qualifier]) -> List[SeededEntry]:
    """
    Assign knockout seeds across groups.

    Qualifiers are ranked by group position, wins, set difference, game
    difference, group order. The top ones take the byes. The rest are paired
    highest remaining vs lowest remaining from another group; two players from
    the same group meet in round one only when no cross-group split of the
    field exists. Seeds are chosen so the folded bracket (s meets P+1-s)
    reproduces those pairs.
    """
    ranked = sorted(
        qualifiers,
        key=lambda q: (q.group_position, -q.won, -q.set_diff, -q.game_diff, q.group_order, q.participant_id),
    )
    total = len(ranked)
    if total < 2:
        raise InsufficientParticipantsError(f"A knockout stage needs at least 2 qualifiers, got {total}")
    byes = next_power_of_two(total) - total

    seeded: Dict[int, Qualifier] = {}
    for index in range(byes):
        seeded[index + 1] = ranked[index]

    pool = list(ranked[byes:])
    pairs = None
    if _can_pair_across_groups(pool):
        pairs = _pair_across_groups(pool)
    if pairs is None:
        logger.warning("Qualifiers cannot all be split across groups; same-group pairs are unavoidable")
        pairs = _pair_greedily(pool)

    for pair, (top, partner) in enumerate(pairs):
        seeded[byes + 1 + pair] = top
        seeded[total - pair] = partner

    return [
        SeededEntry(seed=seed, participant_id=q.participant_id, display_name=q.player_name, group_id=q.group_id)
        for seed, q in sorted(seeded.items())
    ]


def advance_from_groups(repo: TournamentRepository, tournament_id: int) -> Dict:
    """
    AdvanceFromGroups: close the group stage and build the knockout bracket from the qualifiers.

    Phase: group_stage -> knockout.
    """
    tournament = require_format(repo.get_tournament(tournament_id), TournamentFormat.groups_then_knockout.value)

    if tournament.phase in (TournamentPhase.knockout.value, TournamentPhase.completed.value):
        raise AlreadyGeneratedError(f"Knockout stage already generated for tournament {tournament_id}")
    if tournament.phase == TournamentPhase.enrollment.value or not repo.list_groups(tournament_id):
        raise GroupStageIncompleteError(f"Groups have not been generated for tournament {tournament_id}")

    group_matches = repo.list_matches(tournament_id, stage=MatchStage.group.value)
    pending = [m for m in group_matches if not m.is_finished]
    if pending:
        raise GroupStageIncompleteError(
            f"{len(pending)} of {len(group_matches)} group matches are not finished"
        )

    try:
        claim_phase(repo, tournament, TournamentPhase.group_stage.value, TournamentPhase.knockout.value)
        qualifiers = select_qualifiers(repo, tournament)
        entries = seed_qualifiers(qualifiers)
        plan = build_bracket(entries)
        matches = persist_bracket(repo, tournament, plan)
        qualified = [
            {
                "participant_id": e.participant_id,
                "player_name": e.display_name,
                "group_id": e.group_id,
                "seed": e.seed,
            }
            for e in entries
        ]
        repo.commit()
    except Exception:
        repo.rollback()
        raise

    logger.info(
        "Tournament %s advanced %s qualifiers into a bracket of %s (%s matches)",
        tournament_id, len(entries), plan.bracket_size, len(matches),
    )
    return {
        "tournament_id": tournament_id,
        "phase": TournamentPhase.knockout.value,
        "qualifiers": qualified,
        "bracket_size": plan.bracket_size,
        "byes": plan.bye_count,
        "matches_created": len(matches),
    }
