"""
Single-elimination bracket generation.

Entries are ranked by seed and padded with byes up to the next power of two.
Placement follows the folded bracket: seed 1 meets seed P, seed 2 meets
seed P-1, and so on, recursively halved so that if chalk holds seed 1 meets
seed 2 in the final. Byes always fall on the top seeds.

The plan is pure data; persisting it is the generation service's job.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from tournament_engine.errors import InsufficientParticipantsError
from tournament_engine.models.match import BYE_PLACEHOLDER

# Keyed by number of matches in the round
ROUND_LABELS: Dict[int, str] = {
    1: "Finale",
    2: "Semifinale",
    4: "Quarti di finale",
    8: "Ottavi di finale",
}


@dataclass
class SeededEntry:
    """Lightweight struct for bracket input."""
    seed: int
    participant_id: int
    display_name: Optional[str] = None
    group_id: Optional[int] = None

    @property
    def label(self) -> str:
        return self.display_name or f"SEED_{self.seed}"


@dataclass
class PlannedMatch:
    match_number: int  # 1-based, local to the plan
    round_order: int
    round_label: str
    bracket_position: int  # 1-based within the round
    entry_a: Optional[SeededEntry] = None
    entry_b: Optional[SeededEntry] = None
    placeholder_a: str = "TBD"
    placeholder_b: str = "TBD"
    source_a: Optional[int] = None  # match_number of the feeder for slot A
    source_b: Optional[int] = None
    is_bye: bool = False
    winner: Optional[SeededEntry] = None


@dataclass
class BracketPlan:
    bracket_size: int
    round_count: int
    matches: List[PlannedMatch] = field(default_factory=list)

    def round_matches(self, round_order: int) -> List[PlannedMatch]:
        return [m for m in self.matches if m.round_order == round_order]

    @property
    def bye_count(self) -> int:
        return sum(1 for m in self.matches if m.is_bye)


def next_power_of_two(n: int) -> int:
    size = 1
    while size < n:
        size *= 2
    return size


def round_label(matches_in_round: int, round_order: int) -> str:
    return ROUND_LABELS.get(matches_in_round, f"Round {round_order}")


def bracket_fold_positions(n: int) -> List[int]:
    """Standard bracket-fold positions for *n* entries (n a power of two).

    Returns a flat list of seed numbers in bracket position order.
    Consecutive pairs indicate which seeds meet in round one:
      4-entry  -> [1, 4, 2, 3]       -> (1v4), (2v3)
      8-entry  -> [1, 8, 4, 5, ...]   -> (1v8), (4v5), ...
      16-entry -> [1, 16, 8, 9, ...]   -> (1v16), (8v9), ...
    """
    if n == 2:
        return [1, 2]

    half = bracket_fold_positions(n // 2)

    expanded: List[int] = []
    for s in half:
        expanded.append(s)
        expanded.append(n + 1 - s)

    mid = len(expanded) // 2
    top = expanded[:mid]
    bot = expanded[mid:]
    if len(bot) >= 4:
        bot = bot[:-4] + bot[-2:] + bot[-4:-2]

    return top + bot


def rank_entries(entries: Sequence[SeededEntry]) -> List[SeededEntry]:
    """Renumber entries 1..M by seed order, keeping participant_id as the tie-break."""
    ordered = sorted(entries, key=lambda e: (e.seed, e.participant_id))
    return [
        SeededEntry(seed=rank, participant_id=e.participant_id, display_name=e.display_name, group_id=e.group_id)
        for rank, e in enumerate(ordered, start=1)
    ]


def build_bracket(entries: Sequence[SeededEntry]) -> BracketPlan:
    """Build the complete single-elimination plan for *entries*.

    P - 1 matches over log2(P) rounds. Round-one byes are born finished and
    their winner is already placed in the round-two slot they feed.
    """
    if len(entries) < 2:
        raise InsufficientParticipantsError(
            f"A bracket needs at least 2 participants, got {len(entries)}"
        )

    ranked = rank_entries(entries)
    by_seed = {e.seed: e for e in ranked}
    size = next_power_of_two(len(ranked))
    round_count = int(math.log2(size))
    plan = BracketPlan(bracket_size=size, round_count=round_count)

    positions = bracket_fold_positions(size)
    first_round = size // 2
    match_number = 1
    label = round_label(first_round, 1)
    for index in range(first_round):
        entry_a = by_seed.get(positions[2 * index])
        entry_b = by_seed.get(positions[2 * index + 1])
        planned = PlannedMatch(
            match_number=match_number,
            round_order=1,
            round_label=label,
            bracket_position=index + 1,
            entry_a=entry_a,
            entry_b=entry_b,
            placeholder_a=entry_a.label if entry_a else BYE_PLACEHOLDER,
            placeholder_b=entry_b.label if entry_b else BYE_PLACEHOLDER,
        )
        # Top seed always sits in slot A, so only slot B can be a bye
        if entry_b is None:
            planned.is_bye = True
            planned.winner = entry_a
        plan.matches.append(planned)
        match_number += 1

    previous = plan.round_matches(1)
    for round_order in range(2, round_count + 1):
        matches_in_round = size // (2 ** round_order)
        label = round_label(matches_in_round, round_order)
        current: List[PlannedMatch] = []
        for index in range(matches_in_round):
            feeder_a = previous[2 * index]
            feeder_b = previous[2 * index + 1]
            planned = PlannedMatch(
                match_number=match_number,
                round_order=round_order,
                round_label=label,
                bracket_position=index + 1,
                placeholder_a=f"Winner of M{feeder_a.match_number}",
                placeholder_b=f"Winner of M{feeder_b.match_number}",
                source_a=feeder_a.match_number,
                source_b=feeder_b.match_number,
            )
            if feeder_a.winner is not None:
                planned.entry_a = feeder_a.winner
                planned.placeholder_a = feeder_a.winner.label
            if feeder_b.winner is not None:
                planned.entry_b = feeder_b.winner
                planned.placeholder_b = feeder_b.winner.label
            current.append(planned)
            match_number += 1
        plan.matches.extend(current)
        previous = current

    return plan
