"""
Round-robin (all-play-all) schedules for championships and groups.

Circle method: position 0 is fixed, the others rotate one step per round.
Odd N gets an extra BYE position that rotates with the rest; pairings
against it are dropped, so every participant sits out exactly one round.
"""

from typing import List, Sequence, Tuple, TypeVar

from tournament_engine.errors import InsufficientParticipantsError

T = TypeVar("T")

# Pairing rows: (round_index, sequence_in_round, idx_a, idx_b)
Pairing = Tuple[int, int, int, int]


def rr_match_count(n: int) -> int:
    """Return number of RR matches: C(n, 2) = n*(n-1)/2."""
    return (n * (n - 1)) // 2


def rr_round_count(n: int) -> int:
    """
    Return number of RR rounds for n participants.
    Even n: n-1 rounds. Odd n: n rounds (with BYE).
    """
    if n % 2 == 0:
        return n - 1
    return n


def rr_pairings_by_round(n: int) -> List[Pairing]:
    """
    Round-robin pairings. Returns list of (round_index, sequence_in_round, idx_a, idx_b).
    idx_a, idx_b are 0-based positions in the input order, idx_a < idx_b.
    """
    if n < 2:
        raise InsufficientParticipantsError(f"A round robin needs at least 2 participants, got {n}")

    n2 = n + 1 if n % 2 == 1 else n  # Add BYE for odd n
    half = n2 // 2
    rounds_count = n2 - 1

    # For odd n, position n is the BYE
    bye_idx = n if n % 2 == 1 else -1

    result: List[Pairing] = []
    positions = list(range(n2))

    for round_num in range(1, rounds_count + 1):
        seq = 0
        for i in range(half):
            j = n2 - 1 - i
            a, b = positions[i], positions[j]
            if a == bye_idx or b == bye_idx:
                continue
            seq += 1
            result.append((round_num, seq, min(a, b), max(a, b)))
        # Rotate: keep 0, move last to second, shift others
        positions = [positions[0]] + [positions[-1]] + positions[1:-1]

    return result


def build_round_robin(entries: Sequence[T]) -> List[Tuple[int, int, T, T]]:
    """Pair up *entries* with rr_pairings_by_round; returns (round, seq, entry_a, entry_b)."""
    return [
        (round_num, seq, entries[idx_a], entries[idx_b])
        for round_num, seq, idx_a, idx_b in rr_pairings_by_round(len(entries))
    ]


def league_round_label(round_num: int) -> str:
    return f"Giornata {round_num}"


def snake_distribution(entries: Sequence[T], group_count: int) -> List[List[T]]:
    """
    Distribute entries (already in seed order) over groups by snake draft.

    With 3 groups: A, B, C, C, B, A, A, B, C, ...
    Top seeds end up in different groups and group sizes differ by at most one.
    """
    if group_count < 1:
        raise ValueError(f"group_count must be >= 1, got {group_count}")

    groups: List[List[T]] = [[] for _ in range(group_count)]
    index = 0
    direction = 1
    for entry in entries:
        groups[index].append(entry)
        index += direction
        if index >= group_count:
            index = group_count - 1
            direction = -1
        elif index < 0:
            index = 0
            direction = 1
    return groups


def group_name(group_index: int) -> str:
    """0 -> 'Girone A', 1 -> 'Girone B', ..."""
    letters = ""
    n = group_index
    while True:
        letters = chr(ord("A") + n % 26) + letters
        n = n // 26 - 1
        if n < 0:
            break
    return f"Girone {letters}"
