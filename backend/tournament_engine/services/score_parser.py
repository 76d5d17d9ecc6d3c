"""
Score parsing for display strings and stored set lists.

Display strings (ReportMatchResult may send one instead of a set list):
  "6-4"                 -> 1 set
  "6-4 3-6 7-6(7-5)"    -> 3 sets, tiebreak in parentheses
  "6-4, 3-6, 7-6(7-5)"  -> comma-separated variant

Stored set lists (Match.sets_json) are summed into ParsedScore totals
for standings and reports.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from tournament_engine.errors import InvalidScoreError

_SET_PATTERN = re.compile(r"^(\d+)-(\d+)(?:\((\d+)-(\d+)\))?$")


@dataclass
class ParsedScore:
    sets: List[Tuple[int, int]]  # (side_a_games, side_b_games) per set
    side_a_sets_won: int
    side_b_sets_won: int
    side_a_games: int
    side_b_games: int


def parse_score(sets_json: Optional[List[Dict[str, Any]]]) -> Optional[ParsedScore]:
    """Sum a stored set list into set/game counts.

    Returns None when there is nothing to count (walkovers, unplayed matches).
    """
    if not sets_json:
        return None

    sets: List[Tuple[int, int]] = []
    for s in sets_json:
        sets.append((int(s.get("games_a", 0)), int(s.get("games_b", 0))))

    return ParsedScore(
        sets=sets,
        side_a_sets_won=sum(1 for a, b in sets if a > b),
        side_b_sets_won=sum(1 for a, b in sets if b > a),
        side_a_games=sum(a for a, _ in sets),
        side_b_games=sum(b for _, b in sets),
    )


def parse_score_string(raw: str) -> List[Dict[str, Any]]:
    """Parse strings like '6-4 3-6 7-6(7-5)' into set dicts numbered from 1.

    Only the shape is checked here; tennis rules are applied when the dicts
    become SetScore objects.
    """
    normalized = raw.replace(",", " ").strip()
    parts = normalized.split()
    if not parts:
        raise InvalidScoreError("Score string is empty")

    result: List[Dict[str, Any]] = []
    for number, part in enumerate(parts, start=1):
        found = _SET_PATTERN.match(part)
        if not found:
            raise InvalidScoreError(f"Cannot parse set '{part}' in score '{raw}'")
        games_a, games_b, tb_a, tb_b = found.groups()
        set_dict: Dict[str, Any] = {
            "set_number": number,
            "games_a": int(games_a),
            "games_b": int(games_b),
        }
        if tb_a is not None:
            set_dict["tiebreak_a"] = int(tb_a)
            set_dict["tiebreak_b"] = int(tb_b)
        result.append(set_dict)

    return result
