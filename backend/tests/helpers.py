"""Shared payload builders for result tests."""


def straight_sets(winner_side: str = "A", games: int = 3):
    """Two-set win at 6-<games> for best_of_3 payloads."""
    if winner_side == "A":
        return [
            {"set_number": 1, "games_a": 6, "games_b": games},
            {"set_number": 2, "games_a": 6, "games_b": games},
        ]
    return [
        {"set_number": 1, "games_a": games, "games_b": 6},
        {"set_number": 2, "games_a": games, "games_b": 6},
    ]
