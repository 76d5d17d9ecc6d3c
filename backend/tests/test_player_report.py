"""
Cross-tournament player report: rankings, champions, overview, bye exclusion.
"""
from fastapi.testclient import TestClient

from tests.helpers import straight_sets
from tournament_engine.services.generation_service import generate_bracket, generate_championship
from tournament_engine.services.report_service import build_player_report, build_tournament_summary, win_rate
from tournament_engine.services.result_service import report_match_result


def _play_bracket_chalk(repo, tournament_id):
    """Four-player bracket where slot A always wins: seed 1 is champion."""
    generate_bracket(repo, tournament_id)
    m1, m2, final = repo.list_matches(tournament_id)
    report_match_result(repo, m1.id, sets=straight_sets("A", games=0))
    report_match_result(repo, m2.id, sets=straight_sets("A", games=1))
    report_match_result(repo, final.id, sets=straight_sets("A", games=1))


class TestWinRate:
    def test_zero_matches(self):
        assert win_rate(0, 0) == 0.0

    def test_two_decimals(self):
        assert win_rate(1, 3) == 33.33
        assert win_rate(2, 2) == 100.0


class TestPlayerReport:
    def test_completed_bracket(self, repo, make_tournament):
        t = make_tournament("single_elimination", players=4)
        _play_bracket_chalk(repo, t.id)

        report = build_player_report(repo)
        rankings = report["player_rankings"]
        assert [p["player_id"] for p in rankings] == [1001, 1002, 1003, 1004]
        assert [p["rank"] for p in rankings] == [1, 2, 3, 4]

        champion = rankings[0]
        assert champion["tournaments_won"] == 1
        assert champion["tournaments_played"] == 1
        assert (champion["matches_played"], champion["matches_won"], champion["matches_lost"]) == (2, 2, 0)
        assert (champion["sets_won"], champion["sets_lost"]) == (4, 0)
        assert (champion["games_won"], champion["games_lost"]) == (24, 2)
        assert champion["win_rate"] == 100.0

        runner_up = rankings[1]
        assert runner_up["win_rate"] == 50.0
        assert rankings[3]["win_rate"] == 0.0
        assert all(0 <= p["win_rate"] <= 100 for p in rankings)

        overview = report["overview"]
        assert overview["total_tournaments"] == 1
        assert overview["completed_tournaments"] == 1
        assert overview["active_tournaments"] == 0
        assert overview["total_players"] == 4
        assert overview["total_matches"] == 3
        assert overview["completed_matches"] == 3
        assert overview["total_sets"] == 6

        stats = report["tournament_stats"][0]
        assert stats["champion"] == "Player 1"
        assert stats["completion_rate"] == 100.0

    def test_byes_excluded(self, repo, make_tournament):
        t = make_tournament("single_elimination", players=3)
        generate_bracket(repo, t.id)

        report = build_player_report(repo)
        assert report["overview"]["total_matches"] == 2
        assert report["overview"]["completed_matches"] == 0
        assert report["overview"]["active_tournaments"] == 1
        assert report["overview"]["active_players"] == 3
        # nobody has played a real match yet
        assert report["player_rankings"] == []

    def test_players_merged_across_tournaments(self, repo, make_tournament):
        first = make_tournament("single_elimination", players=4)
        _play_bracket_chalk(repo, first.id)

        league = make_tournament("round_robin", players=3, match_format="best_of_1")
        generate_championship(repo, league.id)
        for match in repo.list_matches(league.id):
            report_match_result(repo, match.id, sets=[{"set_number": 1, "games_a": 6, "games_b": 3}])
        assert repo.get_tournament(league.id).phase == "completed"

        report = build_player_report(repo)
        by_player = {p["player_id"]: p for p in report["player_rankings"]}
        assert by_player[1001]["tournaments_played"] == 2
        assert by_player[1004]["tournaments_played"] == 1
        assert sum(p["tournaments_won"] for p in by_player.values()) == 2
        assert report["overview"]["completed_tournaments"] == 2
        assert report["overview"]["total_players"] == 4

        league_stats = next(s for s in report["tournament_stats"] if s["tournament_id"] == league.id)
        assert league_stats["matches_total"] == 3
        assert league_stats["champion"] is not None

    def test_top_performers(self, repo, make_tournament):
        t = make_tournament("single_elimination", players=4)
        _play_bracket_chalk(repo, t.id)

        top = build_player_report(repo)["top_performers"]
        assert [p["player_id"] for p in top["most_tournaments_won"]] == [1001]
        # nobody reached the minimum number of matches
        assert top["highest_win_rate"] == []
        assert top["most_matches_played"][0]["matches_played"] == 2

    def test_limit(self, repo, make_tournament):
        t = make_tournament("single_elimination", players=4)
        _play_bracket_chalk(repo, t.id)
        assert len(build_player_report(repo, limit=2)["player_rankings"]) == 2

    def test_tournament_summary(self, repo, make_tournament):
        make_tournament("single_elimination", players=4)
        t = make_tournament("round_robin", players=4)
        generate_championship(repo, t.id)

        summary = build_tournament_summary(repo)
        assert summary["total"] == 2
        assert summary["by_phase"]["enrollment"] == 1
        assert summary["by_phase"]["group_stage"] == 1
        assert summary["by_phase"]["completed"] == 0
        assert summary["by_format"]["round_robin"] == 1


class TestReportEndpoints:
    def test_players_report(self, client: TestClient, repo, make_tournament):
        t = make_tournament("single_elimination", players=4)
        _play_bracket_chalk(repo, t.id)

        response = client.get("/api/reports/players")
        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"overview", "player_rankings", "tournament_stats", "top_performers"}
        assert body["player_rankings"][0]["player_name"] == "Player 1"

    def test_limit_bounds(self, client: TestClient):
        assert client.get("/api/reports/players", params={"limit": 0}).status_code == 422
        assert client.get("/api/reports/players", params={"limit": 51}).status_code == 422

    def test_stats_endpoint(self, client: TestClient, make_tournament):
        make_tournament("single_elimination", players=4)
        response = client.get("/api/tournaments/stats")
        assert response.status_code == 200
        assert response.json()["total"] == 1
