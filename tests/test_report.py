import json

import pytest

from ffl.config import SeasonConfig
from ffl.constants import SCHEMA_VERSION
from ffl.errors import FetchError
from ffl.models import Matchup, Member, WeeklyScore
from ffl.report import build_season_context, format_json, format_markdown, player_history, season_performance
from ffl.report.render import fmt_points, md_table

WEEKLY_POINTS = {
    "a": [100.0, 60.0, 120.0, 130.0],
    "b": [90.0, 110.0, 50.0, 40.0],
    "c": [80.0, 95.0, 70.0, 65.0],
    "d": [70.0, 85.0, 60.0, 55.0],
}
PAIRINGS = {1: [("a", "b"), ("c", "d")], 2: [("a", "c"), ("b", "d")], 3: [("a", "b"), ("c", "d")], 4: [("a", "c")]}


def _members(season):
    divisions = {"a": "East", "b": "East", "c": "West", "d": "West"}
    return [Member(id=k, manager_name=f"Manager {k}", team_name=f"Team {k}", season=season, division=v) for k, v in divisions.items()]


def _scores(season, weeks=4):
    return [
        WeeklyScore(member_id=mid, week_number=w, points=pts[w - 1], season=season)
        for w in range(1, weeks + 1)
        for mid, pts in WEEKLY_POINTS.items()
    ]


def _matchups():
    return [Matchup(w, a, b) for w, pairs in PAIRINGS.items() for a, b in pairs]


def _config(**overrides):
    row = {"total_weeks": 4, "playoff_start_week": 3, "playoff_spots": 2, "divisions": ["East", "West"]}
    row.update(overrides)
    return SeasonConfig.from_row(row)


class FakeSeasonStore:
    def __init__(self, seasons):
        self.seasons = seasons
        self.calls = []

    def fetch_season_config(self, league_id, season):
        self.calls.append(("config", season))
        return self.seasons[season]["config"]

    def fetch_members(self, league_id, season, *, active_only=False):
        self.calls.append(("members", season))
        return self.seasons[season]["members"]

    def fetch_weekly_scores(self, league_id, season, max_week=None):
        self.calls.append(("scores", season))
        return self.seasons[season]["scores"]

    def fetch_matchups(self, league_id, season, max_week=None):
        self.calls.append(("matchups", season))
        return self.seasons[season]["matchups"]


def _store(config=None, weeks=4):
    return FakeSeasonStore(
        {"2024": {"config": config or _config(), "members": _members("2024"), "scores": _scores("2024", weeks), "matchups": _matchups()}}
    )


def test_regular_season_context():
    store = _store()
    ctx = build_season_context(store, "L1", "2024")
    assert ctx.through_week == 2
    assert ctx.seeding_week == 2
    assert ctx.standings_mode == "matchups"
    assert [e.member_id for e in ctx.standings] == ["c", "b", "a", "d"]
    assert [(s.seed, s.member.id, s.is_division_winner) for s in ctx.playoff_seeds] == [(1, "c", True), (2, "b", True)]
    assert [g["division"] for g in ctx.division_standings] == ["East", "West"]
    assert [r["member_id"] for r in ctx.division_standings[0]["rows"]] == ["b", "a"]
    # every read happens once, before any computation
    assert [c[0] for c in store.calls] == ["config", "members", "scores", "matchups"]


def test_special_prizes_cover_the_full_season():
    ctx = build_season_context(_store(), "L1", "2024")
    prizes = ctx.special_prizes
    assert prizes.fourth_place.member.id == "d"
    assert prizes.fourth_place.value == 270.0
    assert (prizes.highest_weekly.member.id, prizes.highest_weekly.value, prizes.highest_weekly.week) == ("a", 130.0, 4)
    assert (prizes.lowest_weekly.member.id, prizes.lowest_weekly.week) == ("b", 4)
    assert ctx.prize_amounts["first"] == 500.0
    assert ctx.prize_amounts["fourth"] == 0.0


def test_postseason_applies_final_placings_but_seeds_stay_regular_season():
    config = _config(final_winners={"first": "a", "second": "c", "third": "b"})
    ctx = build_season_context(_store(config), "L1", "2024", include_postseason=True)
    assert ctx.through_week == 4
    assert ctx.seeding_week == 2
    assert [e.member_id for e in ctx.standings] == ["a", "c", "b", "d"]
    assert [s.member.id for s in ctx.playoff_seeds] == ["c", "b"]


def test_week_limit_and_overrides():
    ctx = build_season_context(_store(), "L1", "2024", week_limit=1, config_overrides={"playoff_spots": 3})
    assert ctx.through_week == 1
    assert len(ctx.playoff_seeds) == 3
    assert [e.member_id for e in ctx.standings][:2] == ["a", "c"]
    ctx = build_season_context(_store(), "L1", "2024", week_limit=40)
    assert ctx.through_week == 4


def test_points_mode_when_matchups_disabled():
    ctx = build_season_context(_store(), "L1", "2024", use_matchups=False)
    assert ctx.standings_mode == "points"
    assert ctx.standings[0].wins is None
    # points through week 2: b 200, c 175, a 160, d 155
    assert [e.member_id for e in ctx.standings] == ["b", "c", "a", "d"]


def test_fetch_errors_propagate():
    class Broken(FakeSeasonStore):
        def fetch_weekly_scores(self, league_id, season, max_week=None):
            raise FetchError("timeout")

    store = Broken(_store().seasons)
    with pytest.raises(FetchError):
        build_season_context(store, "L1", "2024")


def test_markdown_and_json_output():
    ctx = build_season_context(_store(), "L1", "2024")
    md = format_markdown(ctx)
    assert md.startswith("# League L1 Season 2024\n")
    assert "## Standings Through Week 2" in md
    assert "## Playoff Seeds (Through Week 2)" in md
    assert "### East Division" in md
    assert "| 4th Place | Manager d | 270.00 | - | 0.00 |" in md
    assert md.endswith("\n") and not md.endswith("\n\n")

    payload = json.loads(format_json(ctx, SCHEMA_VERSION))
    assert payload["schema_version"] == SCHEMA_VERSION
    assert payload["metadata"]["standings_through_week"] == 2
    assert payload["playoff_seeds"][0]["type"] == "Division Winner"
    assert payload["standings"][0]["member_id"] == "c"
    assert payload["special_prizes"]["fourth_place"]["week"] is None
    assert format_json(ctx, SCHEMA_VERSION, pretty=True).startswith("{\n  ")


def test_markdown_helpers():
    assert md_table(["a|b"], [[1]]) == ["| a\\|b |", "| :--- |", "| 1 |"]
    assert fmt_points(None) == "-"
    assert fmt_points(101.5) == "101.50"


def test_season_performance_statuses():
    members = _members("2024")
    scores = _scores("2024")
    matchups = _matchups()
    config = _config(final_winners={"first": "a", "second": "c", "third": "b"})

    champion = season_performance("Manager a", "2024", config, members, scores, matchups)
    assert (champion.status, champion.position) == ("champion", 1)
    assert champion.symbol == "👑"
    assert champion.title == "2024 Champion (1st Place)"

    missed = season_performance("Manager d", "2024", config, members, scores, matchups)
    assert (missed.status, missed.position) == ("participated", 4)

    plain = _config()
    seeded = season_performance("Manager b", "2024", plain, members, scores, matchups)
    assert (seeded.status, seeded.position) == ("playoffs", 2)
    assert seeded.title == "2024 Playoffs (#2 regular season)"

    incomplete = season_performance("Manager a", "2024", config, members, _scores("2024", weeks=2), matchups)
    assert incomplete.status == "participated"
    assert incomplete.position is None

    stranger = season_performance("Nobody", "2024", config, members, scores, matchups)
    assert stranger.status == "participated"


def test_player_history_sorted_by_season():
    store = FakeSeasonStore(
        {
            "2024": {"config": _config(), "members": _members("2024"), "scores": _scores("2024"), "matchups": _matchups()},
            "2023": {
                "config": _config(final_winners={"second": "b"}),
                "members": _members("2023"),
                "scores": _scores("2023"),
                "matchups": _matchups(),
            },
        }
    )
    history = player_history(store, "L1", "Manager b", ["2024", "2023"])
    assert [(p.season, p.status) for p in history] == [("2023", "second"), ("2024", "playoffs")]
    assert history[0].to_dict()["symbol"] == "🥈"
