import math

import pytest

from ffl.errors import LeagueError, ScoreValidationError
from ffl.models import Matchup, WeeklyScore, parse_matchup, parse_member, parse_score


def test_parse_member_defaults():
    m = parse_member({"id": 7, "manager_name": "Pat Doe", "season": 2024, "division": ""})
    assert m.id == "7"
    assert m.season == "2024"
    assert m.division is None
    assert m.team_name == "-"
    assert m.is_active is True


def test_parse_score_accepts_numeric_strings():
    s = parse_score({"member_id": "m1", "week_number": "3", "points": "101.25", "season": "2024"})
    assert s.week_number == 3
    assert s.points == 101.25


@pytest.mark.parametrize(
    "row",
    [
        {"week_number": 1, "points": 10, "season": "2024"},
        {"member_id": "m1", "week_number": 0, "points": 10, "season": "2024"},
        {"member_id": "m1", "week_number": 1.5, "points": 10, "season": "2024"},
        {"member_id": "m1", "week_number": True, "points": 10, "season": "2024"},
        {"member_id": "m1", "week_number": 1, "points": -4, "season": "2024"},
        {"member_id": "m1", "week_number": 1, "points": "abc", "season": "2024"},
        {"member_id": "m1", "week_number": 1, "points": None, "season": "2024"},
        {"member_id": "m1", "week_number": 1, "points": math.nan, "season": "2024"},
    ],
)
def test_parse_score_rejects_malformed_rows(row):
    with pytest.raises(ScoreValidationError):
        parse_score(row)


def test_weekly_score_validates_directly():
    with pytest.raises(ScoreValidationError):
        WeeklyScore("m1", 1, math.inf, "2024")
    with pytest.raises(LeagueError):
        WeeklyScore("m1", -2, 10.0, "2024")


def test_parse_matchup_optional_scores():
    m = parse_matchup({"week_number": 2, "team1_member_id": "a", "team2_member_id": "b", "team1_score": 98.5})
    assert m.team1_score == 98.5
    assert m.team2_score is None
    assert m.outcome == "pending"
    with pytest.raises(ScoreValidationError):
        parse_matchup({"week_number": -1, "team1_member_id": "a", "team2_member_id": "b"})


def test_matchup_outcome():
    assert Matchup(1, "a", "b", 100.0, 90.0).outcome == "team1"
    assert Matchup(1, "a", "b", 90.0, 100.0).outcome == "team2"
    assert Matchup(1, "a", "b", 90.0, 90.0).outcome == "tie"


@pytest.mark.parametrize("row", [["m1", 1, 100.0], None, "m1,1,100", 42])
def test_non_mapping_rows_are_validation_errors(row):
    for parse in (parse_member, parse_score, parse_matchup):
        with pytest.raises(ScoreValidationError):
            parse(row)


@pytest.mark.parametrize("flag", [None, "false", "true", 0, 1])
def test_parse_member_requires_boolean_is_active(flag):
    with pytest.raises(ScoreValidationError, match="is_active"):
        parse_member({"id": "m1", "manager_name": "Pat", "season": "2024", "is_active": flag})


def test_parse_member_keeps_inactive_flag():
    assert parse_member({"id": "m1", "manager_name": "Pat", "season": "2024", "is_active": False}).is_active is False
