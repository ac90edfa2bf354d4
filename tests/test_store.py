import datetime
import json

import pytest
import responses
from responses import matchers

from ffl.api.store import LeagueStore
from ffl.errors import FetchError

BASE = "https://example.supabase.co"
REST = BASE + "/rest/v1"


def _store():
    return LeagueStore(base_url=BASE, api_key="anon-key")


def test_missing_configuration_raises(monkeypatch):
    monkeypatch.setattr("ffl.config.SUPABASE_URL", "")
    monkeypatch.setattr("ffl.config.SUPABASE_ANON_KEY", "")
    with pytest.raises(FetchError):
        LeagueStore(base_url="", api_key="")


@responses.activate
def test_fetch_members_sends_filters_and_auth_headers():
    responses.add(
        responses.GET,
        f"{REST}/league_members",
        json=[
            {"id": "m1", "manager_name": "Pat", "team_name": "Hawks", "division": "East", "is_active": True, "season": "2024"},
            {"id": "m2", "manager_name": "Sam", "team_name": "Owls", "division": None, "is_active": True, "season": "2024"},
        ],
        match=[
            matchers.query_param_matcher(
                {
                    "select": "id,manager_name,team_name,division,is_active,season",
                    "league_id": "eq.L1",
                    "season": "eq.2024",
                    "order": "created_at.asc",
                    "is_active": "eq.true",
                }
            ),
            matchers.header_matcher({"apikey": "anon-key", "Authorization": "Bearer anon-key"}),
        ],
    )
    members = _store().fetch_members("L1", "2024", active_only=True)
    assert [m.id for m in members] == ["m1", "m2"]
    assert members[0].division == "East"


@responses.activate
def test_malformed_score_rows_are_dropped(caplog):
    responses.add(
        responses.GET,
        f"{REST}/weekly_scores",
        json=[
            {"member_id": "m1", "week_number": 1, "points": 101.5, "season": "2024"},
            {"member_id": "m2", "week_number": 0, "points": 99.0, "season": "2024"},
            {"member_id": "m3", "week_number": 1, "points": None, "season": "2024"},
        ],
    )
    scores = _store().fetch_weekly_scores("L1", "2024", max_week=14)
    assert [(s.member_id, s.points) for s in scores] == [("m1", 101.5)]
    assert "Dropping malformed weekly score row" in caplog.text
    assert "week_number=lte.14" in responses.calls[0].request.url


@responses.activate
def test_http_error_becomes_fetch_error():
    responses.add(responses.GET, f"{REST}/matchups", status=400, json={"message": "bad filter"})
    with pytest.raises(FetchError):
        _store().fetch_matchups("L1", "2024")


@responses.activate
def test_connection_error_becomes_fetch_error():
    with pytest.raises(FetchError):
        _store().fetch_members("L1", "2024")


@responses.activate
def test_non_list_payload_is_rejected():
    responses.add(responses.GET, f"{REST}/league_members", json={"message": "nope"})
    with pytest.raises(FetchError, match="Unexpected payload"):
        _store().fetch_members("L1", "2024")


@responses.activate
def test_fetch_season_config_defaults_when_missing():
    responses.add(responses.GET, f"{REST}/league_seasons", json=[])
    cfg = _store().fetch_season_config("L1", "2024")
    assert cfg.playoff_spots == 6


@responses.activate
def test_fetch_season_config_parses_row():
    responses.add(
        responses.GET,
        f"{REST}/league_seasons",
        json=[{"total_weeks": 17, "playoff_start_week": 15, "playoff_spots": 4, "divisions": {"divisions": ["A", "B"]}}],
    )
    cfg = _store().fetch_season_config("L1", "2024")
    assert cfg.playoff_spots == 4
    assert cfg.divisions == ("A", "B")


@responses.activate
def test_fetch_seasons():
    responses.add(responses.GET, f"{REST}/league_seasons", json=[{"season": "2023"}, {"season": 2024}, {"season": None}])
    assert _store().fetch_seasons("L1") == ["2023", "2024"]


@responses.activate
def test_upsert_weekly_scores_merges_duplicates():
    responses.add(
        responses.POST,
        f"{REST}/weekly_scores",
        status=201,
        body="",
        match=[
            matchers.query_param_matcher({"on_conflict": "league_id,member_id,week_number,season"}),
            matchers.header_matcher({"Prefer": "resolution=merge-duplicates,return=minimal"}),
        ],
    )
    count = _store().upsert_weekly_scores("L1", "2024", 3, [{"member_id": "m1", "points": 88.0, "team_name": "x"}])
    assert count == 1
    sent = json.loads(responses.calls[0].request.body)
    assert sent == [{"league_id": "L1", "season": "2024", "week_number": 3, "member_id": "m1", "points": 88.0}]


def test_upsert_with_no_rows_sends_nothing():
    assert _store().upsert_weekly_scores("L1", "2024", 3, []) == 0


@responses.activate
def test_matchup_exists_and_insert():
    responses.add(responses.GET, f"{REST}/matchups", json=[{"id": "x"}])
    responses.add(responses.POST, f"{REST}/matchups", status=201, body="")
    store = _store()
    assert store.matchup_exists("L1", "2024", 2, "m1", "m2") is True
    assert "team1_member_id.eq" in responses.calls[0].request.url
    store.insert_matchup("L1", "2024", 2, "m1", "m2")
    assert json.loads(responses.calls[1].request.body)["team2_member_id"] == "m2"


@responses.activate
def test_update_sync_status():
    responses.add(responses.PATCH, f"{REST}/leagues", status=204, body="")
    when = datetime.datetime(2024, 10, 1, 12, 0, tzinfo=datetime.timezone.utc)
    _store().update_sync_status("L1", "active", synced_at=when)
    body = json.loads(responses.calls[0].request.body)
    assert body == {"sync_status": "active", "last_sync_at": "2024-10-01T12:00:00+00:00"}
    assert "id=eq.L1" in responses.calls[0].request.url


@responses.activate
def test_non_object_rows_are_dropped_not_fatal(caplog):
    responses.add(
        responses.GET,
        f"{REST}/weekly_scores",
        json=[["m1", 1, 100.0], {"member_id": "m2", "week_number": 1, "points": 90.0, "season": "2024"}],
    )
    scores = _store().fetch_weekly_scores("L1", "2024")
    assert [s.member_id for s in scores] == ["m2"]
    assert "Dropping malformed weekly score row" in caplog.text


@responses.activate
def test_special_prizes_survive_malformed_store_rows():
    from ffl.compute import calculate_special_prizes
    from ffl.models import Member

    responses.add(responses.GET, f"{REST}/weekly_scores", json=[["m1", 1, 100.0]])
    members = [Member(id="m1", manager_name="Pat", team_name="Hawks", season="2024")]
    prizes = calculate_special_prizes(_store(), "L1", "2024", members)
    assert prizes.is_empty()
