import pytest

from ffl.api.espn import EspnMatchup, EspnWeek
from ffl.errors import FetchError, TeamMappingError
from ffl.importer import EspnImportService
from ffl.models import Member

MEMBERS = [
    Member(id="m1", manager_name="Pat Lee", team_name="Hawks", season="2024"),
    Member(id="m2", manager_name="Sam Roe", team_name="Owls", season="2024"),
]
ESPN_MEMBERS = [
    {"id": "{A}", "firstName": "Pat", "lastName": "Lee"},
    {"id": "{B}", "firstName": "Sam", "lastName": "Roe"},
]
ESPN_TEAMS = [
    {"id": 1, "name": "Pat's Team", "owners": ["{A}"]},
    {"id": 2, "name": "Sam's Team", "owners": ["{B}"]},
]


class FakeStore:
    def __init__(self, members=MEMBERS, existing=(), fail_upsert=False):
        self.members = list(members)
        self.existing = set(existing)
        self.fail_upsert = fail_upsert
        self.upserts = []
        self.inserted = []
        self.statuses = []

    def fetch_members(self, league_id, season, *, active_only=False):
        return list(self.members)

    def upsert_weekly_scores(self, league_id, season, week, scores):
        if self.fail_upsert:
            raise FetchError("write refused")
        self.upserts.append((week, scores))
        return len(scores)

    def matchup_exists(self, league_id, season, week, a, b):
        return (week, a, b) in self.existing or (week, b, a) in self.existing

    def insert_matchup(self, league_id, season, week, a, b):
        self.inserted.append((week, a, b))

    def update_sync_status(self, league_id, status, synced_at=None):
        self.statuses.append((status, synced_at))


class FakeEspn:
    def __init__(self, teams=ESPN_TEAMS):
        self.teams = teams

    def get_teams_and_members(self):
        return self.teams, ESPN_MEMBERS

    def get_week_data(self, week):
        return EspnWeek(week=week, matchups=[EspnMatchup(2, "Sam's Team", 1, "Pat's Team", 101.5, 99.0)], is_complete=True)

    def test_connection(self):
        return True

    def get_current_week(self):
        return 5


def test_preview_maps_scores_and_matchups_without_writing():
    store = FakeStore()
    data = EspnImportService(store, FakeEspn(), "L1", "2024").preview_week(3)
    assert data.to_dict() == {
        "week": 3,
        "is_complete": True,
        "scores": [
            {"member_id": "m2", "points": 101.5, "team_name": "Owls"},
            {"member_id": "m1", "points": 99.0, "team_name": "Hawks"},
        ],
        "matchups": [{"team1_member_id": "m2", "team2_member_id": "m1"}],
    }
    assert store.upserts == [] and store.inserted == [] and store.statuses == []


def test_import_week_writes_scores_matchups_and_status():
    store = FakeStore()
    result = EspnImportService(store, FakeEspn(), "L1", "2024").import_week(3)
    assert result.success
    assert (result.imported_scores, result.imported_matchups) == (2, 1)
    assert result.message == "Successfully imported 2 scores and 1 matchups for week 3"
    assert store.inserted == [(3, "m2", "m1")]
    assert store.statuses[0][0] == "active"
    assert store.statuses[0][1] is not None


def test_existing_matchup_in_either_orientation_is_not_duplicated():
    store = FakeStore(existing={(3, "m1", "m2")})
    result = EspnImportService(store, FakeEspn(), "L1", "2024").import_week(3)
    assert result.imported_matchups == 0
    assert store.inserted == []


def test_failed_import_marks_sync_error_and_reraises():
    store = FakeStore(fail_upsert=True)
    with pytest.raises(FetchError):
        EspnImportService(store, FakeEspn(), "L1", "2024").import_week(3)
    assert store.statuses == [("error", None)]


def test_mapping_failure_raises_team_mapping_error():
    teams = ESPN_TEAMS + [{"id": 9, "name": "Nobody", "owners": ["{Q}"]}]
    store = FakeStore()
    with pytest.raises(TeamMappingError) as info:
        EspnImportService(store, FakeEspn(teams=teams), "L1", "2024").import_week(3)
    assert any("Nobody" in line for line in info.value.errors)
    assert store.statuses == [("error", None)]


def test_no_members_is_a_mapping_error():
    with pytest.raises(TeamMappingError, match="No league members"):
        EspnImportService(FakeStore(members=[]), FakeEspn(), "L1", "2024").preview_week(1)


def test_passthrough_helpers():
    service = EspnImportService(FakeStore(), FakeEspn(), "L1", "2024")
    assert service.test_connection() is True
    assert service.get_current_week() == 5
