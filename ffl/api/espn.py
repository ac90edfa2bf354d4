"""ESPN fantasy football API client.

Reads go to the public read-only host first; when that fails and league
cookies (``espn_s2`` / ``SWID``) are configured, the private host is tried
with the cookies attached.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ffl.constants import REQUEST_TIMEOUT_SEC
from ffl.errors import FetchError

logger = logging.getLogger(__name__)

PUBLIC_BASE = "https://lm-api-reads.fantasy.espn.com/apis/v3/games/ffl/seasons"
PRIVATE_BASE = "https://fantasy.espn.com/apis/v3/games/ffl/seasons"
USER_AGENT = "Mozilla/5.0 (compatible; Fantasy-League-Manager/1.0)"
DEFAULT_REGULAR_SEASON_WEEKS = 17
MAX_NFL_WEEK = 18


@dataclass(slots=True, frozen=True)
class EspnLeague:
    id: int
    name: str
    size: int
    reg_season_count: int
    current_week: int


@dataclass(slots=True, frozen=True)
class EspnMatchup:
    home_team_id: int
    home_team_name: str
    away_team_id: int
    away_team_name: str
    home_score: float
    away_score: float


@dataclass(slots=True, frozen=True)
class EspnWeek:
    week: int
    matchups: list[EspnMatchup]
    is_complete: bool


def _team_name(team: dict) -> str:
    if team.get("location") and team.get("nickname"):
        return f"{team['location']} {team['nickname']}"
    return team.get("name") or f"Team {team.get('id')}"


def is_week_complete(matchups: list[EspnMatchup], now: datetime.datetime) -> bool:
    """A week is complete from Tuesday through Saturday once every matchup has two non-zero scores."""
    # NFL weeks end Monday night; Sunday and Monday still have games in play
    tuesday_or_later = 1 <= now.weekday() <= 5
    all_scored = all(m.home_score > 0 and m.away_score > 0 for m in matchups)
    return tuesday_or_later and bool(matchups) and all_scored


class EspnClient:
    def __init__(
        self,
        league_id: str,
        year: int,
        espn_s2: str | None = None,
        swid: str | None = None,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        self.league_id = str(league_id)
        self.year = int(year)
        self.espn_s2 = espn_s2
        self.swid = swid
        self.clock = clock

        self.session = requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT, "Content-Type": "application/json"})
        retry = Retry(
            total=3,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)

    def _url(self, base: str) -> str:
        return f"{base}/{self.year}/segments/0/leagues/{self.league_id}"

    def get_json(self, views: list[str], params: dict[str, str] | None = None) -> dict:
        """GET the league document for ``views`` (``view`` may repeat)."""
        query: list[tuple[str, str]] = [("view", v) for v in views]
        query.extend((params or {}).items())
        try:
            r = self.session.get(self._url(PUBLIC_BASE), params=query, timeout=REQUEST_TIMEOUT_SEC)
            if not r.ok and self.espn_s2 and self.swid:
                logger.info("Public ESPN endpoint returned %s; retrying with league cookies", r.status_code)
                r = self.session.get(
                    self._url(PRIVATE_BASE),
                    params=query,
                    cookies={"espn_s2": self.espn_s2, "SWID": self.swid},
                    timeout=REQUEST_TIMEOUT_SEC,
                )
        except requests.RequestException as exc:
            raise FetchError(f"ESPN request failed: {exc}") from exc
        if not r.ok:
            if "<!DOCTYPE html>" in r.text or r.status_code in (401, 403):
                if self.espn_s2 and self.swid:
                    raise FetchError("ESPN API requires valid authentication; check espn_s2 and SWID cookies")
                raise FetchError("ESPN league appears to be private; provide espn_s2 and SWID cookies")
            raise FetchError(f"ESPN API request failed: {r.status_code} {r.reason}")
        try:
            data = r.json()
        except ValueError as exc:
            raise FetchError("ESPN API returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise FetchError(f"Unexpected ESPN payload: {type(data).__name__}")
        return data

    def get_league(self) -> EspnLeague:
        data = self.get_json(["mSettings", "mTeam"])
        settings = data.get("settings")
        teams = data.get("teams")
        if not settings or teams is None:
            raise FetchError("Invalid league data received from ESPN")
        schedule = settings.get("scheduleSettings") or {}
        return EspnLeague(
            id=int(self.league_id),
            name=settings.get("name") or "ESPN League",
            size=len(teams),
            reg_season_count=int(schedule.get("matchupPeriodCount") or DEFAULT_REGULAR_SEASON_WEEKS),
            current_week=int(data.get("scoringPeriodId") or 1),
        )

    def get_teams_and_members(self) -> tuple[list[dict], list[dict]]:
        """Raw ``teams`` and ``members`` arrays used for manager name mapping."""
        data = self.get_json(["mTeam"])
        teams = data.get("teams")
        members = data.get("members")
        if teams is None or members is None:
            raise FetchError("Failed to get ESPN team and member data for mapping")
        return teams, members

    def get_week_data(self, week: int) -> EspnWeek:
        schedule_data = self.get_json(["mMatchup"], {"scoringPeriodId": str(week)})
        team_data = self.get_json(["mTeam"])
        schedule = schedule_data.get("schedule")
        if schedule is None:
            raise FetchError("No schedule data received from ESPN")
        if team_data.get("teams") is None:
            raise FetchError("No team data received from ESPN")
        names = {t.get("id"): _team_name(t) for t in team_data["teams"]}

        matchups: list[EspnMatchup] = []
        for m in schedule:
            if m.get("matchupPeriodId") != week:
                continue
            home = m.get("home") or {}
            away = m.get("away") or {}
            if "teamId" not in home or "teamId" not in away:
                # bye entries carry a single side
                continue
            matchups.append(
                EspnMatchup(
                    home_team_id=int(home["teamId"]),
                    home_team_name=names.get(home["teamId"], f"Team {home['teamId']}"),
                    away_team_id=int(away["teamId"]),
                    away_team_name=names.get(away["teamId"], f"Team {away['teamId']}"),
                    home_score=float(home.get("totalPoints") or 0),
                    away_score=float(away.get("totalPoints") or 0),
                )
            )
        if not matchups:
            raise FetchError(f"No matchups found for week {week}")
        return EspnWeek(week=week, matchups=matchups, is_complete=is_week_complete(matchups, self.clock()))

    def test_connection(self) -> bool:
        try:
            self.get_league()
        except FetchError as exc:
            logger.error("ESPN connection test failed: %s", exc)
            return False
        return True

    def get_current_week(self) -> int:
        try:
            return self.get_league().current_week
        except FetchError as exc:
            logger.warning("Failed to get current week from ESPN (%s); using calendar estimate", exc)
            return self.estimate_current_week()

    def estimate_current_week(self) -> int:
        """Calendar fallback: weeks since September 1st, clamped to 1..18."""
        now = self.clock()
        season_start = datetime.datetime(self.year, 9, 1, tzinfo=now.tzinfo)
        weeks_since = (now - season_start).days // 7
        return max(1, min(weeks_since + 1, MAX_NFL_WEEK))


def week_to_dict(week: EspnWeek) -> dict[str, Any]:
    return {
        "week": week.week,
        "is_complete": week.is_complete,
        "matchups": [
            {
                "home_team": {"team_id": m.home_team_id, "team_name": m.home_team_name},
                "away_team": {"team_id": m.away_team_id, "team_name": m.away_team_name},
                "home_score": m.home_score,
                "away_score": m.away_score,
            }
            for m in week.matchups
        ],
    }
