"""HTTP client for the hosted league database (Supabase PostgREST).

This module centralizes store access:
- A resilient requests.Session with retries and backoff for transient read errors
- Typed read helpers that validate rows at the boundary and drop bad records
- The handful of writes the importer needs (score upserts, matchups, sync status)

Every transport or HTTP failure surfaces as :class:`ffl.errors.FetchError`.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ffl import config
from ffl.config import SeasonConfig
from ffl.constants import REQUEST_TIMEOUT_SEC, USER_AGENT
from ffl.errors import FetchError, ScoreValidationError
from ffl.models import Matchup, Member, WeeklyScore, parse_matchup, parse_member, parse_score

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SEASON_COLUMNS = (
    "fee_amount,draft_food_cost,weekly_prize_amount,total_weeks,playoff_start_week,"
    "playoff_spots,prize_structure,divisions,final_winners"
)


def _parse_rows(rows: Iterable[dict], parse: Callable[[dict], T], kind: str) -> list[T]:
    out: list[T] = []
    for row in rows or []:
        try:
            out.append(parse(row))
        except ScoreValidationError as exc:
            logger.warning("Dropping malformed %s row: %s", kind, exc)
    return out


class LeagueStore:
    """Thin wrapper around requests.Session for the PostgREST endpoint.

    Configuration flows in via parameters or environment:
    - base_url: project URL (``SUPABASE_URL``); ``/rest/v1`` is appended
    - api_key: anon key (``SUPABASE_ANON_KEY``), sent as apikey + bearer token
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        base = (base_url or config.SUPABASE_URL).rstrip("/")
        key = api_key or config.SUPABASE_ANON_KEY
        if not base or not key:
            raise FetchError("Missing store configuration (SUPABASE_URL / SUPABASE_ANON_KEY)")
        self.rest_url = base + "/rest/v1"

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": USER_AGENT,
                "apikey": key,
                "Authorization": f"Bearer {key}",
                "Content-Type": "application/json",
            }
        )
        # Configure safe-idempotent retries for transient errors
        retry = Retry(
            total=5,
            connect=3,
            read=3,
            backoff_factor=0.5,
            status_forcelist=(408, 429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def request(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        payload: Any = None,
        prefer: str | None = None,
    ) -> Any:
        """Send one request to ``/rest/v1/<table>`` and return decoded JSON (or None)."""
        headers = {"Prefer": prefer} if prefer else None
        try:
            r = self.session.request(
                method,
                f"{self.rest_url}/{table}",
                params=params,
                json=payload,
                headers=headers,
                timeout=REQUEST_TIMEOUT_SEC,
            )
            r.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(f"{method} {table} failed: {exc}") from exc
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as exc:
            raise FetchError(f"{method} {table} returned invalid JSON") from exc

    def select(self, table: str, params: dict[str, str]) -> list[dict]:
        data = self.request("GET", table, params=params)
        if not isinstance(data, list):
            raise FetchError(f"Unexpected payload for {table}: {type(data).__name__}")
        return data

    # --- reads ---

    def fetch_members(self, league_id: str, season: str, *, active_only: bool = False) -> list[Member]:
        params = {
            "select": "id,manager_name,team_name,division,is_active,season",
            "league_id": f"eq.{league_id}",
            "season": f"eq.{season}",
            "order": "created_at.asc",
        }
        if active_only:
            params["is_active"] = "eq.true"
        return _parse_rows(self.select("league_members", params), parse_member, "member")

    def fetch_weekly_scores(self, league_id: str, season: str, max_week: int | None = None) -> list[WeeklyScore]:
        params = {
            "select": "member_id,week_number,points,season",
            "league_id": f"eq.{league_id}",
            "season": f"eq.{season}",
            "order": "week_number.asc,created_at.asc",
        }
        if max_week is not None:
            params["week_number"] = f"lte.{max_week}"
        return _parse_rows(self.select("weekly_scores", params), parse_score, "weekly score")

    def fetch_matchups(self, league_id: str, season: str, max_week: int | None = None) -> list[Matchup]:
        params = {
            "select": "week_number,team1_member_id,team2_member_id,team1_score,team2_score",
            "league_id": f"eq.{league_id}",
            "season": f"eq.{season}",
            "order": "week_number.asc,created_at.asc",
        }
        if max_week is not None:
            params["week_number"] = f"lte.{max_week}"
        return _parse_rows(self.select("matchups", params), parse_matchup, "matchup")

    def fetch_season_config(self, league_id: str, season: str) -> SeasonConfig:
        """Season configuration row, or the defaults when none has been saved."""
        rows = self.select(
            "league_seasons",
            {"select": _SEASON_COLUMNS, "league_id": f"eq.{league_id}", "season": f"eq.{season}", "limit": "1"},
        )
        if not rows:
            logger.info("No season config for league %s season %s; using defaults", league_id, season)
            return SeasonConfig()
        return SeasonConfig.from_row(rows[0])

    def fetch_seasons(self, league_id: str) -> list[str]:
        rows = self.select("league_seasons", {"select": "season", "league_id": f"eq.{league_id}", "order": "season.asc"})
        return [str(r["season"]) for r in rows if r.get("season")]

    # --- writes (importer) ---

    def upsert_weekly_scores(self, league_id: str, season: str, week: int, scores: list[dict]) -> int:
        """Insert or replace one week's scores; ``scores`` items carry member_id and points."""
        rows = [
            {
                "league_id": league_id,
                "season": season,
                "week_number": week,
                "member_id": s["member_id"],
                "points": s["points"],
            }
            for s in scores
        ]
        if not rows:
            return 0
        self.request(
            "POST",
            "weekly_scores",
            params={"on_conflict": "league_id,member_id,week_number,season"},
            payload=rows,
            prefer="resolution=merge-duplicates,return=minimal",
        )
        return len(rows)

    def matchup_exists(self, league_id: str, season: str, week: int, member_a: str, member_b: str) -> bool:
        """True when the pairing is stored in either orientation."""
        rows = self.select(
            "matchups",
            {
                "select": "id",
                "league_id": f"eq.{league_id}",
                "season": f"eq.{season}",
                "week_number": f"eq.{week}",
                "or": (
                    f'(and(team1_member_id.eq."{member_a}",team2_member_id.eq."{member_b}"),'
                    f'and(team1_member_id.eq."{member_b}",team2_member_id.eq."{member_a}"))'
                ),
            },
        )
        return bool(rows)

    def insert_matchup(self, league_id: str, season: str, week: int, member_a: str, member_b: str) -> None:
        self.request(
            "POST",
            "matchups",
            payload={
                "league_id": league_id,
                "season": season,
                "week_number": week,
                "team1_member_id": member_a,
                "team2_member_id": member_b,
            },
            prefer="return=minimal",
        )

    def update_sync_status(self, league_id: str, status: str, synced_at: datetime.datetime | None = None) -> None:
        payload: dict[str, str] = {"sync_status": status}
        if synced_at is not None:
            payload["last_sync_at"] = synced_at.isoformat()
        self.request("PATCH", "leagues", params={"id": f"eq.{league_id}"}, payload=payload, prefer="return=minimal")
