"""Import ESPN weekly results into the league store.

Each provider matchup becomes two weekly scores (upserted) and one matchup
row (inserted unless the pairing already exists in either orientation).
Winners and ties are not stored; standings derive them from the scores.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any

from ffl.api.espn import EspnClient, EspnWeek
from ffl.api.store import LeagueStore
from ffl.errors import FetchError, LeagueError, TeamMappingError
from ffl.importer import name_mapper

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WeekImportData:
    week: int
    is_complete: bool
    scores: list[dict[str, Any]] = field(default_factory=list)
    matchups: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "week": self.week,
            "is_complete": self.is_complete,
            "scores": list(self.scores),
            "matchups": list(self.matchups),
        }


@dataclass(slots=True, frozen=True)
class ImportResult:
    success: bool
    imported_scores: int
    imported_matchups: int
    message: str


class EspnImportService:
    def __init__(self, store: LeagueStore, espn: EspnClient, league_id: str, season: str) -> None:
        self.store = store
        self.espn = espn
        self.league_id = league_id
        self.season = season

    def _member_lookup(self) -> tuple[dict[int, str], dict[str, Any]]:
        members = self.store.fetch_members(self.league_id, self.season, active_only=True)
        if not members:
            raise TeamMappingError(["No league members found for mapping"])
        teams, espn_members = self.espn.get_teams_and_members()
        result = name_mapper.create_team_mapping(espn_members, teams, members)
        validation = name_mapper.validate_mapping(result)
        if not validation.is_valid:
            raise TeamMappingError(validation.errors)
        if validation.warnings:
            logger.warning("Mapping warnings: %s", "; ".join(validation.warnings))
        logger.info("Mapped %d ESPN teams to league members", len(result.mappings))
        return name_mapper.lookup_map(result.mappings), {m.id: m for m in members}

    def map_week(self, espn_week: EspnWeek) -> WeekImportData:
        team_to_member, members = self._member_lookup()
        data = WeekImportData(week=espn_week.week, is_complete=espn_week.is_complete)
        for m in espn_week.matchups:
            home_id = team_to_member.get(m.home_team_id)
            away_id = team_to_member.get(m.away_team_id)
            if home_id is None or away_id is None:
                logger.warning("Could not map ESPN team ids %s vs %s", m.home_team_id, m.away_team_id)
                continue
            home, away = members[home_id], members[away_id]
            data.scores.append({"member_id": home.id, "points": m.home_score, "team_name": home.team_name})
            data.scores.append({"member_id": away.id, "points": m.away_score, "team_name": away.team_name})
            data.matchups.append({"team1_member_id": home.id, "team2_member_id": away.id})
        return data

    def preview_week(self, week: int) -> WeekImportData:
        """Fetch and map a week without writing anything."""
        return self.map_week(self.espn.get_week_data(week))

    def import_week(self, week: int) -> ImportResult:
        """Preview then persist a week; the league sync status records the outcome."""
        try:
            data = self.preview_week(week)
            imported_scores = self.store.upsert_weekly_scores(self.league_id, self.season, data.week, data.scores)
            imported_matchups = 0
            for pairing in data.matchups:
                a, b = pairing["team1_member_id"], pairing["team2_member_id"]
                if self.store.matchup_exists(self.league_id, self.season, data.week, a, b):
                    logger.info("Matchup already exists for week %s: %s vs %s", data.week, a, b)
                    continue
                self.store.insert_matchup(self.league_id, self.season, data.week, a, b)
                imported_matchups += 1
            self.store.update_sync_status(
                self.league_id, "active", synced_at=datetime.datetime.now(datetime.timezone.utc)
            )
        except LeagueError:
            logger.exception("ESPN import of week %s failed", week)
            try:
                self.store.update_sync_status(self.league_id, "error")
            except FetchError as exc:
                logger.error("Could not record sync error status: %s", exc)
            raise
        return ImportResult(
            success=True,
            imported_scores=imported_scores,
            imported_matchups=imported_matchups,
            message=(
                f"Successfully imported {imported_scores} scores and "
                f"{imported_matchups} matchups for week {week}"
            ),
        )

    def test_connection(self) -> bool:
        return self.espn.test_connection()

    def get_current_week(self) -> int:
        return self.espn.get_current_week()
