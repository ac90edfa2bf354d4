"""Per-season finishing status of a manager across a league's history."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ffl.compute import compute_standings, seed_playoffs
from ffl.config import SeasonConfig
from ffl.models import Matchup, Member, WeeklyScore
from .collect import SeasonSource

logger = logging.getLogger(__name__)

STATUS_SYMBOLS = {
    "champion": "👑",
    "second": "🥈",
    "third": "🥉",
    "playoffs": "✓",
    "participated": "",
}


@dataclass(slots=True, frozen=True)
class SeasonPerformance:
    season: str
    status: str
    position: int | None = None
    total_points: float | None = None

    @property
    def symbol(self) -> str:
        return STATUS_SYMBOLS[self.status]

    @property
    def title(self) -> str:
        if self.status == "champion":
            return f"{self.season} Champion (1st Place)"
        if self.status == "second":
            return f"{self.season} Runner-up (2nd Place)"
        if self.status == "third":
            return f"{self.season} 3rd Place"
        if self.status == "playoffs":
            return f"{self.season} Playoffs (#{self.position} regular season)"
        return f"{self.season} Participant"

    def to_dict(self) -> dict[str, Any]:
        return {
            "season": self.season,
            "status": self.status,
            "position": self.position,
            "total_points": self.total_points,
            "symbol": self.symbol,
            "title": self.title,
        }


def season_performance(
    manager_name: str,
    season: str,
    config: SeasonConfig,
    members: Sequence[Member],
    scores: Sequence[WeeklyScore],
    matchups: Sequence[Matchup] | None,
) -> SeasonPerformance:
    """Status of ``manager_name`` in one season.

    Incomplete seasons (fewer distinct scored weeks than ``total_weeks``) and
    managers missing from the active roster only count as participation.
    """
    if len({s.week_number for s in scores}) < config.total_weeks:
        return SeasonPerformance(season, "participated")
    member = next((m for m in members if m.is_active and m.manager_name == manager_name), None)
    if member is None:
        return SeasonPerformance(season, "participated")

    standings = compute_standings(
        members, scores, matchups, total_weeks=config.total_weeks, week_limit=config.regular_season_weeks
    )
    entry = next((e for e in standings if e.member.id == member.id), None)
    total = entry.total_points if entry else None

    placing = config.final_winners.placing_of(member.id)
    if placing is not None:
        status = {1: "champion", 2: "second", 3: "third"}[placing]
        return SeasonPerformance(season, status, placing, total)
    if entry is None:
        return SeasonPerformance(season, "participated")
    seeds = seed_playoffs(standings, config.playoff_spots, config.divisions)
    if any(s.member.id == member.id for s in seeds):
        return SeasonPerformance(season, "playoffs", entry.rank, total)
    return SeasonPerformance(season, "participated", entry.rank, total)


def player_history(
    store: SeasonSource,
    league_id: str,
    manager_name: str,
    seasons: Sequence[str],
) -> list[SeasonPerformance]:
    """Season-by-season performance, oldest first; store failures propagate."""
    out: list[SeasonPerformance] = []
    for season in seasons:
        config = store.fetch_season_config(league_id, season)
        members = store.fetch_members(league_id, season)
        scores = store.fetch_weekly_scores(league_id, season)
        matchups = store.fetch_matchups(league_id, season)
        out.append(season_performance(manager_name, season, config, members, scores, matchups))
    logger.debug("Computed %d season performances for %s", len(out), manager_name)
    return sorted(out, key=lambda p: p.season)
