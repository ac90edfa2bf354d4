"""Collection & assembly for season standings reports.

All store reads happen up front (season config, roster, scores, matchups);
the engines then run over that snapshot without further queries. The reads
are not transactional, so a matchup whose scores have not landed yet is
simply treated as pending.
"""

from __future__ import annotations

import datetime
import logging
from typing import Protocol

from ffl.compute import (
    apply_final_placings,
    compute_special_prizes,
    compute_standings,
    division_standings as _division_standings,
    seed_playoffs,
    standings_mode as _standings_mode,
)
from ffl.compute.core import qualifying_scores
from ffl.config import PRIZE_TYPES, SeasonConfig
from ffl.models import Matchup, Member, WeeklyScore
from .models import SeasonContext

logger = logging.getLogger(__name__)


class SeasonSource(Protocol):
    """What the collector needs from the store."""

    def fetch_season_config(self, league_id: str, season: str) -> SeasonConfig: ...
    def fetch_members(self, league_id: str, season: str, *, active_only: bool = False) -> list[Member]: ...
    def fetch_weekly_scores(self, league_id: str, season: str, max_week: int | None = None) -> list[WeeklyScore]: ...
    def fetch_matchups(self, league_id: str, season: str, max_week: int | None = None) -> list[Matchup]: ...


def build_season_context(
    store: SeasonSource,
    league_id: str,
    season: str,
    *,
    include_postseason: bool = False,
    week_limit: int | None = None,
    config_overrides: dict | None = None,
    use_matchups: bool = True,
) -> SeasonContext:
    """Fetch one league/season snapshot and derive every table from it.

    ``week_limit`` gives standings "through week N"; otherwise the regular
    season (or the full season with ``include_postseason``) is used. Playoff
    seeds always come from regular-season results. Store failures propagate
    as :class:`ffl.errors.FetchError`.
    """
    config = store.fetch_season_config(league_id, season).merged(config_overrides)
    members = store.fetch_members(league_id, season)
    scores = store.fetch_weekly_scores(league_id, season)
    matchups = store.fetch_matchups(league_id, season) if use_matchups else None
    logger.info(
        "Loaded %d members, %d scores, %s matchups for league %s season %s",
        len(members),
        len(scores),
        "no" if matchups is None else len(matchups),
        league_id,
        season,
    )

    through_week = week_limit if week_limit is not None else config.standings_week_limit(include_postseason)
    through_week = max(0, min(through_week, config.total_weeks))
    seeding_week = min(through_week, config.regular_season_weeks)

    standings = compute_standings(
        members, scores, matchups, total_weeks=config.total_weeks, week_limit=through_week
    )
    if seeding_week == through_week:
        seeding_standings = standings
    else:
        seeding_standings = compute_standings(
            members, scores, matchups, total_weeks=config.total_weeks, week_limit=seeding_week
        )
    seeds = seed_playoffs(seeding_standings, config.playoff_spots, config.divisions)

    if include_postseason and config.final_winners.ordered():
        standings = apply_final_placings(standings, config.final_winners.ordered())

    prizes = compute_special_prizes(members, qualifying_scores(members, scores, total_weeks=config.total_weeks))
    amounts = {p: config.prize_structure.amount_for(p) for p in PRIZE_TYPES}
    for placing in ("first", "second", "third", "highest_points"):
        amounts[placing] = getattr(config.prize_structure, placing) or 0.0

    return SeasonContext(
        league_id=league_id,
        season=season,
        config=config,
        standings_mode=_standings_mode(matchups),
        through_week=through_week,
        seeding_week=seeding_week,
        include_postseason=include_postseason,
        member_count=len(members),
        score_count=len(scores),
        standings=standings,
        division_standings=_division_standings(standings, config.divisions),
        playoff_seeds=seeds,
        special_prizes=prizes,
        generated_at=datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds"),
        prize_amounts=amounts,
    )
