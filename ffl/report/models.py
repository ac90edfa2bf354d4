"""Data models for season report generation."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from ffl.config import SeasonConfig
from ffl.models import PlayoffSeed, SpecialPrizes, StandingEntry


@dataclass(slots=True)
class SeasonContext:
    league_id: str
    season: str
    config: SeasonConfig
    standings_mode: str
    through_week: int
    seeding_week: int
    include_postseason: bool
    member_count: int
    score_count: int
    standings: list[StandingEntry]
    division_standings: list[dict]
    playoff_seeds: list[PlayoffSeed]
    special_prizes: SpecialPrizes
    generated_at: str
    prize_amounts: dict[str, float] = field(default_factory=dict)

    def meta_rows(self) -> list[tuple[str, Any]]:
        return [
            ("league_id", self.league_id),
            ("season", self.season),
            ("generated_at", self.generated_at),
            ("standings_mode", self.standings_mode),
            ("standings_through_week", self.through_week),
            ("seeding_through_week", self.seeding_week),
            ("include_postseason", self.include_postseason),
            ("total_weeks", self.config.total_weeks),
            ("playoff_start_week", self.config.playoff_start_week),
            ("playoff_spots", self.config.playoff_spots),
            ("division_count_configured", len(self.config.divisions)),
            ("division_count_active", len(self.division_standings)),
            ("num_members", self.member_count),
            ("num_scores", self.score_count),
        ]

    def to_json_payload(self, schema_version: str) -> dict[str, Any]:
        return {
            "schema_version": schema_version,
            "metadata": dict(self.meta_rows()),
            "config": self.config.to_dict(),
            "standings": [e.to_dict() for e in self.standings],
            "division_standings": self.division_standings,
            "playoff_seeds": [s.to_dict() for s in self.playoff_seeds],
            "special_prizes": self.special_prizes.to_dict(),
            "prize_amounts": dict(self.prize_amounts),
        }
