"""Data models for league members, weekly scores and derived tables.

Store rows are turned into models with the ``parse_*`` helpers, which reject
malformed records with :class:`ScoreValidationError` instead of coercing them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from ffl.errors import ScoreValidationError


@dataclass(slots=True, frozen=True)
class Member:
    id: str
    manager_name: str
    team_name: str
    season: str
    division: str | None = None
    is_active: bool = True


@dataclass(slots=True, frozen=True)
class WeeklyScore:
    member_id: str
    week_number: int
    points: float
    season: str

    def __post_init__(self) -> None:
        if isinstance(self.week_number, bool) or not isinstance(self.week_number, int):
            raise ScoreValidationError(f"week_number must be an int, got {self.week_number!r}")
        if self.week_number < 1:
            raise ScoreValidationError(f"week_number must be positive, got {self.week_number}")
        if not math.isfinite(self.points) or self.points < 0:
            raise ScoreValidationError(f"points must be finite and >= 0, got {self.points!r}")


@dataclass(slots=True, frozen=True)
class Matchup:
    week_number: int
    team1_member_id: str
    team2_member_id: str
    team1_score: float | None = None
    team2_score: float | None = None

    @property
    def outcome(self) -> str:
        """``team1``, ``team2``, ``tie`` or ``pending`` when a score is missing."""
        if self.team1_score is None or self.team2_score is None:
            return "pending"
        if self.team1_score > self.team2_score:
            return "team1"
        if self.team2_score > self.team1_score:
            return "team2"
        return "tie"


@dataclass(slots=True)
class StandingEntry:
    member: Member
    rank: int
    wins: int | None
    losses: int | None
    ties: int | None
    total_points: float
    average_points: float | None
    games_played: int
    points_against: float | None = None
    weeks_won: list[int] = field(default_factory=list)

    @property
    def member_id(self) -> str:
        return self.member.id

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "member_id": self.member.id,
            "manager_name": self.member.manager_name,
            "team_name": self.member.team_name,
            "division": self.member.division,
            "wins": self.wins,
            "losses": self.losses,
            "ties": self.ties,
            "total_points": self.total_points,
            "average_points": self.average_points,
            "games_played": self.games_played,
            "points_against": self.points_against,
            "weeks_won": list(self.weeks_won),
        }


@dataclass(slots=True, frozen=True)
class PlayoffSeed:
    member: Member
    seed: int
    is_division_winner: bool
    division: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "seed": self.seed,
            "member_id": self.member.id,
            "manager_name": self.member.manager_name,
            "team_name": self.member.team_name,
            "division": self.division,
            "type": "Division Winner" if self.is_division_winner else "Wildcard",
        }


@dataclass(slots=True, frozen=True)
class SpecialPrizeWinner:
    member: Member
    value: float
    week: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "member_id": self.member.id,
            "manager_name": self.member.manager_name,
            "value": self.value,
            "week": self.week,
        }


@dataclass(slots=True)
class SpecialPrizes:
    fourth_place: SpecialPrizeWinner | None = None
    highest_weekly: SpecialPrizeWinner | None = None
    lowest_weekly: SpecialPrizeWinner | None = None

    def is_empty(self) -> bool:
        return self.fourth_place is None and self.highest_weekly is None and self.lowest_weekly is None

    def to_dict(self) -> dict[str, Any]:
        return {
            name: (getattr(self, name).to_dict() if getattr(self, name) else None)
            for name in ("fourth_place", "highest_weekly", "lowest_weekly")
        }


def _check_row(row: Any) -> dict:
    if not isinstance(row, dict):
        raise ScoreValidationError(f"expected a mapping row, got {type(row).__name__}: {row!r}")
    return row


def _require(row: dict, key: str) -> Any:
    value = row.get(key)
    if value is None or value == "":
        raise ScoreValidationError(f"missing required field {key!r} in {row!r}")
    return value


def _require_int(row: dict, key: str) -> int:
    value = _require(row, key)
    if isinstance(value, bool):
        raise ScoreValidationError(f"{key} must be an integer, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ScoreValidationError(f"{key} must be an integer, got {value!r}")


def _optional_float(row: dict, key: str) -> float | None:
    value = row.get(key)
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ScoreValidationError(f"{key} must be numeric, got {value!r}") from exc
    if not math.isfinite(number) or number < 0:
        raise ScoreValidationError(f"{key} must be finite and >= 0, got {value!r}")
    return number


def parse_member(row: dict) -> Member:
    row = _check_row(row)
    is_active = row.get("is_active", True)
    if not isinstance(is_active, bool):
        raise ScoreValidationError(f"is_active must be a boolean, got {is_active!r}")
    division = row.get("division") or None
    return Member(
        id=str(_require(row, "id")),
        manager_name=str(_require(row, "manager_name")),
        team_name=str(row.get("team_name") or "-"),
        season=str(_require(row, "season")),
        division=str(division) if division is not None else None,
        is_active=is_active,
    )


def parse_score(row: dict) -> WeeklyScore:
    row = _check_row(row)
    points = _optional_float(row, "points")
    if points is None:
        raise ScoreValidationError(f"missing required field 'points' in {row!r}")
    return WeeklyScore(
        member_id=str(_require(row, "member_id")),
        week_number=_require_int(row, "week_number"),
        points=points,
        season=str(_require(row, "season")),
    )


def parse_matchup(row: dict) -> Matchup:
    row = _check_row(row)
    week = _require_int(row, "week_number")
    if week < 1:
        raise ScoreValidationError(f"week_number must be positive, got {week}")
    return Matchup(
        week_number=week,
        team1_member_id=str(_require(row, "team1_member_id")),
        team2_member_id=str(_require(row, "team2_member_id")),
        team1_score=_optional_float(row, "team1_score"),
        team2_score=_optional_float(row, "team2_score"),
    )
