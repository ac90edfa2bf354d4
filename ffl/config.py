"""Season configuration with an explicit, closed set of keys.

Store rows (:meth:`SeasonConfig.from_row`) and YAML overrides
(:func:`load_season_config`, :meth:`SeasonConfig.merged`) share one key check,
which raises :class:`ConfigError` for misspelled keys instead of ignoring them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from ffl.constants import (
    DEFAULT_DRAFT_FOOD_COST,
    DEFAULT_FEE_AMOUNT,
    DEFAULT_PLAYOFF_SPOTS,
    DEFAULT_PLAYOFF_START_WEEK,
    DEFAULT_PRIZE_STRUCTURE,
    DEFAULT_TOTAL_WEEKS,
    DEFAULT_WEEKLY_PRIZE_AMOUNT,
    MAX_TOTAL_WEEKS,
    MIN_PLAYOFF_SPOTS,
)
from ffl.errors import ConfigError

SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")
LEAGUE_ID = os.environ.get("FFL_LEAGUE_ID", "")
SEASON = os.environ.get("FFL_SEASON", "")

# Columns the store returns alongside the configuration proper
_ROW_METADATA_KEYS = {"id", "league_id", "season", "created_at", "updated_at", "is_active"}

PRIZE_TYPES = ("fourth", "highest_weekly", "lowest_weekly")


def _number(key: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be numeric, got {value!r}") from exc
    if number < 0:
        raise ConfigError(f"{key} must be >= 0, got {value!r}")
    return number


def _integer(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc
    if number != value and str(number) != str(value).strip():
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    return number


def _reject_unknown(kind: str, data: dict, allowed: set[str]) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ConfigError(f"Unknown {kind} key(s): {', '.join(unknown)}")


@dataclass(slots=True, frozen=True)
class PrizeStructure:
    """Payouts per placing; special prizes are optional."""

    first: float = 0.0
    second: float = 0.0
    third: float = 0.0
    fourth: float | None = None
    highest_points: float | None = None
    highest_weekly: float | None = None
    lowest_weekly: float | None = None

    @classmethod
    def from_mapping(cls, data: dict | None) -> PrizeStructure:
        if data is None:
            return cls.default()
        if not isinstance(data, dict):
            raise ConfigError(f"prize_structure must be a mapping, got {type(data).__name__}")
        _reject_unknown("prize_structure", data, {f.name for f in fields(cls)})
        return cls(**{k: (None if v is None else _number(k, v)) for k, v in data.items()})

    @classmethod
    def default(cls) -> PrizeStructure:
        return cls.from_mapping(dict(DEFAULT_PRIZE_STRUCTURE))

    def amount_for(self, prize_type: str) -> float:
        """Payout for ``fourth``, ``highest_weekly`` or ``lowest_weekly`` (0 when unset)."""
        if prize_type not in PRIZE_TYPES:
            raise ConfigError(f"Unknown special prize type: {prize_type}")
        return getattr(self, prize_type) or 0.0

    def to_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass(slots=True, frozen=True)
class FinalWinners:
    """Member ids recorded when a season is finalized."""

    first: str | None = None
    second: str | None = None
    third: str | None = None
    highest_points: str | None = None

    @classmethod
    def from_mapping(cls, data: dict | None) -> FinalWinners:
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"final_winners must be a mapping, got {type(data).__name__}")
        _reject_unknown("final_winners", data, {f.name for f in fields(cls)})
        return cls(**{k: (str(v) if v else None) for k, v in data.items()})

    def placing_of(self, member_id: str) -> int | None:
        for position, winner in enumerate((self.first, self.second, self.third), start=1):
            if winner is not None and winner == member_id:
                return position
        return None

    def ordered(self) -> list[str]:
        return [w for w in (self.first, self.second, self.third) if w]


def _parse_divisions(value: Any) -> tuple[str, ...]:
    # Stored as {"divisions": [...]} JSON in the store; YAML may use a bare list
    if value is None:
        return ()
    if isinstance(value, dict):
        _reject_unknown("divisions", value, {"divisions"})
        value = value.get("divisions") or []
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f"divisions must be a list, got {type(value).__name__}")
    names: list[str] = []
    for name in value:
        text = str(name).strip()
        if not text:
            raise ConfigError("division names must be non-empty")
        if text in names:
            raise ConfigError(f"duplicate division name: {text}")
        names.append(text)
    return tuple(names)


_INT_KEYS = {"total_weeks", "playoff_start_week", "playoff_spots"}
_CONFIG_KEYS = _INT_KEYS | {
    "fee_amount",
    "draft_food_cost",
    "weekly_prize_amount",
    "prize_structure",
    "divisions",
    "final_winners",
}


def _parse_fields(row: dict) -> dict[str, Any]:
    """Validate keys and convert values; metadata columns and nulls are skipped."""
    _reject_unknown("season config", row, _CONFIG_KEYS | _ROW_METADATA_KEYS)
    parsed: dict[str, Any] = {}
    for key, value in row.items():
        if key in _ROW_METADATA_KEYS or value is None:
            continue
        if key in _INT_KEYS:
            parsed[key] = _integer(key, value)
        elif key == "prize_structure":
            parsed[key] = PrizeStructure.from_mapping(value)
        elif key == "divisions":
            parsed[key] = _parse_divisions(value)
        elif key == "final_winners":
            parsed[key] = FinalWinners.from_mapping(value)
        else:
            parsed[key] = _number(key, value)
    return parsed


@dataclass(slots=True, frozen=True)
class SeasonConfig:
    fee_amount: float = DEFAULT_FEE_AMOUNT
    draft_food_cost: float = DEFAULT_DRAFT_FOOD_COST
    weekly_prize_amount: float = DEFAULT_WEEKLY_PRIZE_AMOUNT
    total_weeks: int = DEFAULT_TOTAL_WEEKS
    playoff_start_week: int = DEFAULT_PLAYOFF_START_WEEK
    playoff_spots: int = DEFAULT_PLAYOFF_SPOTS
    prize_structure: PrizeStructure = field(default_factory=PrizeStructure.default)
    divisions: tuple[str, ...] = ()
    final_winners: FinalWinners = field(default_factory=FinalWinners)

    def __post_init__(self) -> None:
        if not 1 <= self.total_weeks <= MAX_TOTAL_WEEKS:
            raise ConfigError(f"total_weeks must be within 1..{MAX_TOTAL_WEEKS}, got {self.total_weeks}")
        if not 2 <= self.playoff_start_week <= self.total_weeks + 1:
            raise ConfigError(
                f"playoff_start_week must be within 2..{self.total_weeks + 1}, got {self.playoff_start_week}"
            )
        if self.playoff_spots < MIN_PLAYOFF_SPOTS:
            raise ConfigError(f"playoff_spots must be >= {MIN_PLAYOFF_SPOTS}, got {self.playoff_spots}")

    @classmethod
    def from_row(cls, row: dict | None) -> SeasonConfig:
        """Build a config from a store row or YAML mapping; missing keys use defaults."""
        if not row:
            return cls()
        if not isinstance(row, dict):
            raise ConfigError(f"season config must be a mapping, got {type(row).__name__}")
        return cls(**_parse_fields(row))

    @property
    def regular_season_weeks(self) -> int:
        return self.playoff_start_week - 1

    def standings_week_limit(self, include_postseason: bool = False) -> int:
        return self.total_weeks if include_postseason else self.regular_season_weeks

    def merged(self, overrides: dict | None) -> SeasonConfig:
        """Return a copy with ``overrides`` (same keys as :meth:`from_row`) applied."""
        if not overrides:
            return self
        return replace(self, **_parse_fields(overrides))

    def to_dict(self) -> dict[str, Any]:
        return {
            "fee_amount": self.fee_amount,
            "draft_food_cost": self.draft_food_cost,
            "weekly_prize_amount": self.weekly_prize_amount,
            "total_weeks": self.total_weeks,
            "playoff_start_week": self.playoff_start_week,
            "playoff_spots": self.playoff_spots,
            "prize_structure": self.prize_structure.to_dict(),
            "divisions": list(self.divisions),
        }


def load_season_config(path: str | Path) -> dict:
    """Read season overrides from a YAML file and validate their keys."""
    text = Path(path).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    _parse_fields(data)
    return data
