"""Exception hierarchy shared by the engines, clients and CLIs."""

from __future__ import annotations


class LeagueError(Exception):
    """Base class for every error raised by ffl."""


class ScoreValidationError(LeagueError, ValueError):
    """A record is malformed (missing field, bad week number, bad points)."""


class ConfigError(LeagueError, ValueError):
    """Configuration carries an unknown key or an out-of-range value."""


class FetchError(LeagueError):
    """The store or the provider API could not deliver data.

    Collectors let this propagate so callers see "computation unavailable"
    instead of a partially computed table.
    """


class TeamMappingError(LeagueError):
    """Provider teams could not be mapped onto league members."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Team mapping failed: " + "; ".join(self.errors))
