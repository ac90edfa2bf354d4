from .collect import build_season_context
from .formatters import format_json, format_markdown
from .history import player_history, season_performance
from .models import SeasonContext

__all__ = [
    "build_season_context",
    "format_json",
    "format_markdown",
    "player_history",
    "season_performance",
    "SeasonContext",
]
