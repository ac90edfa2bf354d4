from .espn import EspnClient
from .store import LeagueStore

__all__ = ["EspnClient", "LeagueStore"]
