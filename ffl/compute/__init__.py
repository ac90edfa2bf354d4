from . import core, playoffs, prizes

compute_standings = core.compute_standings
standings_mode = core.standings_mode
standing_sort_key = core.standing_sort_key
compare_standings = core.compare_standings
apply_final_placings = core.apply_final_placings
seed_playoffs = playoffs.seed_playoffs
division_standings = playoffs.division_standings
compute_special_prizes = prizes.compute_special_prizes
calculate_special_prizes = prizes.calculate_special_prizes

__all__ = [
    "compute_standings",
    "standings_mode",
    "standing_sort_key",
    "compare_standings",
    "apply_final_placings",
    "seed_playoffs",
    "division_standings",
    "compute_special_prizes",
    "calculate_special_prizes",
]
