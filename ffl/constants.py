# constants.py
# Centralized constants for the league manager. Do not change values without bumping schema_version.

SCHEMA_VERSION = "1.0.0"

# Season defaults (match the store's column defaults)
DEFAULT_TOTAL_WEEKS = 17
MAX_TOTAL_WEEKS = 18
DEFAULT_PLAYOFF_START_WEEK = 15
DEFAULT_PLAYOFF_SPOTS = 6
MIN_PLAYOFF_SPOTS = 2
DEFAULT_FEE_AMOUNT = 150.0
DEFAULT_DRAFT_FOOD_COST = 250.0
DEFAULT_WEEKLY_PRIZE_AMOUNT = 0.0
DEFAULT_PRIZE_STRUCTURE = {
    "first": 500.0,
    "second": 350.0,
    "third": 200.0,
    "highest_points": 160.0,
}

# Formatting
POINTS_PLACES = 2

# HTTP
REQUEST_TIMEOUT_SEC = 20
USER_AGENT = "ffl-league-manager/1.0"

# Admin sessions expire after 24 hours
ADMIN_SESSION_TTL_SEC = 24 * 60 * 60
