from pathlib import Path

# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
WEEKS_DATA_DIR = DATA_DIR / "weeks"
REPORTS_DIR = DATA_DIR / "reports"

# Game status that marks a decided game
FINAL_STATUS = "final"
DEFAULT_GAME_STATUS = "scheduled"

# Pick sides
VALID_SIDES = {"home", "away"}
SIDE_ALIASES = {
    "h": "home",
    "a": "away",
}

# Page-data field names, API (camelCase) first, then snake_case fallbacks
MEMBER_ID_KEYS = ("id", "memberId", "member_id")
GAME_KEY_KEYS = ("gameKey", "game_key")
PICK_SIDE_KEYS = ("chosenSide", "side", "chosen_side")
PICK_MEMBER_KEYS = ("memberId", "member_id")
ACTIVE_WEEK_KEYS = ("activeWeek", "active_week")
