from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
MATCHES_DIR = PROJECT_ROOT / "matches"
DEFAULT_MATCH_FILE = MATCHES_DIR / "current_match.json"

SCHEMA_VERSION = 1
DEFAULT_NUM_SETS = 3

GAME_POINTS_TO_WIN = 4
SET_GAMES_TO_WIN = 6
TIEBREAK_POINTS_TO_WIN = 7
WIN_MARGIN = 2
