"""Runtime settings read from the environment."""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

DB_PATH = Path(os.environ.get("DB_PATH", BASE_DIR.parent / "graph_data"))
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///kinpath.sqlite3")

# 15 matches the query endpoint default; the older SQL function used 10.
MAX_DEPTH = int(os.environ.get("KINPATH_MAX_DEPTH", "15"))
MAX_DEPTH_LIMIT = int(os.environ.get("KINPATH_MAX_DEPTH_LIMIT", "50"))
# Seconds; 0 disables the deadline.
SEARCH_TIMEOUT = float(os.environ.get("KINPATH_SEARCH_TIMEOUT", "0"))

DEFAULT_LOCALE = os.environ.get("KINPATH_DEFAULT_LOCALE", "en")
VOCABULARY_PATH = Path(os.environ.get(
    "KINPATH_VOCABULARY_PATH", BASE_DIR / "data" / "relationship_types.json"
))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
