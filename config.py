# config.py
# Simple centralized configuration values.
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

AUTH_TOKEN = os.getenv("AUTH_TOKEN", "changeme")
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# Durable mirror (sqlite). Off unless explicitly enabled.
DATABASE_FILE = os.getenv("ACTIVITY_DB_FILE", "sparkfeed.db")
MIRROR_ENABLED = os.getenv("ACTIVITY_MIRROR_ENABLED", "").strip().lower() in ("1", "true", "yes")
MIRROR_TIMEOUT_SECONDS = 2.0

# Activity feed parameters
MAX_ACTIVITY_ITEMS = 1000  # retention cap, oldest evicted first
DEFAULT_ACTIVITY_LIMIT = 50
RECENT_QUERY_LIMIT = 100  # how many items the recent views/likes queries scan
RECENT_WINDOW = timedelta(hours=24)

# Badge parameters
NEW_USER_WINDOW = timedelta(days=7)
RECENTLY_ACTIVE_WINDOW = timedelta(hours=24)
POPULAR_THRESHOLD = 0.7  # draw must exceed this, roughly 30% of profiles
