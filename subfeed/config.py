import logging
import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()

# Use absolute path so the state file lands in the project root
PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))  # subfeed/
PROJECT_ROOT = os.path.dirname(PACKAGE_DIR)

class Settings:
    YOUTUBE_API_KEY = os.getenv("YOUTUBE_API_KEY", "")

    # Credential and subscription cache live here between runs
    STATE_FILE = os.getenv("SUBFEED_STATE_FILE", os.path.join(PROJECT_ROOT, "subfeed_state.json"))

    # Only videos published in the last N days make it into the feed
    DAYS_LOOKBACK = int(os.getenv("DAYS_LOOKBACK", "7"))

    SUBSCRIPTIONS_PAGE_SIZE = 25
    # Kept small: one playlistItems call per channel, dozens of channels
    VIDEOS_PER_CHANNEL = 2
    VIDEOS_PER_PAGE = 50

    # Implicit grant tokens cannot be refreshed
    DEFAULT_TOKEN_TTL = 3600
    TOKEN_EXPIRY_MARGIN = timedelta(minutes=5)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()


def _resolve_log_level(raw_level: str) -> int:
    resolved = getattr(logging, raw_level.strip().upper(), None)
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def configure_logging(level: str = None) -> None:
    """Installs a basic console handler for the subfeed loggers."""
    logging.basicConfig(
        level=_resolve_log_level(level or settings.LOG_LEVEL),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
