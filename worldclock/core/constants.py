import os
import platform
from pathlib import Path

# Load environment variables from a .env file in the working directory
from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(usecwd=True))

APP_NAME = "worldclock"

# GeoNames dataset
GEONAMES_URL = os.getenv(
    "WORLDCLOCK_GEONAMES_URL", "http://download.geonames.org/export/dump/cities15000.zip"
)
GEONAMES_ARCHIVE_NAME = "cities15000.zip"
GEONAMES_FILE_NAME = "cities15000.txt"
DOWNLOAD_TIMEOUT = float(os.getenv("WORLDCLOCK_DOWNLOAD_TIMEOUT", "30"))

# Search
MIN_QUERY_LENGTH = 3
SEARCH_LIMIT = int(os.getenv("WORLDCLOCK_SEARCH_LIMIT", "50"))

# Logging
LOG_LEVEL = os.getenv("WORLDCLOCK_LOG_LEVEL", "DEBUG").upper()


def _default_cache_dir() -> Path:
    """Get the per-user cache directory based on platform."""
    system = platform.system()
    home = Path.home()

    if system == "Windows":
        base = Path(os.environ.get("LOCALAPPDATA", home / "AppData" / "Local"))
    elif system == "Darwin":
        base = home / "Library" / "Caches"
    else:  # Linux and others
        base = Path(os.environ.get("XDG_CACHE_HOME") or home / ".cache")
    return base / APP_NAME


# Cache directory (dataset and log file)
CACHE_DIR = Path(os.getenv("WORLDCLOCK_CACHE_DIR") or _default_cache_dir())
LOG_FILE = CACHE_DIR / "worldclock.log"

# User configuration file
CONFIG_PATH = Path(
    os.getenv("WORLDCLOCK_CONFIG_PATH") or Path.home() / ".config" / "worldclock.yaml"
)
