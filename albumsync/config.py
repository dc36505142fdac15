import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# === PATH CONFIGURATION ===
CONFIG_FILENAME = "config.json"
LOG_FILENAME = "ImmichAlbumSync.log"

API_SUFFIX = "/api"


class ConfigError(Exception):
    """Raised when config.json can't be read or doesn't describe a sync target."""


@dataclass
class SyncConfig:
    api_url: str
    api_key: str
    album_id: str
    local_folder: str
    # Only read by whatever schedules the runs, never by the sync itself.
    interval_minutes: Optional[int] = None
    background_interval_minutes: Optional[int] = None


def app_dir() -> Path:
    """
    Directory of the running program: the frozen executable, or the entry script.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(sys.argv[0]).resolve().parent


def default_config_path() -> Path:
    return app_dir() / CONFIG_FILENAME


def default_log_path() -> Path:
    """
    Log next to the user's documents if there is such a folder, else next to the program.
    """
    documents = Path.home() / "Documents"
    if documents.is_dir():
        return documents / LOG_FILENAME
    return app_dir() / LOG_FILENAME


def normalize_api_url(url: str) -> str:
    """
    Ensure the endpoint ends with /api, e.g. http://host:2283 -> http://host:2283/api
    """
    url = url.rstrip("/")
    if not url.endswith(API_SUFFIX):
        url = url + API_SUFFIX
    return url


def _require_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string")
    return value


def _require_folder(data: dict, key: str) -> str:
    value = _require_str(data, key)
    # Path("") is the working directory
    if not value.strip():
        raise ConfigError(f"'{key}' must not be empty")
    return value


def _optional_int(data: dict, key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"'{key}' must be a non-negative integer")
    return value


def load_config(path: Path) -> SyncConfig:
    """
    Load config.json and normalize the API endpoint.
    Raises ConfigError if the file is missing, unreadable or incomplete.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {e}") from e
    except ValueError as e:
        raise ConfigError(f"Failed to parse config JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Failed to parse config JSON: expected an object")

    return SyncConfig(
        api_url=normalize_api_url(_require_str(data, "api_url")),
        api_key=_require_str(data, "api_key"),
        album_id=_require_str(data, "album_id"),
        local_folder=_require_folder(data, "local_folder"),
        interval_minutes=_optional_int(data, "interval_minutes"),
        background_interval_minutes=_optional_int(data, "background_interval_minutes"),
    )
