"""
Configuration management module.

This module provides utilities for reading the application settings from the
environment and for loading the seed spots the shared store starts with.
"""

import json
import os
from typing import Any, Dict, List

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SEED_SPOTS_PATH = os.path.join(BASE_DIR, "seed_spots.json")

DEFAULT_CAPACITY = 100
DEFAULT_SESSION_TIMEOUT = 60
DEFAULT_SESSION_QUEUE_SIZE = 1000
OPEN_STREET_MAP_LAYER = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
OPEN_STREET_MAP_ATTRIBUTION = (
    "&copy; <a href='https://www.openstreetmap.org/copyright'>OpenStreetMap</a> contributors"
)
DEFAULT_PAGE_TITLE = "The Best Fishing Spots in the World!"


class ConfigError(ValueError):
    """Raised when a configuration value or the seed file is malformed."""


def get_positive_int(name: str, default: int) -> int:
    """Read a positive integer from the environment.

    Args:
        name: Environment variable name.
        default: Value used when the variable is unset.

    Returns:
        The parsed integer.

    Raises:
        ConfigError: If the value is not a positive integer.
    """
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value < 1:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def get_settings() -> Dict[str, Any]:
    """Read application settings from the environment.

    Returns:
        Settings dictionary with defaults applied for anything unset.

    Raises:
        ConfigError: If SPOT_CAPACITY, SESSION_TIMEOUT or SESSION_QUEUE_SIZE
            is not a positive integer.
    """
    return {
        "capacity": get_positive_int("SPOT_CAPACITY", DEFAULT_CAPACITY),
        "session_timeout": get_positive_int("SESSION_TIMEOUT", DEFAULT_SESSION_TIMEOUT),
        "session_queue_size": get_positive_int("SESSION_QUEUE_SIZE", DEFAULT_SESSION_QUEUE_SIZE),
        "tile_layer_url": os.getenv("TILE_LAYER_URL", OPEN_STREET_MAP_LAYER),
        "tile_attribution": os.getenv("TILE_ATTRIBUTION", OPEN_STREET_MAP_ATTRIBUTION),
        "seed_spots_path": os.getenv("SEED_SPOTS_PATH", SEED_SPOTS_PATH),
        "page_title": os.getenv("PAGE_TITLE", DEFAULT_PAGE_TITLE),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
    }


def get_default_seed_spots() -> List[Dict[str, Any]]:
    """Get the built-in demo spots.

    Returns:
        List of spot dictionaries.
    """
    return [
        {"latitude": 60.465071, "longitude": 22.302923, "name": "Halistenkoski"},
        {"latitude": 60.479928, "longitude": 21.328347, "name": "Kustavi"},
        {"latitude": 60.124169, "longitude": 21.906335, "name": "Kirjais"},
    ]


def load_seed_spots(path: str = None) -> List[Dict[str, Any]]:
    """Load seed spots from a JSON file.

    Falls back to the built-in demo spots when the file does not exist.

    Args:
        path: Path to the seed file. Defaults to the configured SEED_SPOTS_PATH.

    Returns:
        List of validated spot dictionaries.

    Raises:
        ConfigError: If the file is not valid JSON or an entry is malformed.
    """
    if path is None:
        path = get_settings()["seed_spots_path"]

    try:
        with open(path, "r", encoding="utf-8") as f:
            seeds = json.load(f)
    except FileNotFoundError:
        return get_default_seed_spots()
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in seed file {path}: {e}")

    if not isinstance(seeds, list):
        raise ConfigError(f"Seed file {path} must contain a JSON list")

    return [ensure_seed_fields(seed) for seed in seeds]


def ensure_seed_fields(seed: Any) -> Dict[str, Any]:
    """Validate one seed entry.

    Args:
        seed: Raw entry from the seed file.

    Returns:
        Dictionary with float coordinates and a string name.

    Raises:
        ConfigError: If a required field is missing or has the wrong type.
    """
    if not isinstance(seed, dict):
        raise ConfigError(f"Seed entry must be an object, got {seed!r}")

    for key in ("latitude", "longitude", "name"):
        if key not in seed:
            raise ConfigError(f"Seed entry is missing '{key}': {seed!r}")

    try:
        latitude = float(seed["latitude"])
        longitude = float(seed["longitude"])
    except (TypeError, ValueError):
        raise ConfigError(f"Seed entry has non-numeric coordinates: {seed!r}")

    return {"latitude": latitude, "longitude": longitude, "name": str(seed["name"])}
