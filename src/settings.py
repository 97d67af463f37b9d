"""
Settings Module for the Cog Board Optimizer

Provides persistent storage for optimizer preferences using JSON.
Settings are stored in config.json in the working directory.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict

from src.construction import BoardOptimizer, SearchContext, Weights

logger = logging.getLogger(__name__)

# Settings file location (project root)
SETTINGS_FILE = Path("config.json")

# Default settings
DEFAULT_SETTINGS: Dict[str, Any] = {
    "weights": {"buildRate": 1.0, "exp": 100.0, "flaggy": 250.0},
    "time_budget_ms": 1000,
    "restart_interval": 10_000,
    "shuffle_swaps": 500,
    "yield_interval_ms": 100,
    "flaggy_upgrade_index": 118,
    "log_level": "INFO",
}


def default_settings() -> Dict[str, Any]:
    """Independent copy of the defaults, nested dicts included."""
    return copy.deepcopy(DEFAULT_SETTINGS)


def get_setting(settings: Dict[str, Any], key: str, cast: Callable[[Any], Any]) -> Any:
    """
    Read one setting converted with `cast`.

    Args:
        settings: Settings dictionary
        key: Key in DEFAULT_SETTINGS
        cast: Conversion such as int or float

    Returns:
        Converted value, or the converted default if the stored one is invalid
    """
    value = settings.get(key, DEFAULT_SETTINGS[key])
    try:
        return cast(value)
    except (TypeError, ValueError, OverflowError) as e:
        logger.warning(f"Invalid setting {key}={value!r} ({e}), using default {DEFAULT_SETTINGS[key]!r}")
        return cast(DEFAULT_SETTINGS[key])


def load_settings(path: Path = SETTINGS_FILE) -> Dict[str, Any]:
    """
    Load settings from config.json.

    Returns:
        Settings dictionary. Returns defaults if file missing or invalid.
    """
    if not path.exists():
        logger.debug("Settings file not found, using defaults")
        return default_settings()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            settings = json.load(f)

        if not isinstance(settings, dict):
            raise ValueError("settings root is not an object")

        # Merge with defaults to handle missing keys
        result = default_settings()
        result.update(settings)
        logger.debug(f"Settings loaded: {result}")
        return result

    except (json.JSONDecodeError, ValueError, IOError) as e:
        logger.warning(f"Failed to load settings: {e}, using defaults")
        return default_settings()


def save_settings(settings: Dict[str, Any], path: Path = SETTINGS_FILE) -> None:
    """
    Save settings to config.json.

    Args:
        settings: Settings dictionary to save
    """
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(settings, f, indent=2)
        logger.debug(f"Settings saved: {settings}")
    except IOError as e:
        logger.error(f"Failed to save settings: {e}")


def weights_from_settings(settings: Dict[str, Any]) -> Weights:
    """Objective weights from a settings dict."""
    weights = settings.get("weights")
    return Weights.from_dict(weights if isinstance(weights, dict) else {})


def optimizer_from_settings(settings: Dict[str, Any], rng=None) -> BoardOptimizer:
    """Optimizer configured with the restart and shuffle settings."""
    return BoardOptimizer(
        rng=rng,
        restart_interval=get_setting(settings, "restart_interval", int),
        shuffle_swaps=get_setting(settings, "shuffle_swaps", int),
    )


def context_from_settings(settings: Dict[str, Any], time_budget_ms=None) -> SearchContext:
    """Search context with the configured budget and yield interval."""
    if time_budget_ms is None:
        time_budget_ms = get_setting(settings, "time_budget_ms", float)
    return SearchContext(
        time_budget_ms=float(time_budget_ms),
        yield_interval_ms=get_setting(settings, "yield_interval_ms", float),
    )
