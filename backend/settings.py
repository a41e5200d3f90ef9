"""Utility functions for loading and saving user settings.

The settings are stored as a list of dictionaries to preserve order.
Each dictionary contains ``key``, ``value`` and ``type`` entries.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from core import DEFAULT_API_BASE_URL, DEFAULT_API_TIMEOUT

# Path to the JSON file where settings are persisted.
SETTINGS_PATH = Path(__file__).resolve().parents[1] / "data" / "settings.json"

# Default settings to initialize the file on first run.
DEFAULT_SETTINGS: List[Dict[str, Any]] = [
    {"key": "api_base_url", "value": DEFAULT_API_BASE_URL, "type": "str"},
    {"key": "api_timeout", "value": DEFAULT_API_TIMEOUT, "type": "float"},
    {"key": "auth_token", "value": "", "type": "str"},
    {"key": "skip_zero_rest", "value": False, "type": "bool"},
    {"key": "sound_on", "value": True, "type": "bool"},
]

# Internal cache so settings are only read from disk once.
_settings_cache: List[Dict[str, Any]] | None = None


def load_settings() -> List[Dict[str, Any]]:
    """Load settings from :data:`SETTINGS_PATH` or create defaults.

    Keys missing from an existing file are filled in from
    :data:`DEFAULT_SETTINGS`.
    """
    if SETTINGS_PATH.exists():
        try:
            with SETTINGS_PATH.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError):
            logging.exception("Could not read settings from %s", SETTINGS_PATH)
        else:
            if isinstance(data, list):
                known = {item.get("key") for item in data}
                data.extend(
                    dict(item) for item in DEFAULT_SETTINGS if item["key"] not in known
                )
                return data
    defaults = [dict(item) for item in DEFAULT_SETTINGS]
    save_settings(defaults)
    return defaults


def save_settings(settings: List[Dict[str, Any]]) -> None:
    """Persist ``settings`` to :data:`SETTINGS_PATH`."""
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    with SETTINGS_PATH.open("w", encoding="utf-8") as fh:
        json.dump(settings, fh)


def get_settings() -> List[Dict[str, Any]]:
    """Return the cached settings list, loading from disk if needed."""
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = load_settings()
    return _settings_cache


def get_value(key: str) -> Any:
    """Fetch the value associated with ``key``."""
    for item in get_settings():
        if item.get("key") == key:
            return item.get("value")
    return None


def set_value(key: str, value: Any) -> None:
    """Update ``key`` with ``value`` and persist the change."""
    settings = get_settings()
    for item in settings:
        if item.get("key") == key:
            item["value"] = value
            break
    else:
        settings.append({"key": key, "value": value, "type": type(value).__name__})
    save_settings(settings)
