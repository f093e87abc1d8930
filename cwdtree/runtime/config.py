"""Persistent JSON config helpers.

Stores sidebar tuning values and the last used view mode.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from ..file_tree_model.fs import DEFAULT_MAX_DEPTH, DEFAULT_MAX_ENTRIES
from ..git_status import GIT_STATUS_CACHE_TTL_SECONDS
from ..search.debounce import DEFAULT_DEBOUNCE_SECONDS
from ..search.index import DEFAULT_SEARCH_LIMIT

APP_NAME = "cwdtree"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_POLL_INTERVAL_SECONDS = 1.0
VIEW_MODE_NAMES = ("flat", "tree")


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON, ignoring write failures."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


@dataclass(frozen=True)
class SidebarSettings:
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    search_debounce: float = DEFAULT_DEBOUNCE_SECONDS
    max_depth: int = DEFAULT_MAX_DEPTH
    max_entries: int = DEFAULT_MAX_ENTRIES
    search_limit: int = DEFAULT_SEARCH_LIMIT
    git_status_ttl: float = GIT_STATUS_CACHE_TTL_SECONDS
    default_mode: str = "flat"


def _positive_float(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value) if value > 0 else default


def _nonnegative_float(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value) if value >= 0 else default


def _positive_int(value: object, default: int) -> int:
    """Accept only real positive integers; booleans are rejected."""
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value if value > 0 else default


def load_settings() -> SidebarSettings:
    """Build ``SidebarSettings`` from config, keeping defaults for invalid values."""
    data = load_config()
    defaults = SidebarSettings()
    mode = data.get("default_mode")
    return SidebarSettings(
        poll_interval=_positive_float(data.get("poll_interval"), defaults.poll_interval),
        search_debounce=_nonnegative_float(data.get("search_debounce"), defaults.search_debounce),
        max_depth=_positive_int(data.get("max_depth"), defaults.max_depth),
        max_entries=_positive_int(data.get("max_entries"), defaults.max_entries),
        search_limit=_positive_int(data.get("search_limit"), defaults.search_limit),
        git_status_ttl=_nonnegative_float(data.get("git_status_ttl"), defaults.git_status_ttl),
        default_mode=mode if mode in VIEW_MODE_NAMES else defaults.default_mode,
    )


def save_default_mode(mode: str) -> None:
    """Persist the last used view mode (``"flat"`` or ``"tree"``)."""
    if mode not in VIEW_MODE_NAMES:
        return
    config = load_config()
    config["default_mode"] = mode
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "SidebarSettings",
    "load_config",
    "save_config",
    "load_settings",
    "save_default_mode",
]
