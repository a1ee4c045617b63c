"""Persistent JSON config helpers.

Stores listing visibility preferences, the entry cap, cache size and the
watch debounce window. All access is defensive: malformed or missing config
falls back to defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path

from platformdirs import user_config_dir

from .listing_model import DEFAULT_MAX_CACHED_DIRECTORIES, ListingOptions
from .listing_model.types import DEFAULT_MAX_ENTRIES, DEFAULT_SHOW_DOTFILES, DEFAULT_SHOW_META_FILES
from .watch import DEFAULT_DEBOUNCE_WINDOW_MS

logger = logging.getLogger(__name__)

APP_NAME = "lazydired"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME


@dataclass(frozen=True)
class DiredSettings:
    """Configuration surface consumed by ``DiredEngine``."""

    show_dotfiles: bool = DEFAULT_SHOW_DOTFILES
    show_meta_files: bool = DEFAULT_SHOW_META_FILES
    max_entries: int = DEFAULT_MAX_ENTRIES
    max_cached_directories: int = DEFAULT_MAX_CACHED_DIRECTORIES
    debounce_window_ms: int = DEFAULT_DEBOUNCE_WINDOW_MS

    def listing_options(self) -> ListingOptions:
        return ListingOptions(
            show_dotfiles=self.show_dotfiles,
            show_meta_files=self.show_meta_files,
            max_entries=self.max_entries,
        )

    def with_overrides(self, **overrides: object) -> "DiredSettings":
        """Return a copy with non-``None`` overrides applied."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged and ignored so an unwritable config
    directory never breaks listing operations.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("cannot write config %s: %s", CONFIG_PATH, exc)


def _coerce_bool(value: object, default: bool) -> bool:
    """Only explicit booleans are accepted; anything else yields ``default``."""
    return value if isinstance(value, bool) else default


def _coerce_positive_int(value: object, default: int) -> int:
    """Booleans, non-integers and values below 1 fall back to ``default``."""
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value if value >= 1 else default


def _coerce_nonnegative_int(value: object, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value if value >= 0 else default


def load_settings() -> DiredSettings:
    """Build settings from the persisted config, validating every field."""
    data = load_config()
    return DiredSettings(
        show_dotfiles=_coerce_bool(data.get("show_dotfiles"), DEFAULT_SHOW_DOTFILES),
        show_meta_files=_coerce_bool(data.get("show_meta_files"), DEFAULT_SHOW_META_FILES),
        max_entries=_coerce_positive_int(data.get("max_entries"), DEFAULT_MAX_ENTRIES),
        max_cached_directories=_coerce_positive_int(
            data.get("max_cached_directories"),
            DEFAULT_MAX_CACHED_DIRECTORIES,
        ),
        debounce_window_ms=_coerce_nonnegative_int(data.get("debounce_window_ms"), DEFAULT_DEBOUNCE_WINDOW_MS),
    )


def save_settings(settings: DiredSettings) -> None:
    """Persist ``settings`` while keeping unrelated config keys."""
    config = load_config()
    config.update(
        show_dotfiles=bool(settings.show_dotfiles),
        show_meta_files=bool(settings.show_meta_files),
        max_entries=int(settings.max_entries),
        max_cached_directories=int(settings.max_cached_directories),
        debounce_window_ms=int(settings.debounce_window_ms),
    )
    save_config(config)


def save_show_dotfiles(show_dotfiles: bool) -> None:
    """Persist dotfile visibility preference as a boolean."""
    config = load_config()
    config["show_dotfiles"] = bool(show_dotfiles)
    save_config(config)


def save_show_meta_files(show_meta_files: bool) -> None:
    """Persist ``.meta`` file visibility preference as a boolean."""
    config = load_config()
    config["show_meta_files"] = bool(show_meta_files)
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DiredSettings",
    "load_config",
    "save_config",
    "load_settings",
    "save_settings",
    "save_show_dotfiles",
    "save_show_meta_files",
]
