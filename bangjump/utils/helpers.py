"""
Helper utilities for bangjump.

Provides common functions used across the engine:
- Settings loading with defaults
- Opening a destination URL in the desktop browser
- Inserting a chosen bang into the query text
"""

import os
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional, Union

import toml
from loguru import logger

SETTINGS_ENV_VAR = "BANGJUMP_SETTINGS"


def default_settings() -> Dict[str, Any]:
    """
    Default settings, used for any key missing from settings.toml.

    Settings structure:
        {
            "bangs": {
                "default_trigger": "",
                "max_items": 25,
                "prefix": "!",
                "placeholder": "{q}"
            },
            "custom_bangs": {
                "gl": {"service_name": "GitLab", "url": "https://gitlab.com/search?search={q}"}
            }
        }
    """
    return {
        "bangs": {
            "default_trigger": "",
            "max_items": 25,
            "prefix": "!",
            "placeholder": "{q}",
        },
        "custom_bangs": {},
    }


def get_settings_path() -> Path:
    """
    Resolve the settings file location.

    $BANGJUMP_SETTINGS wins, otherwise ~/.config/bangjump/settings.toml
    """
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "bangjump" / "settings.toml"


def load_settings(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load settings from a TOML file.

    Args:
        path: Settings file (default: get_settings_path())

    Returns:
        Dictionary containing settings with defaults applied
    """
    defaults = default_settings()
    settings_path = Path(path) if path else get_settings_path()

    if not settings_path.exists():
        logger.info(f"Settings file not found at {settings_path}, using defaults")
        return defaults

    try:
        loaded = toml.load(settings_path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning(f"Could not load settings from {settings_path}: {e}")
        return defaults

    return _deep_merge(defaults, loaded)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence)
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def open_url(url: str) -> bool:
    """
    Open URL in the default browser via xdg-open.

    Returns:
        True if the browser was launched, False otherwise
    """
    try:
        subprocess.Popen(
            ["xdg-open", url],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError:
        logger.warning("xdg-open not found, cannot open URL")
        return False
    except OSError as e:
        logger.warning(f"Failed to open {url}: {e}")
        return False

    return True


def insert_trigger(text: str, trigger: str, prefix: str = "!") -> tuple[str, int]:
    """
    Replace the partially typed bang with a chosen trigger.

    Everything after the last prefix character is replaced by the trigger
    and a trailing space, ready for the search term.

    Args:
        text: Current input text
        trigger: Chosen trigger (without prefix)
        prefix: Bang-prefix character

    Returns:
        Tuple of (new_text, cursor_position). Text without a prefix
        character is returned unchanged with the cursor at the end.

    Example:
        insert_trigger("rust docs !g", "gh")  → ("rust docs !gh ", 14)
    """
    last = text.rfind(prefix)
    if last < 0:
        return text, len(text)

    new_text = text[:last + len(prefix)] + trigger + " "
    return new_text, len(new_text)
