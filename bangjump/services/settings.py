"""
Settings Service - User options and custom bangs from settings.toml.

Example settings.toml:
    [bangs]
    default_trigger = "g"
    max_items = 25

    [custom_bangs.gl]
    service_name = "GitLab"
    url = "https://gitlab.com/search?search={q}"
    weight = 10

Listeners connect to the "changed" signal and rebuild whatever depends on
the settings (the engine rebuilds its catalog and suggestion controller).
"""

import itertools
from pathlib import Path
from typing import Callable, Optional, Union

from loguru import logger

from bangjump.errors import InvalidBangDefinition
from bangjump.search.bangs import DEFAULT_PLACEHOLDER, BangDefinition, Origin
from bangjump.search.matcher import DEFAULT_MAX_ITEMS
from bangjump.utils.helpers import load_settings


class SettingsService:
    """
    Read-only view of the user's bang settings with change notification.

    Signals:
        changed: Emitted when custom bangs or options change

    Methods:
        reload(): Re-read settings.toml
        update(...): Apply in-memory edits (e.g. from a settings dialog)
    """

    SIGNALS = ("changed",)

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = path
        self._handlers: dict[int, tuple[str, Callable]] = {}
        self._handler_ids = itertools.count(1)
        self._apply(load_settings(path))

    def _apply(self, settings: dict) -> None:
        bangs = settings.get("bangs", {})
        self.default_trigger: Optional[str] = (bangs.get("default_trigger") or "").strip() or None
        self.prefix: str = bangs.get("prefix") or "!"
        self.placeholder: str = bangs.get("placeholder") or DEFAULT_PLACEHOLDER

        try:
            self.max_items = int(bangs.get("max_items", DEFAULT_MAX_ITEMS))
        except (TypeError, ValueError):
            logger.warning(f"Invalid max_items {bangs.get('max_items')!r}, using {DEFAULT_MAX_ITEMS}")
            self.max_items = DEFAULT_MAX_ITEMS

        self.custom_bangs: tuple[BangDefinition, ...] = self._load_custom_bangs(
            settings.get("custom_bangs", {})
        )

    def _snapshot(self) -> tuple:
        return (
            self.default_trigger,
            self.prefix,
            self.placeholder,
            self.max_items,
            self.custom_bangs,
        )

    def _load_custom_bangs(self, raw: dict) -> tuple[BangDefinition, ...]:
        """Convert [custom_bangs.*] tables, skipping malformed entries."""
        if not isinstance(raw, dict):
            logger.warning("Ignoring [custom_bangs]: expected a table")
            return ()

        definitions = []
        for trigger, data in raw.items():
            try:
                definitions.append(BangDefinition.from_dict(trigger, data, origin=Origin.CUSTOM))
            except InvalidBangDefinition as e:
                logger.warning(f"Skipping malformed custom bang '{trigger}': {e}")

        return tuple(definitions)

    # Signals

    def connect(self, signal: str, callback: Callable) -> int:
        """
        Register a listener.

        Returns:
            Handler id for disconnect()
        """
        if signal not in self.SIGNALS:
            raise ValueError(f"Unknown signal: {signal}")
        handler_id = next(self._handler_ids)
        self._handlers[handler_id] = (signal, callback)
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        """Remove a listener. Unknown ids are ignored."""
        self._handlers.pop(handler_id, None)

    def emit(self, signal: str) -> None:
        """Call every listener connected to signal."""
        if signal not in self.SIGNALS:
            raise ValueError(f"Unknown signal: {signal}")
        for name, callback in list(self._handlers.values()):
            if name == signal:
                callback(self)

    # Updates

    def reload(self) -> bool:
        """
        Re-read the settings file.

        Returns:
            True if anything changed (and "changed" was emitted)
        """
        before = self._snapshot()
        self._apply(load_settings(self.path))

        if self._snapshot() == before:
            return False

        logger.debug("Settings changed on disk")
        self.emit("changed")
        return True

    def update(
        self,
        custom_bangs: Optional[list[BangDefinition]] = None,
        default_trigger: Optional[str] = None,
    ) -> None:
        """
        Apply edits made by a settings UI and notify listeners.

        Args:
            custom_bangs: Replacement list of custom definitions
            default_trigger: New default bang ("" clears it)
        """
        if custom_bangs is not None:
            self.custom_bangs = tuple(custom_bangs)
        if default_trigger is not None:
            self.default_trigger = default_trigger.strip() or None

        self.emit("changed")
