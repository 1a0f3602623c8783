"""
Bang Catalog - Immutable merged lookup table of bang definitions.

Built-in definitions are loaded first, then custom definitions from the
user's settings. When two definitions share a trigger (case-insensitive),
the custom one wins; inside one source the later entry wins. A settings
change builds a brand new catalog instead of editing this one, so readers
(e.g. an in-flight background match) never see a half-updated table.
"""

import itertools
from types import MappingProxyType
from typing import Iterable, Iterator, Optional

from loguru import logger

from bangjump.search.bangs import BUILTIN_BANGS, BangDefinition

_versions = itertools.count(1)


class BangCatalog:
    """Read-only snapshot mapping lower-cased triggers to definitions."""

    def __init__(self, entries: dict[str, BangDefinition], version: int = 0):
        self._entries = MappingProxyType(dict(entries))
        self.version = version

    @classmethod
    def build(
        cls,
        custom_definitions: Iterable[BangDefinition] = (),
        builtins: Iterable[BangDefinition] = BUILTIN_BANGS,
    ) -> "BangCatalog":
        """
        Merge built-in and custom definitions into a new snapshot.

        Args:
            custom_definitions: User-supplied definitions (override built-ins)
            builtins: Built-in definitions

        Returns:
            A new BangCatalog with a fresh version number
        """
        entries: dict[str, BangDefinition] = {}

        for source in (builtins, custom_definitions):
            for definition in source:
                existing = entries.get(definition.key)
                if existing is not None:
                    logger.info(
                        f"Bang !{definition.trigger} ({definition.origin.value}) "
                        f"overrides {existing.service_name} ({existing.origin.value})"
                    )
                entries[definition.key] = definition

        catalog = cls(entries, version=next(_versions))
        logger.debug(f"Built bang catalog v{catalog.version} with {len(catalog)} bangs")
        return catalog

    def lookup(self, trigger: Optional[str]) -> Optional[BangDefinition]:
        """Case-insensitive exact lookup. Returns None when not found."""
        if not trigger:
            return None
        return self._entries.get(trigger.lower())

    @property
    def definitions(self) -> tuple[BangDefinition, ...]:
        """All effective definitions, sorted by trigger."""
        return tuple(self._entries[key] for key in sorted(self._entries))

    def __contains__(self, trigger) -> bool:
        return isinstance(trigger, str) and trigger.lower() in self._entries

    def __iter__(self) -> Iterator[BangDefinition]:
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"BangCatalog(version={self.version}, size={len(self)})"
