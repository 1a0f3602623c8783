"""
Bang Definitions - Trigger to destination mappings.

A bang is a short trigger typed after the prefix character:
  !g query    → Google
  !w query    → Wikipedia
  !gh query   → GitHub
  !yt query   → YouTube

Each definition carries a URL template with a placeholder ("{q}" by default)
that receives the URL-escaped remainder of the query. Built-in bangs are
declared below; users add their own in settings.toml [custom_bangs].
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit

from bangjump.errors import InvalidBangDefinition

DEFAULT_PLACEHOLDER = "{q}"


class Origin(str, Enum):
    """Where a bang definition came from. Custom always beats built-in."""
    BUILTIN = "builtin"
    CUSTOM = "custom"


@dataclass(frozen=True)
class BangDefinition:
    """A single trigger → destination mapping."""
    trigger: str
    service_name: str
    url_template: str
    weight: int = 0
    origin: Origin = Origin.BUILTIN
    domain: str = ""
    category: str = ""

    def __post_init__(self):
        if not self.trigger or any(ch.isspace() for ch in self.trigger):
            raise InvalidBangDefinition(f"Invalid bang trigger: {self.trigger!r}")
        if not self.domain:
            # Frozen dataclass, so bypass __setattr__ for the derived field
            object.__setattr__(self, "domain", urlsplit(self.url_template).netloc)

    @property
    def key(self) -> str:
        """Normalized (lower-cased) trigger used for catalog lookups."""
        return self.trigger.lower()

    @classmethod
    def from_dict(
        cls,
        trigger: str,
        data: dict,
        origin: Origin = Origin.CUSTOM,
    ) -> "BangDefinition":
        """
        Build a definition from a settings-style dict.

        Args:
            trigger: Trigger text (a leading '!' is tolerated and stripped)
            data: Mapping with "url" and optional "service_name"/"name",
                  "weight", "domain", "category"
            origin: Source of the definition

        Raises:
            InvalidBangDefinition: If the trigger or url is missing/invalid
        """
        if not isinstance(data, dict):
            raise InvalidBangDefinition(f"Bang '{trigger}' is not a table")

        trigger = (trigger or "").strip().lstrip("!")
        url = data.get("url", "")
        if not trigger or not isinstance(url, str) or not url.strip():
            raise InvalidBangDefinition(f"Bang '{trigger}' is missing a trigger or url")

        try:
            weight = int(data.get("weight", 0))
        except (TypeError, ValueError):
            raise InvalidBangDefinition(f"Bang '{trigger}' has a non-numeric weight")

        return cls(
            trigger=trigger,
            service_name=data.get("service_name") or data.get("name") or trigger,
            url_template=url.strip(),
            weight=weight,
            origin=origin,
            domain=str(data.get("domain") or ""),
            category=str(data.get("category") or ""),
        )

    def expand(self, escaped_remainder: str, placeholder: Optional[str] = None) -> str:
        """Substitute an already-escaped remainder into the URL template."""
        return self.url_template.replace(placeholder or DEFAULT_PLACEHOLDER, escaped_remainder)


# Built-in bangs (custom bangs in settings.toml override these by trigger)
DEFAULT_BANGS = {
    "g": {"name": "Google", "url": "https://www.google.com/search?q={q}", "weight": 100, "category": "Search"},
    "ddg": {"name": "DuckDuckGo", "url": "https://duckduckgo.com/?q={q}", "weight": 90, "category": "Search"},
    "b": {"name": "Bing", "url": "https://www.bing.com/search?q={q}", "weight": 60, "category": "Search"},
    "k": {"name": "Kagi", "url": "https://kagi.com/search?q={q}", "weight": 50, "category": "Search"},
    "gi": {"name": "Google Images", "url": "https://www.google.com/search?tbm=isch&q={q}", "weight": 70, "category": "Images"},
    "w": {"name": "Wikipedia", "url": "https://en.wikipedia.org/wiki/Special:Search?search={q}", "weight": 95, "category": "Reference"},
    "wt": {"name": "Wiktionary", "url": "https://en.wiktionary.org/wiki/Special:Search?search={q}", "weight": 30, "category": "Reference"},
    "imdb": {"name": "IMDb", "url": "https://www.imdb.com/find?q={q}", "weight": 45, "category": "Entertainment"},
    "gh": {"name": "GitHub", "url": "https://github.com/search?q={q}", "weight": 85, "category": "Code"},
    "so": {"name": "Stack Overflow", "url": "https://stackoverflow.com/search?q={q}", "weight": 75, "category": "Code"},
    "mdn": {"name": "MDN Web Docs", "url": "https://developer.mozilla.org/en-US/search?q={q}", "weight": 55, "category": "Code"},
    "npm": {"name": "npm", "url": "https://www.npmjs.com/search?q={q}", "weight": 50, "category": "Code"},
    "pypi": {"name": "PyPI", "url": "https://pypi.org/search/?q={q}", "weight": 50, "category": "Code"},
    "py": {"name": "Python Docs", "url": "https://docs.python.org/3/search.html?q={q}", "weight": 40, "category": "Code"},
    "yt": {"name": "YouTube", "url": "https://www.youtube.com/results?search_query={q}", "weight": 90, "category": "Video"},
    "r": {"name": "Reddit", "url": "https://www.reddit.com/search/?q={q}", "weight": 80, "category": "Social"},
    "a": {"name": "Amazon", "url": "https://www.amazon.com/s?k={q}", "weight": 80, "category": "Shopping"},
    "ebay": {"name": "eBay", "url": "https://www.ebay.com/sch/i.html?_nkw={q}", "weight": 40, "category": "Shopping"},
    "m": {"name": "Google Maps", "url": "https://www.google.com/maps/search/{q}", "weight": 65, "category": "Maps"},
    "osm": {"name": "OpenStreetMap", "url": "https://www.openstreetmap.org/search?query={q}", "weight": 35, "category": "Maps"},
    "t": {"name": "Google Translate", "url": "https://translate.google.com/?text={q}", "weight": 60, "category": "Tools"},
}

BUILTIN_BANGS = tuple(
    BangDefinition.from_dict(trigger, data, origin=Origin.BUILTIN)
    for trigger, data in DEFAULT_BANGS.items()
)
