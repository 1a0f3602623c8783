"""
Search package - Bang definitions, catalog, ranking, and redirects.

Provides the pure core of the engine: a merged catalog of built-in and
custom bangs, the autocomplete ranking for partially typed triggers, and
the resolver that turns a submitted query into a destination URL.
"""

from .bangs import BUILTIN_BANGS, BangDefinition, Origin
from .catalog import BangCatalog
from .matcher import DEFAULT_MAX_ITEMS, match
from .resolver import ParsedQuery, RedirectResolver, parse_query, resolve

__all__ = [
    "BUILTIN_BANGS",
    "BangDefinition",
    "Origin",
    "BangCatalog",
    "DEFAULT_MAX_ITEMS",
    "match",
    "ParsedQuery",
    "RedirectResolver",
    "parse_query",
    "resolve",
]
