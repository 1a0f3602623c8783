"""
Redirect Resolver - Turn a finished query into a destination URL.

  "!w albert einstein"  → Wikipedia template with "albert%20einstein"
  "albert einstein !w"  → same, the bang may appear anywhere
  "hello world"         → default bang, or the fallback search engine
  "!zz hello"           → unknown bang, whole "!zz hello" goes to the default

Resolution is pure: navigating to the URL is the caller's job.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from loguru import logger

from bangjump.search.bangs import DEFAULT_PLACEHOLDER, BangDefinition
from bangjump.search.catalog import BangCatalog

DEFAULT_PREFIX = "!"

# Used when no default bang is configured (or it is not in the catalog)
FALLBACK_URL_TEMPLATE = "https://duckduckgo.com/?q={q}"

# Characters encodeURIComponent leaves alone (on top of quote's always-safe set)
_URI_COMPONENT_SAFE = "!~*'()"


@dataclass(frozen=True)
class ParsedQuery:
    """A raw query split into its bang token and the remaining text."""
    trigger_token: Optional[str]
    remainder: str

    def trigger(self, prefix: str = DEFAULT_PREFIX) -> Optional[str]:
        """Trigger text without its prefix character."""
        if self.trigger_token is None:
            return None
        return strip_prefix(self.trigger_token, prefix)


def strip_prefix(token: str, prefix: str = DEFAULT_PREFIX) -> str:
    """Drop one leading prefix character, if present."""
    return token[len(prefix):] if prefix and token.startswith(prefix) else token


def escape_remainder(text: str) -> str:
    """
    URL-escape query text for substitution into a template.

    Lone surrogates (undecodable bytes from argv) are passed through as
    their UTF-8 form instead of raising.
    """
    return quote(text, safe=_URI_COMPONENT_SAFE, errors="surrogatepass")


def parse_query(raw_query: str, prefix: str = DEFAULT_PREFIX) -> ParsedQuery:
    """
    Find the first whitespace-delimited token that starts with the prefix.

    Args:
        raw_query: Text exactly as the user submitted it
        prefix: Bang-prefix character

    Returns:
        ParsedQuery with the token (prefix included) and the other words
        re-joined with single spaces
    """
    words = (raw_query or "").split()

    for i, word in enumerate(words):
        if word.startswith(prefix):
            return ParsedQuery(
                trigger_token=word,
                remainder=" ".join(words[:i] + words[i + 1:]),
            )

    return ParsedQuery(trigger_token=None, remainder=" ".join(words))


def _build_url(template: str, remainder: str, placeholder: str) -> str:
    return template.replace(placeholder, escape_remainder(remainder))


def _default_url(
    remainder: str,
    catalog: BangCatalog,
    default_trigger: Optional[str],
    prefix: str,
    placeholder: str,
) -> str:
    """Resolve text that has no usable bang via the default bang or fallback."""
    if default_trigger:
        definition = catalog.lookup(strip_prefix(default_trigger.strip(), prefix))
        if definition is not None:
            return _build_url(definition.url_template, remainder, placeholder)
        logger.debug(f"Default bang '{default_trigger}' not in catalog, using fallback")

    return _build_url(FALLBACK_URL_TEMPLATE, remainder, DEFAULT_PLACEHOLDER)


def resolve(
    raw_query: str,
    catalog: BangCatalog,
    default_trigger: Optional[str] = None,
    prefix: str = DEFAULT_PREFIX,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> str:
    """
    Compute the destination URL for a submitted query.

    Args:
        raw_query: Text exactly as the user submitted it
        catalog: Catalog snapshot to resolve triggers against
        default_trigger: Bang used when the query has none (optional)
        prefix: Bang-prefix character
        placeholder: Placeholder inside URL templates

    Returns:
        Destination URL. Never raises for malformed query text; unknown
        bangs fall back to searching the whole query literally.
    """
    raw_query = raw_query or ""
    parsed = parse_query(raw_query, prefix)

    if parsed.trigger_token is None:
        return _default_url(parsed.remainder, catalog, default_trigger, prefix, placeholder)

    definition: Optional[BangDefinition] = catalog.lookup(parsed.trigger(prefix))
    if definition is None:
        logger.debug(f"Unknown bang {parsed.trigger_token}, searching literally")
        return _default_url(raw_query.strip(), catalog, default_trigger, prefix, placeholder)

    return _build_url(definition.url_template, parsed.remainder, placeholder)


class RedirectResolver:
    """Resolver bound to a catalog and the user's options."""

    def __init__(
        self,
        catalog: BangCatalog,
        default_trigger: Optional[str] = None,
        prefix: str = DEFAULT_PREFIX,
        placeholder: str = DEFAULT_PLACEHOLDER,
    ):
        self.catalog = catalog
        self.default_trigger = default_trigger
        self.prefix = prefix
        self.placeholder = placeholder

    def parse(self, raw_query: str) -> ParsedQuery:
        return parse_query(raw_query, self.prefix)

    def resolve(self, raw_query: str) -> str:
        return resolve(
            raw_query,
            self.catalog,
            default_trigger=self.default_trigger,
            prefix=self.prefix,
            placeholder=self.placeholder,
        )
