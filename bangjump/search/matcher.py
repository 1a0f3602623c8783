"""
Match Engine - Rank bang definitions against a partially typed trigger.

Ranking (case-insensitive), each definition in its best tier only:
  1. Trigger equals the partial
  2. Trigger starts with the partial: shorter triggers first, then higher
     weight, then alphabetical
  3. Service name contains the partial: higher weight first, then
     alphabetical by service name

The result is capped at max_items. This is a pure function so it can run
on the background worker or inline on the caller's thread.
"""

from loguru import logger

from bangjump.errors import MalformedPartialTrigger
from bangjump.search.bangs import BangDefinition
from bangjump.search.catalog import BangCatalog

DEFAULT_MAX_ITEMS = 25

EXACT, PREFIX, NAME = range(3)


def validate_partial_trigger(partial_trigger: str) -> str:
    """
    Return the partial trigger if it is matchable.

    Raises:
        MalformedPartialTrigger: If it contains whitespace
    """
    if any(ch.isspace() for ch in partial_trigger):
        raise MalformedPartialTrigger(f"Partial trigger contains whitespace: {partial_trigger!r}")
    return partial_trigger


def _rank_key(tier: int, definition: BangDefinition) -> tuple:
    trigger = definition.key
    if tier == PREFIX:
        return (tier, len(trigger), -definition.weight, trigger)
    if tier == NAME:
        return (tier, 0, -definition.weight, definition.service_name.lower(), trigger)
    return (tier, 0, 0, trigger)


def match(
    catalog: BangCatalog,
    partial_trigger: str,
    max_items: int = DEFAULT_MAX_ITEMS,
) -> tuple[BangDefinition, ...]:
    """
    Rank catalog entries for a partial trigger.

    Args:
        catalog: Catalog snapshot to search
        partial_trigger: Text typed after the prefix character
        max_items: Maximum number of candidates to return

    Returns:
        Ranked tuple of definitions (empty for empty or malformed input)
    """
    if not partial_trigger or max_items <= 0:
        return ()

    try:
        validate_partial_trigger(partial_trigger)
    except MalformedPartialTrigger as e:
        logger.debug(f"Not matching: {e}")
        return ()

    needle = partial_trigger.lower()
    ranked = []

    for definition in catalog:
        trigger = definition.key
        if trigger == needle:
            tier = EXACT
        elif trigger.startswith(needle):
            tier = PREFIX
        elif needle in definition.service_name.lower():
            tier = NAME
        else:
            continue
        ranked.append((_rank_key(tier, definition), definition))

    ranked.sort(key=lambda item: item[0])
    return tuple(definition for _key, definition in ranked[:max_items])
