"""
Tests for query parsing and redirect resolution.

Tests bang token detection anywhere in the query, URL escaping, the
default-bang and hard-coded fallbacks, and literal handling of unknown bangs.
"""

import pytest

from bangjump.search.bangs import Origin
from bangjump.search.catalog import BangCatalog
from bangjump.search.resolver import (
    FALLBACK_URL_TEMPLATE,
    ParsedQuery,
    RedirectResolver,
    escape_remainder,
    parse_query,
    resolve,
)

from conftest import make_bang

FALLBACK_PREFIX = FALLBACK_URL_TEMPLATE.replace("{q}", "")


class TestParseQuery:
    """Test splitting a raw query into bang token and remainder."""

    def test_leading_bang(self):
        assert parse_query("!w albert einstein") == ParsedQuery("!w", "albert einstein")

    def test_trailing_bang(self):
        assert parse_query("albert einstein !w") == ParsedQuery("!w", "albert einstein")

    def test_middle_bang_keeps_word_order(self):
        assert parse_query("albert !w einstein") == ParsedQuery("!w", "albert einstein")

    def test_first_bang_wins(self):
        parsed = parse_query("!w !g einstein")
        assert parsed.trigger_token == "!w"
        assert parsed.remainder == "!g einstein"

    def test_no_bang(self):
        assert parse_query("hello world") == ParsedQuery(None, "hello world")

    def test_collapses_whitespace(self):
        assert parse_query("  a   !w \t b  ").remainder == "a b"

    def test_bang_inside_word_is_not_a_token(self):
        assert parse_query("hello!w world").trigger_token is None

    def test_custom_prefix(self):
        parsed = parse_query("#w einstein", prefix="#")
        assert parsed.trigger_token == "#w"
        assert parsed.trigger("#") == "w"

    def test_empty_query(self):
        assert parse_query("") == ParsedQuery(None, "")


class TestResolve:
    """Test URL construction for known bangs."""

    def test_wikipedia_round_trip(self, small_catalog):
        url = resolve("!w albert einstein", small_catalog)
        assert url == "https://en.wikipedia.org/wiki/albert%20einstein"

    def test_trigger_case_insensitive(self, small_catalog):
        assert resolve("!W albert", small_catalog) == "https://en.wikipedia.org/wiki/albert"

    def test_bang_at_end(self, small_catalog):
        assert resolve("albert einstein !w", small_catalog) == "https://en.wikipedia.org/wiki/albert%20einstein"

    def test_empty_remainder(self, small_catalog):
        assert resolve("!w", small_catalog) == "https://en.wikipedia.org/wiki/"

    def test_special_characters_escaped(self, small_catalog):
        url = resolve("!w c++ & rust/go", small_catalog)
        assert url == "https://en.wikipedia.org/wiki/c%2B%2B%20%26%20rust%2Fgo"

    def test_custom_placeholder(self):
        catalog = BangCatalog.build([], builtins=[
            make_bang("x", url="https://x.test/search/%s"),
        ])
        assert resolve("!x a b", catalog, placeholder="%s") == "https://x.test/search/a%20b"

    def test_template_without_placeholder(self):
        catalog = BangCatalog.build([], builtins=[make_bang("home", url="https://home.test/")])
        assert resolve("!home anything", catalog) == "https://home.test/"


class TestResolveFallbacks:
    """Test default bang, hard-coded fallback, and unknown bangs."""

    def test_no_bang_without_default_uses_fallback(self, small_catalog):
        url = resolve("hello world", small_catalog)
        assert url == FALLBACK_PREFIX + "hello%20world"

    def test_no_bang_uses_default_trigger(self, small_catalog):
        url = resolve("hello world", small_catalog, default_trigger="w")
        assert url == "https://en.wikipedia.org/wiki/hello%20world"

    def test_default_trigger_may_include_prefix(self, small_catalog):
        url = resolve("hello", small_catalog, default_trigger="!w")
        assert url == "https://en.wikipedia.org/wiki/hello"

    def test_unknown_default_trigger_uses_fallback(self, small_catalog):
        url = resolve("hello", small_catalog, default_trigger="nope")
        assert url == FALLBACK_PREFIX + "hello"

    def test_unknown_bang_keeps_whole_query(self, small_catalog):
        url = resolve("!zz something", small_catalog, default_trigger="ddg")
        assert url == "https://duckduckgo.com/?q=" + escape_remainder("!zz something")
        assert "something" in url and "zz" in url

    def test_bare_prefix_is_literal(self, small_catalog):
        url = resolve("! wow", small_catalog)
        assert url == FALLBACK_PREFIX + escape_remainder("! wow")

    def test_custom_override_used(self, small_catalog):
        catalog = BangCatalog.build(
            [make_bang("w", "Mirror", origin=Origin.CUSTOM, url="https://wiki.mirror/{q}")],
            builtins=small_catalog.definitions,
        )
        assert resolve("!w x", catalog) == "https://wiki.mirror/x"

    @pytest.mark.parametrize("query", ["", "   ", "!", "!!!", "\t\n", "a" * 5000, "!w caf\udcff", "\ud800 !g"])
    def test_never_raises(self, small_catalog, query):
        assert resolve(query, small_catalog).startswith("https://")


class TestEscapeRemainder:
    """Test escaping matches encodeURIComponent."""

    def test_space_is_percent_20(self):
        assert escape_remainder("a b") == "a%20b"

    def test_unreserved_kept(self):
        assert escape_remainder("a-b_c.d~e!f*g'h(i)") == "a-b_c.d~e!f*g'h(i)"

    def test_unicode_encoded(self):
        assert escape_remainder("café") == "caf%C3%A9"

    def test_lone_surrogate_encoded(self):
        assert escape_remainder("caf\udcff") == "caf%ED%B3%BF"

    def test_surrogate_from_argv_resolves(self, small_catalog):
        url = resolve("!w caf\udcff", small_catalog)
        assert url == "https://en.wikipedia.org/wiki/caf%ED%B3%BF"


class TestRedirectResolver:
    """Test the options-bound resolver object."""

    def test_bound_options(self, small_catalog):
        resolver = RedirectResolver(small_catalog, default_trigger="w")
        assert resolver.resolve("tea") == "https://en.wikipedia.org/wiki/tea"
        assert resolver.parse("!g tea").trigger_token == "!g"

    def test_custom_prefix(self, small_catalog):
        resolver = RedirectResolver(small_catalog, prefix="@")
        assert resolver.resolve("@w tea") == "https://en.wikipedia.org/wiki/tea"
        assert resolver.resolve("!w tea").startswith(FALLBACK_PREFIX)
