"""
Shared test fixtures for the bangjump test suite.

Provides real settings TOML files, small hand-built catalogs, and a fake
worker that lets tests deliver match responses in any order.
"""

import pytest
import toml

from bangjump.search.bangs import BangDefinition, Origin
from bangjump.search.catalog import BangCatalog
from bangjump.search.matcher import match
from bangjump.services.worker import MatchResponse


def make_bang(trigger, service_name=None, weight=0, origin=Origin.BUILTIN, url=None):
    return BangDefinition(
        trigger=trigger,
        service_name=service_name or trigger.upper(),
        url_template=url or f"https://{trigger}.example.com/search?q={{q}}",
        weight=weight,
        origin=origin,
    )


@pytest.fixture
def small_catalog():
    """Catalog with only the g/gi/go/gov family plus Wikipedia."""
    builtins = [
        make_bang("g", "Google", weight=100),
        make_bang("gi", "Google Images", weight=50),
        make_bang("go", "Go Docs", weight=50),
        make_bang("gov", "USA.gov", weight=10),
        make_bang("w", "Wikipedia", weight=90, url="https://en.wikipedia.org/wiki/{q}"),
        make_bang("ddg", "DuckDuckGo", weight=80, url="https://duckduckgo.com/?q={q}"),
    ]
    return BangCatalog.build([], builtins=builtins)


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file with options and custom bangs."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "bangs": {"default_trigger": "ddg", "max_items": 10},
        "custom_bangs": {
            "gl": {
                "service_name": "GitLab",
                "url": "https://gitlab.com/search?search={q}",
                "weight": 10,
            },
            "g": {
                "service_name": "My Google",
                "url": "https://google.example/search?q={q}",
            },
        },
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path


class FakeWorker:
    """
    Worker stand-in that holds requests until the test delivers them.

    deliver(i) answers the i-th held request using the real matcher.
    """

    def __init__(self, max_items=25):
        self.max_items = max_items
        self.pending = []
        self.shut_down = False

    def start(self):
        return True

    def submit(self, request, catalog, on_response):
        self.pending.append((request, catalog, on_response))
        return None

    def deliver(self, index=-1):
        request, catalog, on_response = self.pending[index]
        on_response(MatchResponse(
            request_id=request.request_id,
            result=match(catalog, request.partial_trigger, self.max_items),
            catalog_version=catalog.version,
        ))

    def shutdown(self):
        self.shut_down = True


@pytest.fixture
def fake_worker():
    return FakeWorker()
