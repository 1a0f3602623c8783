"""
Bang Engine - Wires settings, catalog, suggestions, and redirects together.

The engine is what UI code talks to:
  - Forward input events through the EventSource it was given
  - Receive candidate lists, open/close notifications, and the rewritten
    input text after a bang is picked
  - Call submit(query) when the form is submitted

When the settings report a change, the catalog is rebuilt and the
suggestion controller is replaced by a fresh one (old session discarded).
"""

from typing import Callable, Optional

from loguru import logger

from bangjump.errors import NavigationFailure
from bangjump.search.catalog import BangCatalog
from bangjump.search.resolver import RedirectResolver
from bangjump.services.settings import SettingsService
from bangjump.services.worker import SuggestionWorker
from bangjump.suggestions.controller import SuggestionController
from bangjump.suggestions.events import TextChanged
from bangjump.utils.helpers import insert_trigger, open_url

NAVIGATION_FAILED_MESSAGE = "Could not navigate to the destination"


class BangEngine:
    """
    Top-level facade over the bang core.

    Args:
        settings: Settings provider (custom bangs, default bang, options)
        input_source: EventSource carrying the input's events
        navigate: Navigation sink, returns True on success
        worker: Background matcher (default: SuggestionWorker)
        fixed_position: Suggestion surface uses fixed positioning
        on_candidates_changed: (candidates, selected_index) callback
        on_open_state_changed: (is_open) callback
        on_text_replaced: (new_text, cursor) after a bang was picked
        on_navigation_failed: (message) when submit() could not navigate
    """

    def __init__(
        self,
        settings: SettingsService,
        input_source=None,
        navigate: Callable[[str], bool] = open_url,
        worker: Optional[SuggestionWorker] = None,
        fixed_position: bool = False,
        on_candidates_changed: Optional[Callable] = None,
        on_open_state_changed: Optional[Callable[[bool], None]] = None,
        on_text_replaced: Optional[Callable[[str, int], None]] = None,
        on_navigation_failed: Optional[Callable[[str], None]] = None,
    ):
        self.settings = settings
        self.input_source = input_source
        self.navigate = navigate
        self.fixed_position = fixed_position
        self.on_candidates_changed = on_candidates_changed
        self.on_open_state_changed = on_open_state_changed
        self.on_text_replaced = on_text_replaced
        self.on_navigation_failed = on_navigation_failed

        self.worker = worker or SuggestionWorker(max_items=settings.max_items)
        self.worker.start()

        self.text = ""
        self.catalog: BangCatalog = BangCatalog.build(settings.custom_bangs)
        self.controller: Optional[SuggestionController] = None
        self._disposed = False

        self._untrack = input_source.subscribe(self._track_text) if input_source is not None else None
        self._settings_handler = settings.connect("changed", self._on_settings_changed)
        self._create_controller()

    @property
    def resolver(self) -> RedirectResolver:
        return RedirectResolver(
            self.catalog,
            default_trigger=self.settings.default_trigger,
            prefix=self.settings.prefix,
            placeholder=self.settings.placeholder,
        )

    def _create_controller(self) -> None:
        self.controller = SuggestionController(
            self.catalog,
            self.worker,
            prefix=self.settings.prefix,
            fixed_position=self.fixed_position,
            on_candidates_changed=self.on_candidates_changed,
            on_selection=self._on_selection,
            on_open_state_changed=self.on_open_state_changed,
            input_source=self.input_source,
        )

    def _track_text(self, event) -> bool:
        if isinstance(event, TextChanged):
            self.text = event.text
        return False

    def _on_settings_changed(self, settings: SettingsService) -> None:
        if self._disposed:
            return

        self.catalog = BangCatalog.build(settings.custom_bangs)
        self.worker.max_items = settings.max_items

        if self.controller is not None:
            self.controller.dispose()
        self._create_controller()
        logger.debug(f"Settings changed, suggestions now use catalog v{self.catalog.version}")

    def _on_selection(self, trigger: str) -> None:
        self.text, cursor = insert_trigger(self.text, trigger, self.settings.prefix)
        if self.on_text_replaced:
            self.on_text_replaced(self.text, cursor)

    def resolve(self, query: str) -> str:
        """Destination URL for a query, without navigating."""
        return self.resolver.resolve(query)

    def submit(self, query: str, strict: bool = False) -> bool:
        """
        Resolve a query and hand the URL to the navigation sink.

        Args:
            query: Raw query as submitted
            strict: Raise NavigationFailure instead of returning False

        Returns:
            True if navigation started. On failure, on_navigation_failed is
            called so the UI can undo any loading state.
        """
        url = self.resolve(query)

        try:
            ok = self.navigate(url)
        except OSError as e:
            logger.warning(f"Navigation to {url} raised: {e}")
            ok = False

        if ok:
            if self.controller is not None:
                self.controller.close()
            return True

        logger.warning(f"Navigation to {url} failed")
        if self.on_navigation_failed:
            self.on_navigation_failed(NAVIGATION_FAILED_MESSAGE)
        if strict:
            raise NavigationFailure(url, NAVIGATION_FAILED_MESSAGE)
        return False

    def dispose(self) -> None:
        """Release settings and input subscriptions and stop the worker. Idempotent."""
        if self._disposed:
            return
        self._disposed = True

        self.settings.disconnect(self._settings_handler)
        if self._untrack is not None:
            self._untrack()
            self._untrack = None

        if self.controller is not None:
            self.controller.dispose()
        self.worker.shutdown()
