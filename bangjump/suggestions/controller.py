"""
Suggestion Controller - Drive the bang suggestion surface.

Feeds input events through the session state machine, asks the worker for
matches, and reports changes to the UI through callbacks:
  on_candidates_changed(candidates, selected_index)
  on_selection(trigger)
  on_open_state_changed(is_open)
  on_reposition()

Every match request gets a new request_id. Only the response to the latest
request is shown, so fast typing can't be overwritten by a slow, older
response. After dispose() nothing (late responses, input events) can touch
the controller's state again.
"""

import itertools
from typing import Callable, Optional

from loguru import logger

from bangjump.search.catalog import BangCatalog
from bangjump.services.worker import MatchRequest, MatchResponse, SuggestionWorker
from bangjump.suggestions.session import (
    CLOSED_SESSION,
    CandidatesChanged,
    CandidatesReady,
    OpenStateChanged,
    Reposition,
    RequestMatch,
    Selection,
    SuggestionSession,
    SuggestionState,
    step,
)


class SuggestionController:
    """
    Owns one suggestion session and its worker requests.

    Args:
        catalog: Catalog snapshot to match against
        worker: Background matcher (default: a synchronous-capable
                SuggestionWorker)
        prefix: Bang-prefix character
        fixed_position: Surface is fixed-positioned and must follow resizes
        input_source: Optional event source to subscribe to. The single
                      subscription is released by dispose().
    """

    def __init__(
        self,
        catalog: BangCatalog,
        worker: Optional[SuggestionWorker] = None,
        *,
        prefix: str = "!",
        fixed_position: bool = False,
        on_candidates_changed: Optional[Callable] = None,
        on_selection: Optional[Callable[[str], None]] = None,
        on_open_state_changed: Optional[Callable[[bool], None]] = None,
        on_reposition: Optional[Callable[[], None]] = None,
        input_source=None,
    ):
        self.catalog = catalog
        self.worker = worker or SuggestionWorker()
        self.prefix = prefix
        self.fixed_position = fixed_position

        self.on_candidates_changed = on_candidates_changed
        self.on_selection = on_selection
        self.on_open_state_changed = on_open_state_changed
        self.on_reposition = on_reposition

        self._session = CLOSED_SESSION
        self._request_ids = itertools.count(1)
        self._last_request_id = 0
        self._pending_request_id: Optional[int] = None
        self._disposed = False

        self._unsubscribe = input_source.subscribe(self.handle) if input_source is not None else None

    @property
    def session(self) -> SuggestionSession:
        return self._session

    @property
    def state(self) -> SuggestionState:
        return self._session.state

    @property
    def is_open(self) -> bool:
        return self._session.is_open

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def handle(self, event) -> bool:
        """
        Process one input event.

        Returns:
            True if the event was consumed (UI should suppress its default
            action, e.g. Tab moving focus)
        """
        if self._disposed:
            return False

        transition = step(self._session, event, self.prefix, self.fixed_position)
        self._session = transition.session

        if not self._session.awaiting:
            # Late responses must not reopen or refill a list
            self._pending_request_id = None

        for effect in transition.effects:
            if self._disposed:
                break
            self._apply(effect)

        return transition.consumed

    def _apply(self, effect) -> None:
        if isinstance(effect, RequestMatch):
            self._request(effect.partial_trigger)
        elif isinstance(effect, CandidatesChanged):
            if self.on_candidates_changed:
                self.on_candidates_changed(effect.candidates, effect.selected_index)
        elif isinstance(effect, Selection):
            if self.on_selection:
                self.on_selection(effect.trigger)
        elif isinstance(effect, OpenStateChanged):
            if self.on_open_state_changed:
                self.on_open_state_changed(effect.is_open)
        elif isinstance(effect, Reposition):
            if self.on_reposition:
                self.on_reposition()

    def _request(self, partial_trigger: str) -> None:
        request_id = next(self._request_ids)
        self._last_request_id = request_id
        self._pending_request_id = request_id

        request = MatchRequest(
            request_id=request_id,
            partial_trigger=partial_trigger,
            catalog_version=self.catalog.version,
        )
        self.worker.submit(request, self.catalog, self._on_response)

    def _on_response(self, response: MatchResponse) -> None:
        if self._disposed:
            logger.debug(f"Dropping response {response.request_id}: controller disposed")
            return

        # _pending_request_id is always the latest issued id, or None once
        # the session stopped waiting for matches
        if response.request_id != self._pending_request_id:
            logger.debug(
                f"Dropping stale response {response.request_id} "
                f"(latest is {self._last_request_id})"
            )
            return

        self._pending_request_id = None
        self.handle(CandidatesReady(response.request_id, response.result))

    def close(self) -> None:
        """Close the surface and discard the session. Idempotent."""
        if self._disposed:
            return
        self._pending_request_id = None
        if self._session.is_open:
            self._session = CLOSED_SESSION
            if self.on_open_state_changed:
                self.on_open_state_changed(False)

    def dispose(self) -> None:
        """
        Tear down the controller.

        Closes the surface, releases the input subscription, and detaches
        every callback. Safe to call more than once.
        """
        if self._disposed:
            return

        self.close()
        self._disposed = True

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        self.on_candidates_changed = None
        self.on_selection = None
        self.on_open_state_changed = None
        self.on_reposition = None
        logger.debug("Suggestion controller disposed")
