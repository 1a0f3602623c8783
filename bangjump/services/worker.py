"""
Suggestion Worker - Run bang matching off the interactive thread.

Requests and responses are plain messages:
  MatchRequest(request_id, partial_trigger, catalog_version)  → worker
  MatchResponse(request_id, result, catalog_version)          → caller

Matching runs on a single background thread and the response is handed back
to the caller's event loop. With no running loop and no injected dispatch,
matching runs in submit() instead, so on_response never fires on the worker
thread. Responses can arrive out of order; the worker never drops them, the
controller keeps only the latest request_id.

If the background executor can't be created or a computation fails, matching
runs synchronously on the caller's thread instead. Same results, only the
latency changes.
"""

import asyncio
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from bangjump.errors import WorkerFailure, WorkerUnavailable
from bangjump.search.bangs import BangDefinition
from bangjump.search.catalog import BangCatalog
from bangjump.search.matcher import DEFAULT_MAX_ITEMS, match


@dataclass(frozen=True)
class MatchRequest:
    """Ask for suggestions for a partial trigger."""
    request_id: int
    partial_trigger: str
    catalog_version: int = 0


@dataclass(frozen=True)
class MatchResponse:
    """Ranked suggestions for one request."""
    request_id: int
    result: tuple[BangDefinition, ...]
    catalog_version: int = 0


ResponseCallback = Callable[[MatchResponse], None]
Dispatch = Callable[[Callable[[], None]], None]


def _default_executor() -> Executor:
    return ThreadPoolExecutor(max_workers=1, thread_name_prefix="bang-match")


class SuggestionWorker:
    """
    Background matcher with a synchronous fallback.

    Args:
        max_items: Cap passed to the matcher
        executor_factory: Creates the background executor
                          (default: single-thread ThreadPoolExecutor)
        dispatch: Hands a callable back to the interactive loop. Default is
                  the asyncio loop running at submit time; with neither,
                  requests are matched synchronously in submit().
    """

    def __init__(
        self,
        max_items: int = DEFAULT_MAX_ITEMS,
        executor_factory: Optional[Callable[[], Executor]] = None,
        dispatch: Optional[Dispatch] = None,
    ):
        self.max_items = max_items
        self._executor_factory = executor_factory or _default_executor
        self._dispatch = dispatch
        self._executor: Optional[Executor] = None
        self._started = False
        self._closed = False

    @property
    def is_background(self) -> bool:
        """True when matching runs off the caller's thread."""
        return self._executor is not None

    def start(self) -> bool:
        """
        Create the background executor.

        Returns:
            True if matching will run in the background, False if the
            worker fell back to synchronous matching
        """
        if self._started:
            return self.is_background
        self._started = True

        try:
            self._executor = self._executor_factory()
            if self._executor is None:
                raise WorkerUnavailable("Executor factory returned nothing")
        except Exception:
            self._executor = None
            logger.exception("Suggestion worker unavailable, matching in-thread")
            return False

        logger.debug("Suggestion worker started")
        return True

    def _compute(self, request: MatchRequest, catalog: BangCatalog) -> MatchResponse:
        return MatchResponse(
            request_id=request.request_id,
            result=match(catalog, request.partial_trigger, self.max_items),
            catalog_version=catalog.version,
        )

    def _resolve_dispatch(self) -> Optional[Dispatch]:
        if self._dispatch is not None:
            return self._dispatch
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None
        return loop.call_soon_threadsafe

    def submit(
        self,
        request: MatchRequest,
        catalog: BangCatalog,
        on_response: ResponseCallback,
    ) -> Optional[Future]:
        """
        Compute suggestions for a request and deliver them to on_response.

        Returns:
            The background Future, or None if the response was delivered
            synchronously
        """
        if self._closed:
            logger.debug(f"Worker shut down, ignoring request {request.request_id}")
            return None

        if not self._started:
            self.start()

        dispatch = self._resolve_dispatch()

        if self._executor is None or dispatch is None:
            on_response(self._compute(request, catalog))
            return None

        try:
            future = self._executor.submit(self._compute, request, catalog)
        except RuntimeError as e:
            # Executor was shut down underneath us
            logger.warning(f"Suggestion worker rejected request, matching in-thread: {e}")
            self._executor = None
            on_response(self._compute(request, catalog))
            return None

        def _done(fut: Future):
            if fut.cancelled():
                return
            error = fut.exception()
            if error is not None:
                failure = WorkerFailure(f"Background match failed for request {request.request_id}")
                logger.opt(exception=error).warning(f"{failure}, matching in-thread")
                dispatch(lambda: on_response(self._compute(request, catalog)))
                return
            response = fut.result()
            dispatch(lambda: on_response(response))

        future.add_done_callback(_done)
        return future

    def shutdown(self) -> None:
        """Stop accepting work. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
            logger.debug("Suggestion worker shut down")
