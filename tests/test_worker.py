"""
Tests for the background SuggestionWorker.

Uses a real ThreadPoolExecutor for the background path. Failure paths use
executors that refuse to start or fail their futures, to check the
synchronous in-thread fallback.
"""

import asyncio
import threading
from concurrent.futures import Executor, Future

from loguru import logger

from bangjump.services.worker import MatchRequest, MatchResponse, SuggestionWorker


class _FailingExecutor(Executor):
    """Executor whose jobs always fail."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        future.set_exception(RuntimeError("boom"))
        return future


class _ClosedExecutor(Executor):
    """Executor that rejects every job, like one that was shut down."""

    def submit(self, fn, *args, **kwargs):
        raise RuntimeError("cannot schedule new futures after shutdown")


def _broken_factory():
    raise OSError("no threads for you")


def _call_now(fn):
    fn()


class TestWorkerBackground:
    """Test matching on the background executor."""

    def test_response_delivered(self, small_catalog):
        worker = SuggestionWorker(max_items=10, dispatch=_call_now)
        assert worker.start() is True
        assert worker.is_background

        received = []
        done = threading.Event()

        def on_response(response):
            received.append(response)
            done.set()

        future = worker.submit(MatchRequest(1, "g", small_catalog.version), small_catalog, on_response)
        assert future is not None
        assert done.wait(timeout=5)
        worker.shutdown()

        response = received[0]
        assert isinstance(response, MatchResponse)
        assert response.request_id == 1
        assert response.catalog_version == small_catalog.version
        assert response.result[0].trigger == "g"

    def test_max_items_respected(self, small_catalog):
        worker = SuggestionWorker(max_items=2, dispatch=_call_now)
        done = threading.Event()
        received = []

        def on_response(response):
            received.append(response)
            done.set()

        worker.submit(MatchRequest(1, "g"), small_catalog, on_response)
        assert done.wait(timeout=5)
        worker.shutdown()
        assert len(received[0].result) == 2

    def test_custom_dispatch_used(self, small_catalog):
        delivered = []
        done = threading.Event()

        def dispatch(fn):
            delivered.append(fn)
            done.set()

        worker = SuggestionWorker(dispatch=dispatch)
        worker.submit(MatchRequest(7, "w"), small_catalog, lambda r: delivered.append(r))
        assert done.wait(timeout=5)
        worker.shutdown()

        # Nothing reaches the callback until the loop runs the dispatched call
        assert len(delivered) == 1
        delivered[0]()
        assert delivered[1].request_id == 7

    def test_delivered_on_running_event_loop(self, small_catalog):
        async def scenario():
            loop_thread = threading.get_ident()
            worker = SuggestionWorker()
            result = asyncio.get_running_loop().create_future()

            def on_response(response):
                result.set_result((threading.get_ident(), response))

            worker.submit(MatchRequest(3, "g"), small_catalog, on_response)
            thread_id, response = await asyncio.wait_for(result, timeout=5)
            worker.shutdown()
            return loop_thread, thread_id, response

        loop_thread, thread_id, response = asyncio.run(scenario())
        assert thread_id == loop_thread
        assert response.request_id == 3

    def test_no_loop_delivers_on_caller_thread(self, small_catalog):
        worker = SuggestionWorker()
        assert worker.start() is True
        callback_threads = []

        future = worker.submit(
            MatchRequest(5, "g"),
            small_catalog,
            lambda response: callback_threads.append(threading.current_thread()),
        )
        worker.shutdown()

        assert future is None
        assert callback_threads == [threading.current_thread()]


class TestWorkerFallback:
    """Test synchronous fallback when the executor is unusable."""

    def test_unavailable_executor_falls_back(self, small_catalog):
        worker = SuggestionWorker(executor_factory=_broken_factory)
        assert worker.start() is False
        assert not worker.is_background

        received = []
        future = worker.submit(MatchRequest(1, "g"), small_catalog, received.append)
        assert future is None
        # Delivered synchronously, before submit returned
        assert received[0].result[0].trigger == "g"

    def test_start_failure_logs_traceback(self):
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="WARNING")
        try:
            SuggestionWorker(executor_factory=_broken_factory).start()
        finally:
            logger.remove(sink_id)

        assert records[0]["level"].name == "ERROR"
        assert isinstance(records[0]["exception"].value, OSError)

    def test_failed_computation_logs_cause(self, small_catalog):
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="WARNING")
        try:
            worker = SuggestionWorker(executor_factory=_FailingExecutor, dispatch=_call_now)
            worker.submit(MatchRequest(6, "w"), small_catalog, lambda response: None)
        finally:
            logger.remove(sink_id)

        assert "request 6" in records[0]["message"]
        assert str(records[0]["exception"].value) == "boom"

    def test_failed_computation_falls_back(self, small_catalog):
        worker = SuggestionWorker(executor_factory=_FailingExecutor, dispatch=_call_now)
        received = []
        worker.submit(MatchRequest(2, "w"), small_catalog, received.append)
        assert len(received) == 1
        assert received[0].request_id == 2
        assert received[0].result[0].trigger == "w"

    def test_rejected_job_falls_back(self, small_catalog):
        worker = SuggestionWorker(executor_factory=_ClosedExecutor, dispatch=_call_now)
        received = []
        worker.submit(MatchRequest(4, "g"), small_catalog, received.append)
        assert received[0].request_id == 4
        assert not worker.is_background

    def test_fallback_matches_background_results(self, small_catalog):
        sync_worker = SuggestionWorker(executor_factory=_broken_factory)
        sync_results = []
        sync_worker.submit(MatchRequest(1, "go"), small_catalog, sync_results.append)

        bg_worker = SuggestionWorker(dispatch=_call_now)
        bg_results = []
        done = threading.Event()
        bg_worker.submit(MatchRequest(1, "go"), small_catalog,
                         lambda r: (bg_results.append(r), done.set()))
        assert done.wait(timeout=5)
        bg_worker.shutdown()

        assert sync_results[0].result == bg_results[0].result


class TestWorkerShutdown:
    """Test shutdown behaviour."""

    def test_shutdown_twice(self):
        worker = SuggestionWorker()
        worker.start()
        worker.shutdown()
        worker.shutdown()
        assert not worker.is_background

    def test_submit_after_shutdown_ignored(self, small_catalog):
        worker = SuggestionWorker()
        worker.start()
        worker.shutdown()
        received = []
        assert worker.submit(MatchRequest(1, "g"), small_catalog, received.append) is None
        assert received == []
