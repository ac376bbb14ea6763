"""Dispatch loop that runs fetch effects and feeds responses back in."""

from __future__ import annotations

import concurrent.futures
import logging
import queue
from typing import Callable, List, Optional

from .decoding import TransportErrorKind, classify_transport_error
from .models import Event, FeedResponse, FetchFeed, Model
from .state import update

logger = logging.getLogger(__name__)

Listener = Callable[[Model], None]


class Driver:
    """Owns the current model and performs the effects the transitions ask for.

    Fetches run on a worker pool. Their results are queued and only applied
    when the owning thread calls :meth:`process_pending`, so every transition
    happens on one thread, one event at a time.
    """

    def __init__(
        self,
        client,
        model: Optional[Model] = None,
        executor: Optional[concurrent.futures.Executor] = None,
    ):
        self.client = client
        self.model = model or Model()
        self._owns_executor = executor is None
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="feed-fetch"
        )
        self._responses: "queue.Queue[FeedResponse]" = queue.Queue()
        self._listeners: List[Listener] = []
        self._in_flight = 0
        self._closed = False

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def dispatch(self, event: Event) -> Model:
        """Apply one event and start any fetch it produces."""
        if self._closed:
            raise RuntimeError("Driver is closed")
        self.model, effect = update(self.model, event)
        logger.debug("Applied %s -> %s", type(event).__name__, self.model.request)
        for listener in self._listeners:
            listener(self.model)
        if effect is not None:
            self._start(effect)
        return self.model

    def _start(self, effect: FetchFeed) -> None:
        future = self._executor.submit(self.client.fetch, effect)
        self._in_flight += 1
        future.add_done_callback(lambda done: self._on_done(effect, done))

    def _on_done(self, effect: FetchFeed, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            logger.debug("Fetch for request #%d cancelled on close", effect.seq)
            return
        exc = future.exception()
        if exc is None:
            self._responses.put(future.result())
            return
        logger.error("Fetch for request #%d crashed", effect.seq, exc_info=exc)
        self._responses.put(
            FeedResponse(
                seq=effect.seq,
                url=effect.url,
                outcome=classify_transport_error(TransportErrorKind.OTHER),
            )
        )

    def process_pending(self, wait: bool = False, timeout: Optional[float] = None) -> int:
        """Apply completed responses.

        With ``wait`` set, block (up to ``timeout`` seconds) for the first one.
        Returns the number of responses applied.
        """
        processed = 0
        block = wait
        while True:
            try:
                response = self._responses.get(block=block, timeout=timeout if block else None)
            except queue.Empty:
                break
            block = False
            self._in_flight -= 1
            self.dispatch(response)
            processed += 1
        return processed

    def wait_idle(self, timeout: Optional[float] = None) -> Model:
        """Process responses until no fetch is outstanding."""
        while self._in_flight:
            if not self.process_pending(wait=True, timeout=timeout):
                logger.warning("Timed out waiting for %d fetch(es)", self._in_flight)
                break
        return self.model

    def close(self) -> None:
        """Stop the worker pool, waiting for running fetches, then close the client."""
        if self._closed:
            return
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=True, cancel_futures=True)
        close = getattr(self.client, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "Driver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
