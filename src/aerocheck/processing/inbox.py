"""Single-writer event inbox for a ``FlightRecorder``.

GPS fixes arrive on the location service's thread and signal ticks on a timer
thread.  Neither touches the recorder directly: both enqueue events here, and
one consumer (``run`` on a worker thread, or ``drain`` from an existing loop)
applies them to the recorder in arrival order.

Usage:
    inbox = FlightEventInbox(recorder)
    ticker = SignalTicker(inbox)
    ticker.start()
    ...
    inbox.submit_fix(fix)                           # from any thread
    future = inbox.submit(lambda r: r.next_phase())  # from any thread
    ...
    inbox.run(stop_event)                           # consumer thread
"""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable, NamedTuple, Union

from aerocheck.config import config
from aerocheck.flight_data import GPSFix
from aerocheck.recorder import FlightRecorder

logger = logging.getLogger(__name__)

Command = Callable[[FlightRecorder], Any]


class FixEvent(NamedTuple):
    fix: GPSFix


class TickEvent(NamedTuple):
    pass


class CommandEvent(NamedTuple):
    command: Command
    future: Future


InboxEvent = Union[FixEvent, TickEvent, CommandEvent]


class FlightEventInbox:
    def __init__(self, recorder: FlightRecorder):
        self.recorder = recorder
        self._queue: queue.Queue[InboxEvent] = queue.Queue()

    # ------------------------------------------------------------------
    # Producers (any thread)
    # ------------------------------------------------------------------

    def submit_fix(self, fix: GPSFix) -> None:
        self._queue.put(FixEvent(fix))

    def submit_tick(self) -> None:
        self._queue.put(TickEvent())

    def submit(self, command: Command) -> Future:
        """Queue ``command(recorder)``; the future resolves to its result."""
        future: Future = Future()
        self._queue.put(CommandEvent(command, future))
        return future

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    # ------------------------------------------------------------------
    # Consumer (one thread)
    # ------------------------------------------------------------------

    def drain(self) -> int:
        """Apply every queued event without blocking; returns how many ran."""
        processed = 0
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return processed
            self._dispatch(event)
            processed += 1

    def run(self, stop: threading.Event, poll_interval: float = 0.1) -> None:
        """Consume events until *stop* is set, then apply what is left."""
        logger.debug("Inbox consumer started")
        while not stop.is_set():
            try:
                event = self._queue.get(timeout=poll_interval)
            except queue.Empty:
                continue
            self._dispatch(event)
        self.drain()
        logger.debug("Inbox consumer stopped")

    def _dispatch(self, event: InboxEvent) -> None:
        if isinstance(event, FixEvent):
            self.recorder.process_fix(event.fix)
        elif isinstance(event, TickEvent):
            self.recorder.tick()
        else:
            if not event.future.set_running_or_notify_cancel():
                return
            try:
                result = event.command(self.recorder)
            except Exception as e:
                logger.warning(f"Inbox command failed: {e!r}")
                event.future.set_exception(e)
            else:
                event.future.set_result(result)


class SignalTicker(threading.Thread):
    """Enqueues a signal-quality tick every ``interval`` seconds."""

    def __init__(self, inbox: FlightEventInbox, interval: float | None = None):
        super().__init__(name="aerocheck-signal-ticker", daemon=True)
        self.inbox = inbox
        self.interval = config.SIGNAL_CHECK_INTERVAL if interval is None else interval
        self._stop_event = threading.Event()

    def run(self) -> None:
        while not self._stop_event.wait(self.interval):
            self.inbox.submit_tick()

    def stop(self) -> None:
        self._stop_event.set()
