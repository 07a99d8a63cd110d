"""
Single-threaded event loop for socket events and timers.

Transport callbacks fire on the socket's reader thread and timers on their own
threads; both only enqueue work here, so every state change runs serially on
the loop thread.
"""

import threading
from queue import Queue, Empty
from typing import Any, Callable, Optional, Set

from core.logging_config import get_logger

logger = get_logger(__name__)


class TimerHandle:
    """Cancellable handle for a delayed callback"""

    def __init__(self, loop: "EventLoop", delay: float, callback: Callable, args: tuple):
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False
        self._loop = loop
        self._timer = threading.Timer(delay, self._fire)
        self._timer.daemon = True

    def _start(self):
        self._timer.start()

    def _fire(self):
        self._loop._discard_timer(self)
        if not self.cancelled:
            self._loop.call_soon(self._run)

    def _run(self):
        # Cancellation may land between the timer thread and the loop thread
        if not self.cancelled:
            self.callback(*self.args)

    def cancel(self):
        """Prevent the callback from running"""
        self.cancelled = True
        self._timer.cancel()
        self._loop._discard_timer(self)


class EventLoop:
    """FIFO callback queue drained by one dispatcher thread"""

    def __init__(self, name: str = "RemoteEventLoop", poll_interval: float = 0.1):
        self.name = name
        self.poll_interval = poll_interval
        self._queue: Queue = Queue()
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._timers: Set[TimerHandle] = set()
        self._timers_lock = threading.Lock()

        # Stats
        self.processed_count = 0
        self.error_count = 0

    def start(self):
        """Start the dispatcher thread"""
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(target=self._process_callbacks, daemon=True, name=self.name)
        self._thread.start()
        logger.debug("Event loop started", extra={"extra_data": {"name": self.name}})

    def is_running(self) -> bool:
        return self._running

    def in_loop_thread(self) -> bool:
        """True when called from the dispatcher thread"""
        return self._thread is not None and threading.current_thread() is self._thread

    def call_soon(self, callback: Callable, *args: Any):
        """Queue a callback to run on the loop thread"""
        self._queue.put((callback, args))

    def call_later(self, delay: float, callback: Callable, *args: Any) -> TimerHandle:
        """Queue a callback after delay seconds"""
        handle = TimerHandle(self, delay, callback, args)
        with self._timers_lock:
            self._timers.add(handle)
        handle._start()
        return handle

    def pending_timers(self) -> int:
        with self._timers_lock:
            return len(self._timers)

    def _discard_timer(self, handle: TimerHandle):
        with self._timers_lock:
            self._timers.discard(handle)

    def _process_callbacks(self):
        """Run queued callbacks in order"""
        while self._running:
            try:
                callback, args = self._queue.get(timeout=self.poll_interval)
            except Empty:
                continue

            try:
                callback(*args)
            except Exception:
                self.error_count += 1
                logger.exception("Error in event loop callback %s", getattr(callback, "__name__", callback))
            finally:
                self.processed_count += 1

    def shutdown(self, timeout: float = 2.0):
        """Cancel timers and stop the dispatcher thread"""
        with self._timers_lock:
            timers = list(self._timers)
            self._timers.clear()
        for handle in timers:
            handle.cancel()

        self._running = False
        if self._thread and self._thread.is_alive() and not self.in_loop_thread():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Event loop thread did not exit in time")
