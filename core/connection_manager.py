"""
Connection manager owning the single WebSocket session to the editor host
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

from config import CONNECTION_CONFIG
from core.connection_state import ConnectionStateMachine, ConnectionStatus, TransportEvent
from core.exceptions import AddressMissingError, ConnectionDroppedError, TransportError
from core.logging_config import get_logger, log_with_context
from core.session import Session
from events.dispatcher import EventLoop
from events.event_bus import EventBus, EventTypes

logger = get_logger(__name__)


class RetryTask:
    """A pending reconnect to the address captured at schedule time"""

    def __init__(self, address: str, generation: int, delay: float):
        self.address = address
        self.generation = generation
        self.delay = delay
        self.scheduled_at = time.time()
        self.cancelled = False
        self.handle = None

    def cancel(self):
        self.cancelled = True
        if self.handle is not None:
            self.handle.cancel()

    def __repr__(self):
        return f"RetryTask(address={self.address!r}, generation={self.generation}, cancelled={self.cancelled})"


class ConnectionManager:
    """
    Keeps at most one logical connection to the configured address.

    Every state change runs on the event loop thread. Each session gets a new
    generation number; events from any session other than the current one are
    counted and dropped, and a retry only fires if no newer connect happened
    since it was scheduled.
    """

    def __init__(self,
                 loop: EventLoop,
                 event_bus: Optional[EventBus] = None,
                 session_factory: Callable[..., Session] = Session,
                 reconnect_delay: float = CONNECTION_CONFIG["reconnect_delay"]):
        """
        Args:
            loop: Event loop all transport events and timers run on
            event_bus: Receives connection events (a private bus if omitted)
            session_factory: Called as factory(address, generation, on_event)
            reconnect_delay: Seconds between a close and the next attempt
        """
        self._loop = loop
        self.event_bus = event_bus or EventBus()
        self._session_factory = session_factory
        self.reconnect_delay = reconnect_delay

        self.state = ConnectionStateMachine()
        self.state.add_listener(self._on_status_change)

        self._session: Optional[Session] = None
        self._address: Optional[str] = None
        self._generation = 0
        self._retry_task: Optional[RetryTask] = None
        self._shutting_down = False

        # Stats
        self.connect_attempts = 0
        self.retries_scheduled = 0
        self.stale_events = 0
        self.last_error: Optional[Exception] = None

    @property
    def address(self) -> Optional[str]:
        return self._address

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def retry_task(self) -> Optional[RetryTask]:
        return self._retry_task

    def current_status(self) -> ConnectionStatus:
        return self.state.get_status()

    def add_listener(self, listener: Callable[[ConnectionStatus, ConnectionStatus], None]):
        """Register a (old_status, new_status) callback"""
        self.state.add_listener(listener)

    def remove_listener(self, listener: Callable[[ConnectionStatus, ConnectionStatus], None]):
        self.state.remove_listener(listener)

    def connect(self, address: str):
        """
        Open a new session to address, replacing the current one

        Raises:
            AddressMissingError: address is empty
        """
        address = (address or "").strip()
        if not address:
            raise AddressMissingError()

        self._run_on_loop(self._open_session, address)

    def handle_event(self, session: Session, event: TransportEvent, detail: Any = None):
        """Transport callback entry point, safe from any thread"""
        self._run_on_loop(self._dispatch_event, session, event, detail)

    def get_writable_session(self) -> Optional[Session]:
        """The current session if it is Connected and writable, else None"""
        session = self._session
        if session is None or self.current_status() is not ConnectionStatus.CONNECTED:
            return None
        return session if session.is_writable() else None

    def _run_on_loop(self, callback: Callable, *args: Any):
        if self._loop.in_loop_thread():
            callback(*args)
        else:
            self._loop.call_soon(callback, *args)

    def _open_session(self, address: str):
        if self._shutting_down:
            return

        self._cancel_retry()
        self._close_current("superseded")

        self._generation += 1
        self._address = address
        self.connect_attempts += 1

        log_with_context(logger, logging.INFO, f"Connecting to {address}",
                         generation=self._generation, attempt=self.connect_attempts)
        self.event_bus.emit(EventTypes.CONNECTION_ATTEMPT, {
            "address": address,
            "generation": self._generation,
        }, source="connection_manager")

        try:
            session = self._session_factory(address, self._generation, self.handle_event)
        except Exception as e:
            # Failed before a transport existed: same outcome as error then close
            self._session = None
            self._apply_event(address, TransportEvent.ERROR, e)
            self._apply_event(address, TransportEvent.CLOSE, (None, str(e)))
            return

        self._session = session
        try:
            session.start()
        except Exception as e:
            self._dispatch_event(session, TransportEvent.ERROR, e)
            self._dispatch_event(session, TransportEvent.CLOSE, (None, str(e)))

    def _close_current(self, reason: str):
        session = self._session
        if session is None:
            return

        self._session = None
        session.close()
        logger.debug("Closed session %s (%s)", session.generation, reason)

        if self.current_status() is not ConnectionStatus.DISCONNECTED:
            self.state.apply(TransportEvent.CLOSE, reason)

    def _dispatch_event(self, session: Session, event: TransportEvent, detail: Any):
        if self._shutting_down or session is not self._session:
            self.stale_events += 1
            logger.debug("Ignoring %s from stale session %s", event.value, getattr(session, "generation", None))
            self.event_bus.emit(EventTypes.CONNECTION_STALE_EVENT, {
                "event": event.value,
                "generation": getattr(session, "generation", None),
                "current_generation": self._generation,
            }, source="connection_manager")
            return

        if event is TransportEvent.CLOSE:
            self._session = None

        self._apply_event(session.address, event, detail)

    def _apply_event(self, address: str, event: TransportEvent, detail: Any):
        if event is TransportEvent.OPEN:
            self.state.apply(event, address)
            self.event_bus.emit(EventTypes.CONNECTION_OPENED, {
                "address": address,
                "generation": self._generation,
            }, source="connection_manager")

        elif event is TransportEvent.ERROR:
            error = TransportError(address, detail)
            self.last_error = error
            log_with_context(logger, logging.WARNING, str(error), **error.details)
            self.state.apply(event, str(detail))
            self.event_bus.emit(EventTypes.CONNECTION_ERROR, {
                "address": address,
                "error": str(detail),
                "error_type": type(detail).__name__,
            }, source="connection_manager")

        elif event is TransportEvent.CLOSE:
            code, reason = detail if isinstance(detail, tuple) else (None, None)
            dropped = ConnectionDroppedError(address, code, reason)
            logger.info("WebSocket disconnected. Reconnecting in %ss...", self.reconnect_delay)
            self.state.apply(event, str(dropped))
            self.event_bus.emit(EventTypes.CONNECTION_CLOSED, dict(dropped.details),
                                source="connection_manager")
            self._schedule_retry(address)

    def _schedule_retry(self, address: str):
        if self._shutting_down:
            return

        self._cancel_retry()
        task = RetryTask(address, self._generation, self.reconnect_delay)
        task.handle = self._loop.call_later(self.reconnect_delay, self._fire_retry, task)
        self._retry_task = task
        self.retries_scheduled += 1

        self.event_bus.emit(EventTypes.RECONNECT_SCHEDULED, {
            "address": address,
            "generation": task.generation,
            "delay": task.delay,
        }, source="connection_manager")

    def _fire_retry(self, task: RetryTask):
        if self._retry_task is task:
            self._retry_task = None

        if task.cancelled or task.generation != self._generation or self._shutting_down:
            logger.debug("Discarding %r", task)
            self.event_bus.emit(EventTypes.RECONNECT_DISCARDED, {
                "address": task.address,
                "generation": task.generation,
                "current_generation": self._generation,
            }, source="connection_manager")
            return

        self._open_session(task.address)

    def _cancel_retry(self):
        task = self._retry_task
        if task is None:
            return
        self._retry_task = None
        task.cancel()
        self.event_bus.emit(EventTypes.RECONNECT_CANCELLED, {
            "address": task.address,
            "generation": task.generation,
        }, source="connection_manager")

    def _on_status_change(self, old_status: ConnectionStatus, new_status: ConnectionStatus):
        self.event_bus.emit(EventTypes.CONNECTION_STATUS_CHANGED, {
            "from_status": old_status.value,
            "to_status": new_status.value,
            "address": self._address,
        }, source="connection_manager")

    def get_stats(self) -> Dict[str, Any]:
        return {
            "status": self.current_status().value,
            "address": self._address,
            "generation": self._generation,
            "connect_attempts": self.connect_attempts,
            "retries_scheduled": self.retries_scheduled,
            "retry_pending": self._retry_task is not None,
            "stale_events": self.stale_events,
            "last_error": str(self.last_error) if self.last_error else None,
        }

    def shutdown(self, timeout: float = CONNECTION_CONFIG["close_timeout"]):
        """
        Stop retrying and close the current session

        The close runs on the loop thread, after any connect already queued
        there, so no session can be opened once this returns.
        """
        logger.info("Shutting down connection manager...")
        closed = []

        if self._loop.in_loop_thread() or not self._loop.is_running():
            closed.append(self._shutdown_on_loop())
        else:
            done = threading.Event()

            def on_loop():
                try:
                    closed.append(self._shutdown_on_loop())
                finally:
                    done.set()

            self._loop.call_soon(on_loop)
            if not done.wait(timeout=timeout):
                logger.warning("Event loop did not process shutdown in time")

        session = closed[0] if closed else None
        if session is not None and not session.join(timeout=timeout):
            logger.warning("Session %s did not close in time", session.generation)

    def _shutdown_on_loop(self) -> Optional[Session]:
        self._shutting_down = True
        self._cancel_retry()

        session = self._session
        self._session = None
        if session is not None:
            session.close()
        return session
