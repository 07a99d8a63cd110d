"""
Connection status state machine driven by transport events
"""

import threading
import time
from enum import Enum
from typing import Dict, Any, Optional, Callable, List
from datetime import datetime

from core.logging_config import get_logger

logger = get_logger(__name__)


class ConnectionStatus(Enum):
    """Link status as shown to the user"""
    DISCONNECTED = "Disconnected"
    CONNECTED = "Connected"
    CONNECTION_FAILED = "Connection Failed"

    def __str__(self):
        return self.value


class TransportEvent(Enum):
    """Lifecycle events emitted by a session's transport"""
    OPEN = "open"
    CLOSE = "close"
    ERROR = "error"


class StatusTransition:
    """Represents one applied transport event"""
    def __init__(self, from_status: ConnectionStatus, to_status: ConnectionStatus,
                 event: TransportEvent, reason: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.event = event
        self.reason = reason
        self.timestamp = time.time()
        self.datetime = datetime.now()

    def __str__(self):
        return f"{self.from_status.value} → {self.to_status.value} ({self.event.value}{': ' + self.reason if self.reason else ''})"


class ConnectionStateMachine:
    """
    Derives ConnectionStatus from the latest transport event.

    Every event has a single target status regardless of the current one, so
    the status always reflects the most recent event. Listeners are called
    with (old_status, new_status) only when the value changes.
    """

    EVENT_TRANSITIONS = {
        TransportEvent.OPEN: ConnectionStatus.CONNECTED,
        TransportEvent.CLOSE: ConnectionStatus.DISCONNECTED,
        TransportEvent.ERROR: ConnectionStatus.CONNECTION_FAILED,
    }

    def __init__(self, max_history: int = 100):
        self.current_status = ConnectionStatus.DISCONNECTED
        self.status_lock = threading.RLock()

        self.transitions: List[StatusTransition] = []
        self.max_history = max_history

        self.status_listeners: List[Callable[[ConnectionStatus, ConnectionStatus], None]] = []

        self.status_start_time = time.time()
        self.event_counts: Dict[TransportEvent, int] = {event: 0 for event in TransportEvent}

    def get_status(self) -> ConnectionStatus:
        with self.status_lock:
            return self.current_status

    def apply(self, event: TransportEvent, reason: str = "") -> StatusTransition:
        """
        Apply a transport event

        Args:
            event: Event reported by the current session
            reason: Free-form detail for the transition history

        Returns:
            The recorded transition
        """
        with self.status_lock:
            old_status = self.current_status
            new_status = self.EVENT_TRANSITIONS[event]

            transition = StatusTransition(old_status, new_status, event, reason)
            self.transitions.append(transition)
            if len(self.transitions) > self.max_history:
                self.transitions = self.transitions[-self.max_history:]

            self.event_counts[event] += 1
            self.current_status = new_status
            if new_status != old_status:
                self.status_start_time = time.time()

            logger.debug("Status transition: %s", transition)

        # Notify outside the lock so listeners may read status freely
        if new_status != old_status:
            self._notify_listeners(old_status, new_status)

        return transition

    def add_listener(self, listener: Callable[[ConnectionStatus, ConnectionStatus], None]):
        self.status_listeners.append(listener)

    def remove_listener(self, listener: Callable[[ConnectionStatus, ConnectionStatus], None]):
        if listener in self.status_listeners:
            self.status_listeners.remove(listener)

    def _notify_listeners(self, old_status: ConnectionStatus, new_status: ConnectionStatus):
        for listener in list(self.status_listeners):
            try:
                listener(old_status, new_status)
            except Exception:
                logger.exception("Error in status listener")

    def get_status_duration(self) -> float:
        """Seconds spent in the current status"""
        with self.status_lock:
            return time.time() - self.status_start_time

    def get_transition_history(self, limit: int = 10) -> List[Dict[str, Any]]:
        with self.status_lock:
            recent = self.transitions[-limit:] if self.transitions else []
            return [
                {
                    "from": t.from_status.value,
                    "to": t.to_status.value,
                    "event": t.event.value,
                    "reason": t.reason,
                    "timestamp": t.timestamp,
                    "datetime": t.datetime.isoformat()
                }
                for t in recent
            ]

    def get_stats(self) -> Dict[str, Any]:
        with self.status_lock:
            return {
                "current_status": self.current_status.value,
                "status_duration": time.time() - self.status_start_time,
                "transition_count": len(self.transitions),
                "event_counts": {event.value: count for event, count in self.event_counts.items()},
            }
