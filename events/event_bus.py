"""
Event bus for broadcasting connection and command events
"""

import time
import threading
from typing import Dict, Any, List, Callable, Optional
from collections import defaultdict
from datetime import datetime
import uuid

from core.logging_config import get_logger

logger = get_logger(__name__)


class SystemEvent:
    """Represents a system event"""

    def __init__(self, event_type: str, data: Dict[str, Any], source: str = None):
        self.id = str(uuid.uuid4())
        self.type = event_type
        self.data = data
        self.source = source or "system"
        self.timestamp = time.time()
        self.datetime = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary"""
        return {
            "id": self.id,
            "type": self.type,
            "data": self.data,
            "source": self.source,
            "timestamp": self.timestamp,
            "datetime": self.datetime
        }


class EventBus:
    """
    Delivers events to listeners on the emitting thread.

    Emitters run on the event loop thread, so listeners see events in the
    order they happened. A failing listener is logged and skipped.
    """

    def __init__(self, max_history: int = 500):
        self.listeners: Dict[str, List[Callable]] = defaultdict(list)
        self.event_history: List[SystemEvent] = []
        self.max_history = max_history
        self.event_counts = defaultdict(int)
        self._lock = threading.RLock()

    def emit(self, event_type: str, data: Dict[str, Any], source: str = None) -> SystemEvent:
        """Emit an event to the bus"""
        event = SystemEvent(event_type, data, source)

        with self._lock:
            self.event_counts[event.type] += 1
            self.event_history.append(event)
            if len(self.event_history) > self.max_history:
                self.event_history.pop(0)
            specific = list(self.listeners.get(event.type, []))
            wildcard = list(self.listeners.get("*", []))

        for listener in specific:
            try:
                listener(event)
            except Exception:
                logger.exception("Error in event listener for %s", event.type)

        for listener in wildcard:
            try:
                listener(event)
            except Exception:
                logger.exception("Error in wildcard event listener")

        return event

    def on(self, event_type: str, callback: Callable[[SystemEvent], None]):
        """Register a listener for specific event type"""
        with self._lock:
            self.listeners[event_type].append(callback)

    def on_all(self, callback: Callable[[SystemEvent], None]):
        """Register a listener for all events"""
        self.on("*", callback)

    def off(self, event_type: str, callback: Callable[[SystemEvent], None]):
        """Remove a listener"""
        with self._lock:
            if callback in self.listeners[event_type]:
                self.listeners[event_type].remove(callback)

    def get_stats(self) -> Dict[str, Any]:
        """Get event bus statistics"""
        with self._lock:
            return {
                "total_events": sum(self.event_counts.values()),
                "event_counts": dict(self.event_counts),
                "history_size": len(self.event_history),
                "listener_counts": {
                    event_type: len(listeners)
                    for event_type, listeners in self.listeners.items()
                }
            }

    def get_recent_events(self, count: int = 50, event_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get recent events from history"""
        with self._lock:
            events = list(self.event_history)

        if event_type:
            events = [e for e in events if e.type == event_type]

        return [e.to_dict() for e in events[-count:]]


class EventTypes:
    # Connection events
    CONNECTION_ATTEMPT = "connection.attempt"
    CONNECTION_OPENED = "connection.opened"
    CONNECTION_CLOSED = "connection.closed"
    CONNECTION_ERROR = "connection.error"
    CONNECTION_STATUS_CHANGED = "connection.status_changed"
    CONNECTION_STALE_EVENT = "connection.stale_event"

    # Reconnect events
    RECONNECT_SCHEDULED = "reconnect.scheduled"
    RECONNECT_CANCELLED = "reconnect.cancelled"
    RECONNECT_DISCARDED = "reconnect.discarded"

    # Command events
    COMMAND_SENT = "command.sent"
    COMMAND_REJECTED = "command.rejected"

    # Settings events
    ADDRESS_CHANGED = "settings.address_changed"

    # System events
    SYSTEM_START = "system.start"
    SYSTEM_STOP = "system.stop"
