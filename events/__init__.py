"""
Event dispatching for the remote control client
"""

from .event_bus import EventBus, EventTypes, SystemEvent
from .dispatcher import EventLoop, TimerHandle

__all__ = ['EventBus', 'EventTypes', 'SystemEvent', 'EventLoop', 'TimerHandle']
