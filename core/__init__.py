"""
Connection management core for the remote control client
"""

from .connection_state import ConnectionStatus, TransportEvent, ConnectionStateMachine
from .exceptions import (
    RemoteControlError,
    NotConnectedError,
    AddressMissingError,
    InvalidCommandError,
    TransportError,
    ConnectionDroppedError,
)

__all__ = [
    "ConnectionStatus",
    "TransportEvent",
    "ConnectionStateMachine",
    "RemoteControlError",
    "NotConnectedError",
    "AddressMissingError",
    "InvalidCommandError",
    "TransportError",
    "ConnectionDroppedError",
]
