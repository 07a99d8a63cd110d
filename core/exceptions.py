"""
Exceptions for the remote control client
"""

from typing import Optional, Dict, Any


class RemoteControlError(Exception):
    """Base exception for all remote control errors"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class NotConnectedError(RemoteControlError):
    """Raised when a command is sent while the link is down"""
    def __init__(self, message: str = "WebSocket not connected.", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class AddressMissingError(NotConnectedError):
    """Raised when no server address has been configured"""
    def __init__(self, message: str = "IP address not set.", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class InvalidCommandError(RemoteControlError):
    """Raised when a command token is empty"""
    pass


class TransportError(RemoteControlError):
    """Low-level socket error reported by the transport"""
    def __init__(self, address: str, error: Any):
        self.address = address
        self.error = error
        super().__init__(
            f"Transport error for {address}: {error}",
            {"address": address, "error_type": type(error).__name__},
        )


class ConnectionDroppedError(RemoteControlError):
    """Normal or abnormal close of a session"""
    def __init__(self, address: str, code: Optional[int] = None, reason: Optional[str] = None):
        self.address = address
        self.code = code
        self.reason = reason
        super().__init__(
            f"Connection to {address} closed (code={code}, reason={reason or ''})",
            {"address": address, "code": code, "reason": reason},
        )
