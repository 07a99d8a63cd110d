"""
User-facing console surface
"""

from .console import RemoteConsole

__all__ = ["RemoteConsole"]
