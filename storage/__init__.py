"""
Persisted client settings
"""

from .address_store import AddressStore

__all__ = ["AddressStore"]
