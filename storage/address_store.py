"""
Persistent key/value store for client settings
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from config import STORE_CONFIG
from core.exceptions import AddressMissingError
from core.logging_config import get_logger

logger = get_logger(__name__)


class AddressStore:
    """String key/value pairs saved as one JSON file"""

    def __init__(self,
                 path: Optional[str] = None,
                 address_key: str = STORE_CONFIG["address_key"]):
        """
        Initialize the store

        Args:
            path: JSON file location (created on first write)
            address_key: Key the server address is kept under
        """
        self.path = Path(path or STORE_CONFIG["path"])
        self.address_key = address_key
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read settings from %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed settings file %s", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: Dict[str, str]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".settings-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set_item(self, key: str, value: str):
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)
        logger.debug("Saved %s to %s", key, self.path)

    def remove_item(self, key: str):
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)

    def get_address(self) -> Optional[str]:
        """Saved server address, or None when unset"""
        address = self.get_item(self.address_key)
        if not address:
            return None
        return address.strip() or None

    def set_address(self, address: str) -> str:
        """
        Save the server address

        Raises:
            AddressMissingError: address is empty
        """
        address = (address or "").strip()
        if not address:
            raise AddressMissingError("IP address cannot be empty.")
        self.set_item(self.address_key, address)
        return address
