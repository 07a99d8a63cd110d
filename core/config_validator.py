"""
Configuration validation run before the client starts.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from config import CONNECTION_CONFIG, STORE_CONFIG, COMMANDS, LOGGING_CONFIG


class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""
    pass


class ConfigValidator:
    """Validates connection, storage and logging settings"""

    VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    def __init__(self,
                 connection_config: Optional[Dict[str, Any]] = None,
                 store_config: Optional[Dict[str, Any]] = None,
                 commands: Optional[Dict[str, str]] = None,
                 logging_config: Optional[Dict[str, Any]] = None):
        self.connection_config = connection_config if connection_config is not None else CONNECTION_CONFIG
        self.store_config = store_config if store_config is not None else STORE_CONFIG
        self.commands = commands if commands is not None else COMMANDS
        self.logging_config = logging_config if logging_config is not None else LOGGING_CONFIG
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_all(self) -> Tuple[bool, List[str], List[str]]:
        """
        Validate all configuration settings.

        Returns:
            Tuple of (is_valid, errors, warnings)
        """
        self.errors.clear()
        self.warnings.clear()

        self._validate_connection_config()
        self._validate_store_config()
        self._validate_commands()
        self._validate_logging_config()

        return len(self.errors) == 0, self.errors.copy(), self.warnings.copy()

    def _validate_connection_config(self):
        scheme = self.connection_config.get("scheme")
        if scheme not in ("ws", "wss"):
            self.errors.append(f"Connection scheme must be 'ws' or 'wss', got {scheme!r}")

        port = self.connection_config.get("port")
        if not isinstance(port, int) or not 1 <= port <= 65535:
            self.errors.append(f"Connection port must be an integer between 1 and 65535, got {port!r}")

        delay = self.connection_config.get("reconnect_delay")
        if not isinstance(delay, (int, float)) or delay <= 0:
            self.errors.append(f"Reconnect delay must be a positive number of seconds, got {delay!r}")
        elif delay < 0.5:
            self.warnings.append(f"Reconnect delay of {delay}s may flood the host with connection attempts")

        poll = self.connection_config.get("poll_interval")
        if not isinstance(poll, (int, float)) or poll <= 0:
            self.errors.append(f"Event loop poll interval must be positive, got {poll!r}")

    def _validate_store_config(self):
        path = self.store_config.get("path")
        if not path:
            self.errors.append("Settings store path is not set")
            return

        store_path = Path(path)
        if store_path.exists() and store_path.is_dir():
            self.errors.append(f"Settings store path {store_path} is a directory")

        parent = store_path.parent
        while not parent.exists() and parent != parent.parent:
            parent = parent.parent
        if parent.exists() and not parent.is_dir():
            self.errors.append(f"Settings store parent {parent} is not a directory")

        if not self.store_config.get("address_key"):
            self.errors.append("Settings store address key is not set")

    def _validate_commands(self):
        if not self.commands:
            self.warnings.append("No commands configured; only settings will be available")
        for token, label in self.commands.items():
            if not token or not token.strip():
                self.errors.append("Command tokens must be non-empty")
            if not label:
                self.warnings.append(f"Command {token} has no label")

    def _validate_logging_config(self):
        level = str(self.logging_config.get("log_level", "INFO")).upper()
        if level not in self.VALID_LOG_LEVELS:
            self.errors.append(f"Invalid log level {level!r}, expected one of {', '.join(self.VALID_LOG_LEVELS)}")

        if self.logging_config.get("max_log_size_mb", 1) <= 0:
            self.errors.append("max_log_size_mb must be positive")
        if self.logging_config.get("backup_count", 0) < 0:
            self.errors.append("backup_count cannot be negative")


def validate_startup_config(validator: Optional[ConfigValidator] = None):
    """
    Validate configuration before starting the client

    Raises:
        ConfigValidationError: if any setting is invalid
    """
    validator = validator or ConfigValidator()
    is_valid, errors, warnings = validator.validate_all()

    logger = logging.getLogger(__name__)
    for warning in warnings:
        logger.warning("Configuration warning: %s", warning)

    if not is_valid:
        raise ConfigValidationError("; ".join(errors))
