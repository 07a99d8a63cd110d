"""
Centralized configuration for the remote control client
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Connection settings (port and reconnect delay are fixed by the peer contract)
CONNECTION_CONFIG = {
    "scheme": "ws",
    "port": 8080,
    "reconnect_delay": 2.0,  # Constant backoff, no attempt limit
    "poll_interval": 0.1,  # Event loop queue poll in seconds
    "close_timeout": 1.0,  # Seconds to wait for the socket thread on shutdown
}

# Persisted settings store
STORE_CONFIG = {
    "path": os.getenv(
        "ADDRESS_STORE_PATH",
        os.path.join(os.path.expanduser("~"), ".vscode_remote", "settings.json"),
    ),
    "address_key": "ws_ip",
}

# Command vocabulary understood by the editor extension (token -> button label)
COMMANDS = {
    "openCommandPalette": "Command Palette",
    "openSourceControl": "Source Control",
    "closeTerminal": "Close Terminal",
    "insertBracesLeft": "Insert {",
    "insertBracesRight": "Insert }",
    "insertPipes": "Insert ||",
    "reloadWindow": "Reload Window",
}

HELP_TEXT = (
    "Run `vscrx.showQr` in your VS Code command palette to display "
    "the current IP address of the extension host."
)

# Display settings
DISPLAY_CONFIG = {
    "title": "VS Code Remote",
    "colors": {
        "connected": "\033[92m",     # Green
        "disconnected": "\033[93m",  # Yellow
        "error": "\033[91m",         # Red
        "info": "\033[94m",          # Blue
        "reset": "\033[0m"           # Reset
    },
    "emojis": {
        "warning": "⚠️",
        "error": "❌",
        "success": "✅",
        "stop": "🛑",
        "plug": "🔌",
        "rocket": "🚀"
    }
}

# Logging configuration
LOGGING_CONFIG = {
    "log_level": os.getenv("LOG_LEVEL", "WARNING"),
    "log_dir": os.getenv("LOG_DIR", "./logs"),
    "enable_file_logging": os.getenv("ENABLE_FILE_LOGGING", "false").lower() == "true",
    "enable_console_logging": os.getenv("ENABLE_CONSOLE_LOGGING", "true").lower() == "true",
    "structured_logging": os.getenv("ENVIRONMENT", "development").lower() == "production",
    "max_log_size_mb": int(os.getenv("MAX_LOG_SIZE_MB", "10")),
    "backup_count": int(os.getenv("LOG_BACKUP_COUNT", "5")),
}


def get_server_url(address: str) -> str:
    """Build the WebSocket URL for a host address"""
    return f"{CONNECTION_CONFIG['scheme']}://{address}:{CONNECTION_CONFIG['port']}"
