"""
Terminal surface replacing the handheld Home and Settings screens
"""

from typing import Callable, Dict, List, Optional

from config import COMMANDS, DISPLAY_CONFIG, HELP_TEXT
from core.command_channel import CommandChannel
from core.connection_manager import ConnectionManager
from core.connection_state import ConnectionStatus
from core.exceptions import AddressMissingError, NotConnectedError
from core.logging_config import get_logger
from events.event_bus import EventTypes
from storage.address_store import AddressStore

logger = get_logger(__name__)

QUIT_WORDS = ("quit", "exit", "q")


class RemoteConsole:
    """
    Line-oriented console.

    Commands can be pressed by number or token, `ip <address>` saves the
    address and reconnects, and the status line is reprinted whenever the
    connection status changes.
    """

    def __init__(self,
                 connection_manager: ConnectionManager,
                 command_channel: CommandChannel,
                 address_store: AddressStore,
                 commands: Optional[Dict[str, str]] = None,
                 input_func: Callable[[str], str] = input,
                 output: Callable[[str], None] = print,
                 use_color: bool = True):
        self.connection_manager = connection_manager
        self.command_channel = command_channel
        self.address_store = address_store
        self.commands = commands if commands is not None else COMMANDS
        self._tokens: List[str] = list(self.commands)
        self._input = input_func
        self._output = output
        self.use_color = use_color

        self.connection_manager.add_listener(self.on_status_change)

    def _color(self, name: str, text: str) -> str:
        if not self.use_color:
            return text
        colors = DISPLAY_CONFIG["colors"]
        return f"{colors[name]}{text}{colors['reset']}"

    def _status_color(self, status: ConnectionStatus) -> str:
        if status is ConnectionStatus.CONNECTED:
            return "connected"
        if status is ConnectionStatus.CONNECTION_FAILED:
            return "error"
        return "disconnected"

    def alert(self, title: str, message: str):
        color = "error" if title == "Error" else "info"
        self._output(self._color(color, f"{title}: {message}"))

    def render_status(self, status: Optional[ConnectionStatus] = None):
        status = status or self.connection_manager.current_status()
        self._output(self._color(self._status_color(status), f"Connection Status: {status.value}"))

    def render_home(self):
        emojis = DISPLAY_CONFIG["emojis"]
        self._output(DISPLAY_CONFIG["title"])
        self._output("=" * len(DISPLAY_CONFIG["title"]))

        if not self.connection_manager.address:
            self._output(self._color("disconnected", f"{emojis['warning']} IP address not set."))
            self._output(self._color("disconnected", HELP_TEXT))
            self._output("Type 'settings' to enter the IP address.")
        else:
            for index, token in enumerate(self._tokens, start=1):
                self._output(f"  [{index}] {self.commands[token]}")
            self._output("Press a button by number or command name.")

        self._output("Other input: ip <address>, settings, status, help, quit")
        self.render_status()

    def render_settings(self):
        address = self.address_store.get_address()
        self._output("Enter WebSocket IP (e.g. ip 192.168.1.100)")
        self._output(f"Current IP: {address or 'not set'}")
        self._output(HELP_TEXT)

    def render_stats(self):
        stats = self.connection_manager.get_stats()
        self.render_status()
        self._output(f"Address: {stats['address'] or 'not set'}")
        self._output(f"Connect attempts: {stats['connect_attempts']}, "
                     f"retries scheduled: {stats['retries_scheduled']}")
        if stats["last_error"]:
            self._output(f"Last error: {stats['last_error']}")

    def on_status_change(self, old_status: ConnectionStatus, new_status: ConnectionStatus):
        self.render_status(new_status)

    def press(self, token: str) -> bool:
        """Send a command; returns True when it went out"""
        try:
            self.command_channel.send(token)
        except AddressMissingError:
            self._output(self._color("disconnected", f"{DISPLAY_CONFIG['emojis']['warning']} IP address not set."))
            self.render_settings()
            return False
        except NotConnectedError as e:
            self.alert("Error", str(e))
            return False

        self._output(f"Sent: {self.commands.get(token, token)}")
        return True

    def save_address(self, address: str) -> bool:
        """Persist a new address and reconnect to it"""
        try:
            address = self.address_store.set_address(address)
        except AddressMissingError as e:
            self.alert("Error", str(e))
            return False
        except OSError as e:
            logger.error("Could not save address: %s", e)
            self.alert("Error", f"Could not save IP address: {e}")
            return False

        self.alert("Saved", "IP address saved!")
        self.connection_manager.event_bus.emit(EventTypes.ADDRESS_CHANGED, {
            "address": address,
        }, source="console")
        self.connection_manager.connect(address)
        return True

    def resolve_command(self, text: str) -> Optional[str]:
        if text.isdigit():
            index = int(text) - 1
            if 0 <= index < len(self._tokens):
                return self._tokens[index]
            return None
        if text in self.commands:
            return text
        return None

    def handle_line(self, line: str) -> bool:
        """
        Process one line of input

        Returns:
            False when the user asked to quit
        """
        text = line.strip()
        if not text:
            return True

        word, _, rest = text.partition(" ")
        lowered = word.lower()

        if lowered in QUIT_WORDS:
            return False
        if lowered in ("help", "home"):
            self.render_home()
        elif lowered == "settings":
            self.render_settings()
        elif lowered == "status":
            self.render_stats()
        elif lowered == "ip":
            self.save_address(rest)
        else:
            token = self.resolve_command(text)
            if token is None:
                self._output(f"Unknown input: {text}")
            else:
                self.press(token)
        return True

    def run(self):
        """Read input until quit or end of input"""
        self.render_home()
        while True:
            try:
                line = self._input("> ")
            except EOFError:
                break
            if not self.handle_line(line):
                break
